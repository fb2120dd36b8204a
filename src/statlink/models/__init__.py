"""Data models for the statlink application."""

from .asset import Asset, AssetClass, AssetMetadata, AssetVersion, Stat
from .auth import Clearance, OAuthToken, SpartanToken, XboxTicket
from .config import AppConfig
from .raw import ProjectStats, RawAssetRecord, RawAssetStats

__all__ = [
    "AppConfig",
    "Asset",
    "AssetClass",
    "AssetMetadata",
    "AssetVersion",
    "Clearance",
    "OAuthToken",
    "ProjectStats",
    "RawAssetRecord",
    "RawAssetStats",
    "SpartanToken",
    "Stat",
    "XboxTicket",
]
