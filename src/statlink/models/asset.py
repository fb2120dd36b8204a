"""Snapshot tree data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AssetClass(Enum):
    """Kind of UGC asset tracked in a snapshot."""
    MAP = "maps"
    GAME_VARIANT = "game_variants"

    @property
    def container(self) -> str:
        """Name of the top-level snapshot directory holding this class."""
        return self.value


@dataclass(frozen=True)
class Stat:
    """One point-in-time engagement measurement for an asset version."""
    snapshot_time: datetime
    recent_plays: int
    all_time_plays: int
    favorites: int
    likes: int
    bookmarks: int
    average_rating: float
    number_of_ratings: int


@dataclass(frozen=True)
class AssetMetadata:
    """Display metadata for an asset version, as of the latest fetch."""
    name: str | None
    version: str | None
    hero_image_url: str | None
    thumbnail_image_url: str | None
    description: str | None


@dataclass
class AssetVersion:
    """A published revision of an asset and its stat history."""
    metadata: AssetMetadata
    stat_records: list[Stat] = field(default_factory=list)

    @property
    def version_id(self) -> str | None:
        return self.metadata.version


@dataclass
class Asset:
    """A map or game variant tracked across its versions."""
    id: str
    asset_class: AssetClass
    versions: list[AssetVersion] = field(default_factory=list)

    def find_version(self, version_id: str) -> AssetVersion | None:
        """Return the version with the given id, if this asset has one."""
        for version in self.versions:
            if version.version_id == version_id:
                return version
        return None
