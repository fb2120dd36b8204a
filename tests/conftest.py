"""Shared builders for snapshot and fetch test data."""

from datetime import datetime

from statlink.models import (
    Asset,
    AssetClass,
    AssetMetadata,
    AssetVersion,
    ProjectStats,
    RawAssetRecord,
    RawAssetStats,
    Stat,
)

PREFIX = "https://blobs-infiniteugc.svc.halowaypoint.com/ugcstorage/map/a1/v1/"


def make_stat(
    recent_plays: int = 5,
    all_time_plays: int = 50,
    when: datetime | None = None,
    average_rating: float = 4.5,
) -> Stat:
    return Stat(
        snapshot_time=when or datetime(2024, 3, 1, 12, 30, 15),
        recent_plays=recent_plays,
        all_time_plays=all_time_plays,
        favorites=1,
        likes=2,
        bookmarks=0,
        average_rating=average_rating,
        number_of_ratings=10,
    )


def make_metadata(version: str = "V1", name: str = "Forge Map") -> AssetMetadata:
    return AssetMetadata(
        name=name,
        version=version,
        hero_image_url=f"{PREFIX}images/hero.png",
        thumbnail_image_url=f"{PREFIX}images/thumbnail.png",
        description="A map",
    )


def make_asset(
    asset_id: str = "A1",
    asset_class: AssetClass = AssetClass.MAP,
    version: str = "V1",
    stats: list[Stat] | None = None,
) -> Asset:
    return Asset(
        id=asset_id,
        asset_class=asset_class,
        versions=[AssetVersion(metadata=make_metadata(version), stat_records=stats or [make_stat()])],
    )


def make_record(
    asset_id: str = "A1",
    version_id: str = "V1",
    name: str = "Forge Map",
    prefix: str = PREFIX,
    recent_plays: int = 5,
    all_time_plays: int = 50,
) -> RawAssetRecord:
    return RawAssetRecord(
        asset_id=asset_id,
        version_id=version_id,
        public_name=name,
        description="A map",
        files_prefix=prefix,
        stats=RawAssetStats(
            plays_recent=recent_plays,
            plays_all_time=all_time_plays,
            favorites=1,
            likes=2,
            bookmarks=0,
            average_rating=4.5,
            number_of_ratings=10,
        ),
    )


def make_project(
    maps: list[RawAssetRecord] | None = None,
    variants: list[RawAssetRecord] | None = None,
) -> ProjectStats:
    return ProjectStats(map_links=maps or [], game_variant_links=variants or [])
