"""Merges freshly fetched asset stats into a snapshot tree."""

import copy
from collections.abc import Callable, Iterable
from datetime import datetime

import structlog

from ..models import Asset, AssetClass, AssetMetadata, AssetVersion, ProjectStats, RawAssetRecord, Stat

log = structlog.stdlib.get_logger()


def build_stat(record: RawAssetRecord, snapshot_time: datetime) -> Stat:
    stats = record.stats
    return Stat(
        snapshot_time=snapshot_time,
        recent_plays=stats.plays_recent,
        all_time_plays=stats.plays_all_time,
        favorites=stats.favorites,
        likes=stats.likes,
        bookmarks=stats.bookmarks,
        average_rating=stats.average_rating,
        number_of_ratings=stats.number_of_ratings,
    )


def build_metadata(record: RawAssetRecord) -> AssetMetadata:
    """Derive version metadata, including image URLs, from a raw record."""
    return AssetMetadata(
        name=record.public_name,
        version=record.version_id,
        hero_image_url=f"{record.files_prefix}images/hero.png",
        thumbnail_image_url=f"{record.files_prefix}images/thumbnail.png",
        description=record.description,
    )


def find_asset(assets: list[Asset], asset_id: str, asset_class: AssetClass) -> Asset | None:
    """Find an asset by its (class, id) key."""
    for asset in assets:
        if asset.id == asset_id and asset.asset_class == asset_class:
            return asset
    return None


class SnapshotMerger:
    """Folds raw asset records into an asset tree.

    Stats are only ever appended and nodes only ever added: versions missing
    from a fetch keep their history untouched.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock

    def merge(self, assets: list[Asset], project: ProjectStats) -> list[Asset]:
        """Merge a project's map and game-variant links into ``assets``.

        The input tree is consumed: a new tree is returned and the caller's
        list is left as it was. All stats added by one call share a single
        snapshot time.
        """
        snapshot_time = self.clock()
        merged = self.merge_records(assets, project.map_links, AssetClass.MAP, snapshot_time)
        return self.merge_records(merged, project.game_variant_links, AssetClass.GAME_VARIANT, snapshot_time)

    def merge_records(
        self,
        assets: list[Asset],
        records: Iterable[RawAssetRecord],
        asset_class: AssetClass,
        snapshot_time: datetime | None = None,
    ) -> list[Asset]:
        """Merge records of a single asset class into a copy of ``assets``."""
        if snapshot_time is None:
            snapshot_time = self.clock()

        merged = copy.deepcopy(assets)
        appended = created_versions = created_assets = 0

        for record in records:
            stat = build_stat(record, snapshot_time)
            asset = find_asset(merged, record.asset_id, asset_class)

            if asset is None:
                asset = Asset(id=record.asset_id, asset_class=asset_class)
                asset.versions.append(AssetVersion(metadata=build_metadata(record), stat_records=[stat]))
                merged.append(asset)
                created_assets += 1
                continue

            version = asset.find_version(record.version_id)
            if version is None:
                asset.versions.append(AssetVersion(metadata=build_metadata(record), stat_records=[stat]))
                created_versions += 1
            else:
                version.metadata = build_metadata(record)
                version.stat_records.append(stat)
                appended += 1

        log.info(
            "Merged asset records",
            asset_class=asset_class.name,
            appended_stats=appended,
            new_versions=created_versions,
            new_assets=created_assets,
        )
        return merged
