"""On-disk snapshot store: one metadata file and one TSV time series per asset version.

Layout under the output root::

    maps/<assetId>/<versionId>/metadata.json
    maps/<assetId>/<versionId>/stats.tsv
    game_variants/<assetId>/<versionId>/metadata.json
    game_variants/<assetId>/<versionId>/stats.tsv
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from ..models import Asset, AssetClass, AssetMetadata, AssetVersion, Stat
from .errors import LoadCorruptionError, SnapshotWriteError
from .filesystem import FileSystemService

log = structlog.stdlib.get_logger()

METADATA_FILE = "metadata.json"
STATS_FILE = "stats.tsv"
STATS_COLUMNS = (
    "SnapshotTime",
    "RecentPlays",
    "AllTimePlays",
    "Favorites",
    "Likes",
    "Bookmarks",
    "AverageRating",
    "NumberOfRatings",
)
STATS_HEADER = "\t".join(STATS_COLUMNS)

# Timestamps written by the .NET version of the tool in the en-US culture,
# with a 24-hour fallback for machines that used one
_LEGACY_TIME_FORMATS = ("%m/%d/%Y %I:%M:%S %p", "%m/%d/%Y %H:%M:%S")


def classify_container(name: str) -> AssetClass:
    """Map a top-level snapshot directory name to its asset class."""
    if name.lower() == AssetClass.GAME_VARIANT.container:
        return AssetClass.GAME_VARIANT
    return AssetClass.MAP


def format_time(value: datetime) -> str:
    return value.isoformat()


def parse_time(text: str) -> datetime:
    """Parse a snapshot time written by this tool or by its predecessor.

    Raises:
        ValueError: If the text matches none of the known forms
    """
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _LEGACY_TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized snapshot time: {text!r}")


def format_stat_row(stat: Stat) -> str:
    return "\t".join([
        format_time(stat.snapshot_time),
        str(stat.recent_plays),
        str(stat.all_time_plays),
        str(stat.favorites),
        str(stat.likes),
        str(stat.bookmarks),
        str(stat.average_rating),
        str(stat.number_of_ratings),
    ])


def parse_stat_row(fields: list[str]) -> Stat:
    """Decode one TSV data row positionally.

    Raises:
        ValueError: If the row is short or a field is malformed
    """
    if len(fields) < len(STATS_COLUMNS):
        raise ValueError(f"Expected {len(STATS_COLUMNS)} fields, got {len(fields)}")
    return Stat(
        snapshot_time=parse_time(fields[0]),
        recent_plays=int(fields[1]),
        all_time_plays=int(fields[2]),
        favorites=int(fields[3]),
        likes=int(fields[4]),
        bookmarks=int(fields[5]),
        average_rating=float(fields[6]),
        number_of_ratings=int(fields[7]),
    )


def format_stats(stats: list[Stat]) -> str:
    lines = [STATS_HEADER] + [format_stat_row(stat) for stat in stats]
    return "\n".join(lines) + "\n"


def parse_stats(text: str) -> list[Stat]:
    """Decode a stats file, skipping any row whose first column is the header name."""
    stats = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = line.split("\t")
        if fields[0] == STATS_COLUMNS[0]:
            continue
        stats.append(parse_stat_row(fields))
    return stats


def metadata_to_dict(metadata: AssetMetadata) -> dict[str, str | None]:
    return {
        "Name": metadata.name,
        "Version": metadata.version,
        "HeroImageUrl": metadata.hero_image_url,
        "ThumbnailImageUrl": metadata.thumbnail_image_url,
        "Description": metadata.description,
    }


def metadata_from_dict(data: dict[str, Any]) -> AssetMetadata:
    return AssetMetadata(
        name=data.get("Name"),
        version=data.get("Version"),
        hero_image_url=data.get("HeroImageUrl"),
        thumbnail_image_url=data.get("ThumbnailImageUrl"),
        description=data.get("Description"),
    )


class SnapshotStore:
    """Reads and writes the asset tree under an output root directory."""

    def __init__(self, filesystem: FileSystemService | None = None) -> None:
        self.filesystem = filesystem or FileSystemService()

    def load(self, root: Path) -> list[Asset]:
        """Reconstruct the asset tree persisted under ``root``.

        Returns:
            The persisted assets, or an empty list if ``root`` does not exist

        Raises:
            LoadCorruptionError: If any part of the directory walk fails
        """
        if not root.exists():
            log.info("No existing snapshot, starting fresh", root=str(root))
            return []

        current = root
        try:
            assets: list[Asset] = []
            for container_dir in self.filesystem.list_directories(root):
                current = container_dir
                asset_class = classify_container(container_dir.name)
                for asset_dir in self.filesystem.list_directories(container_dir):
                    current = asset_dir
                    asset = Asset(id=asset_dir.name, asset_class=asset_class)
                    for version_dir in self.filesystem.list_directories(asset_dir):
                        current = version_dir
                        asset.versions.append(self._load_version(version_dir))
                    assets.append(asset)
        except LoadCorruptionError:
            raise
        except Exception as e:
            raise LoadCorruptionError(
                "The existing snapshot could not be read",
                path=str(current),
                original_error=e,
            ) from e

        log.info(
            "Snapshot loaded",
            root=str(root),
            assets=len(assets),
            versions=sum(len(a.versions) for a in assets),
        )
        return assets

    def _load_version(self, version_dir: Path) -> AssetVersion:
        metadata_path = version_dir / METADATA_FILE
        if not metadata_path.is_file():
            raise LoadCorruptionError("Version folder has no metadata file", path=str(version_dir))

        metadata = metadata_from_dict(self.filesystem.load_json(metadata_path))
        # The folder name is the version id and the metadata must agree with it
        if metadata.version is None:
            metadata = replace(metadata, version=version_dir.name)
        elif not isinstance(metadata.version, str):
            raise ValueError(f"Version must be a string, got {type(metadata.version).__name__}")
        elif metadata.version != version_dir.name:
            raise ValueError(
                f"Metadata version {metadata.version!r} does not match folder {version_dir.name!r}"
            )

        stats_path = version_dir / STATS_FILE
        stats = parse_stats(self.filesystem.read_text(stats_path)) if stats_path.is_file() else []
        return AssetVersion(metadata=metadata, stat_records=stats)

    def load_or_empty(self, root: Path) -> list[Asset]:
        """Load the snapshot, falling back to an empty tree if it is corrupted.

        A corrupted snapshot turns the run into an overwrite: the partial tree
        is discarded and the cause is logged.
        """
        try:
            return self.load(root)
        except LoadCorruptionError as e:
            log.warning(
                "Existing snapshot could not be deserialized, it will be overwritten with a new snapshot",
                root=str(root),
                path=e.path,
                error=e.technical_details,
            )
            return []

    def write(self, assets: list[Asset], root: Path) -> None:
        """Persist every asset version under ``root``, overwriting existing files.

        Raises:
            SnapshotWriteError: On the first failure; versions written before
                it stay on disk
        """
        written = 0
        for asset in assets:
            for version in asset.versions:
                version_dir = root / asset.asset_class.container / asset.id / str(version.version_id)
                try:
                    self.filesystem.ensure_directory(version_dir)
                    self.filesystem.write_text(version_dir / STATS_FILE, format_stats(version.stat_records))
                    self.filesystem.save_json(metadata_to_dict(version.metadata), version_dir / METADATA_FILE)
                except (OSError, ValueError) as e:
                    raise SnapshotWriteError(
                        "Could not write the asset snapshot",
                        path=str(version_dir),
                        original_error=e,
                    ) from e
                written += 1

        log.info("Snapshot written", root=str(root), assets=len(assets), versions=written)
