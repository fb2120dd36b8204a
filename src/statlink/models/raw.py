"""Raw records returned by the UGC discovery service."""

from dataclasses import dataclass, field
from typing import Any


def _as_int(value: Any) -> int:
    return int(value) if value is not None else 0


def _as_float(value: Any) -> float:
    return float(value) if value is not None else 0.0


@dataclass(frozen=True)
class RawAssetStats:
    """Engagement counters as reported for one asset version."""
    plays_recent: int
    plays_all_time: int
    favorites: int
    likes: int
    bookmarks: int
    average_rating: float
    number_of_ratings: int

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "RawAssetStats":
        data = data or {}
        return cls(
            plays_recent=_as_int(data.get("PlaysRecent")),
            plays_all_time=_as_int(data.get("PlaysAllTime")),
            favorites=_as_int(data.get("Favorites")),
            likes=_as_int(data.get("Likes")),
            bookmarks=_as_int(data.get("Bookmarks")),
            average_rating=_as_float(data.get("AverageRating")),
            number_of_ratings=_as_int(data.get("NumberOfRatings")),
        )


@dataclass(frozen=True)
class RawAssetRecord:
    """One map or game-variant link from a project response."""
    asset_id: str
    version_id: str
    public_name: str | None
    description: str | None
    files_prefix: str
    stats: RawAssetStats

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RawAssetRecord":
        """Build a record from a discovery ``AssetLink`` object.

        Raises:
            KeyError: If the link has no ``AssetId`` or ``VersionId``
        """
        files = data.get("Files") or {}
        return cls(
            asset_id=str(data["AssetId"]),
            version_id=str(data["VersionId"]),
            public_name=data.get("PublicName"),
            description=data.get("Description"),
            files_prefix=str(files.get("Prefix") or ""),
            stats=RawAssetStats.from_api(data.get("AssetStats")),
        )


@dataclass(frozen=True)
class ProjectStats:
    """Map and game-variant links of a UGC project."""
    map_links: list[RawAssetRecord] = field(default_factory=list)
    game_variant_links: list[RawAssetRecord] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ProjectStats":
        return cls(
            map_links=[RawAssetRecord.from_api(link) for link in data.get("MapLinks") or []],
            game_variant_links=[
                RawAssetRecord.from_api(link) for link in data.get("UgcGameVariantLinks") or []
            ],
        )
