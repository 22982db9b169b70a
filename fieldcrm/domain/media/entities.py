"""
Media Entities

Photos and documents attached to a job or a draft lead, and the
per-category collection that holds them.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ..errors import AssetNotFoundError
from .value_objects import MediaCategory


def _parse_timestamp(value: Any) -> datetime:
    # legacy lead files stored epoch milliseconds, job files ISO strings
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MediaAsset:
    """
    Entity representing one uploaded photo or document.

    ``shared`` decides whether the customer can see it. New documents are
    named on upload, but records saved from lead drafts may have no name.
    """

    asset_id: str
    url: str
    category: MediaCategory
    shared: bool
    created_at: datetime
    name: Optional[str] = None
    storage_path: Optional[str] = None

    def __post_init__(self):
        """Validate asset fields."""
        if not self.asset_id:
            raise ValueError("Asset id is required")
        if not self.url:
            raise ValueError("Asset url is required")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.asset_id,
            "url": self.url,
            "type": self.category.value,
            "isSharedWithCustomer": self.shared,
            "createdAt": self.created_at.isoformat(),
        }
        if self.name:
            data["name"] = self.name
        if self.storage_path:
            data["storagePath"] = self.storage_path
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MediaAsset":
        """
        Create from a persisted record.

        Reads both the job shape (``type`` / ``isSharedWithCustomer``) and
        the older lead shape (folder-label ``category`` / ``isPublic``).
        """
        if "type" in data and data["type"] in {c.value for c in MediaCategory}:
            category = MediaCategory(data["type"])
        else:
            category = MediaCategory.parse(data.get("category", ""))

        if "isSharedWithCustomer" in data:
            shared = bool(data["isSharedWithCustomer"])
        else:
            shared = bool(data.get("isPublic", False))

        return cls(
            asset_id=str(data["id"]),
            url=data["url"],
            category=category,
            shared=shared,
            created_at=_parse_timestamp(data.get("createdAt")),
            name=data.get("name") or None,
            storage_path=data.get("storagePath"),
        )


@dataclass(frozen=True)
class MediaLibrary:
    """
    A job's media, partitioned by category.

    Order within each category is upload order. All operations return a new
    library.
    """

    folders: Mapping[MediaCategory, Tuple[MediaAsset, ...]] = field(default_factory=dict)

    def __post_init__(self):
        normalized = {category: tuple(self.folders.get(category, ())) for category in MediaCategory}
        for category, assets in normalized.items():
            for asset in assets:
                if asset.category is not category:
                    raise ValueError(
                        f"Asset {asset.asset_id} is {asset.category.value}, "
                        f"not {category.value}"
                    )
        object.__setattr__(self, "folders", normalized)

    def __iter__(self) -> Iterator[MediaAsset]:
        for category in MediaCategory:
            yield from self.folders[category]

    def __len__(self) -> int:
        return sum(len(assets) for assets in self.folders.values())

    def in_category(self, category: MediaCategory) -> Tuple[MediaAsset, ...]:
        return self.folders[MediaCategory.parse(category)]

    def find(self, asset_id: str) -> MediaAsset:
        """
        Look up an asset by id.

        Raises:
            AssetNotFoundError: If no asset has this id
        """
        for asset in self:
            if asset.asset_id == asset_id:
                return asset
        raise AssetNotFoundError(f"Media asset {asset_id} not found")

    def contains(self, asset_id: str) -> bool:
        return any(asset.asset_id == asset_id for asset in self)

    def add(self, asset: MediaAsset) -> "MediaLibrary":
        folders = dict(self.folders)
        folders[asset.category] = folders[asset.category] + (asset,)
        return MediaLibrary(folders)

    def replace(self, asset: MediaAsset) -> "MediaLibrary":
        """
        Swap in a new version of an existing asset.

        A category change moves the asset to the end of its new folder.
        """
        current = self.find(asset.asset_id)
        folders = dict(self.folders)
        if current.category is asset.category:
            folders[asset.category] = tuple(
                asset if a.asset_id == asset.asset_id else a
                for a in folders[asset.category]
            )
        else:
            folders[current.category] = tuple(
                a for a in folders[current.category] if a.asset_id != asset.asset_id
            )
            folders[asset.category] = folders[asset.category] + (asset,)
        return MediaLibrary(folders)

    def remove(self, asset_id: str) -> "MediaLibrary":
        current = self.find(asset_id)
        folders = dict(self.folders)
        folders[current.category] = tuple(
            a for a in folders[current.category] if a.asset_id != asset_id
        )
        return MediaLibrary(folders)

    def shared_assets(self) -> List[MediaAsset]:
        """Assets the customer may see."""
        return [asset for asset in self if asset.shared]

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            category.value: [asset.to_dict() for asset in self.folders[category]]
            for category in MediaCategory
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MediaLibrary":
        """Create from the persisted ``media`` map (category -> records)."""
        library = cls()
        for key, records in (data or {}).items():
            category = MediaCategory.parse(key)
            for record in records or ():
                asset = MediaAsset.from_dict(record)
                if asset.category is not category:
                    asset = replace(asset, category=category)
                library = library.add(asset)
        return library

    @classmethod
    def from_records(cls, records: List[Mapping[str, Any]]) -> "MediaLibrary":
        """Create from a flat legacy ``files`` array."""
        library = cls()
        for record in records or ():
            library = library.add(MediaAsset.from_dict(record))
        return library
