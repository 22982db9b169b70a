"""
Media Value Objects

Media categories and the per-category default-share policy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Union

from ..errors import UnknownCategoryError


class MediaCategory(Enum):
    """The three fixed folders a job's media lives in."""

    INSPECTION = "inspection"
    INSTALL = "install"
    DOCUMENT = "document"

    @property
    def folder_label(self) -> str:
        """Folder name shown to users and used by older lead records."""
        return _FOLDER_LABELS[self]

    @classmethod
    def parse(cls, value: Union["MediaCategory", str]) -> "MediaCategory":
        """
        Resolve a category from its value or folder label.

        Accepts ``"inspection"`` as well as ``"Inspection"``; ``"Documents"``
        maps to DOCUMENT.

        Raises:
            UnknownCategoryError: If value names none of the three categories
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
            for category, label in _FOLDER_LABELS.items():
                if label == value:
                    return category
        raise UnknownCategoryError(f"Unknown media category: {value!r}")


_FOLDER_LABELS = {
    MediaCategory.INSPECTION: "Inspection",
    MediaCategory.INSTALL: "Install",
    MediaCategory.DOCUMENT: "Documents",
}


@dataclass(frozen=True)
class FolderPermissions:
    """
    Default ``shared`` value applied to new uploads, per category.

    A category with no recorded default is not shared. Changing a default
    never touches media that already exists.
    """

    defaults: Mapping[MediaCategory, bool] = field(default_factory=dict)

    def __post_init__(self):
        # normalize to a private copy so callers cannot mutate it afterwards
        normalized = {MediaCategory.parse(k): bool(v) for k, v in self.defaults.items()}
        object.__setattr__(self, "defaults", normalized)

    def default_for(self, category: Union[MediaCategory, str]) -> bool:
        return self.defaults.get(MediaCategory.parse(category), False)

    def with_default(self, category: Union[MediaCategory, str], value: bool) -> "FolderPermissions":
        updated = dict(self.defaults)
        updated[MediaCategory.parse(category)] = bool(value)
        return FolderPermissions(updated)

    def to_dict(self) -> Dict[str, bool]:
        """Every category is written, missing ones as False."""
        return {category.value: self.default_for(category) for category in MediaCategory}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FolderPermissions":
        """
        Create from a persisted map.

        Keys may be category values or folder labels. Keys that name no
        category are dropped.
        """
        defaults = {}
        for key, value in (data or {}).items():
            try:
                defaults[MediaCategory.parse(key)] = bool(value)
            except UnknownCategoryError:
                continue
        return cls(defaults)

    @classmethod
    def closed(cls) -> "FolderPermissions":
        """All categories private."""
        return cls({category: False for category in MediaCategory})
