"""
Media Permission Services

Decides who can see a job's photos and documents.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from ..errors import MissingNameError
from .entities import MediaAsset, MediaLibrary
from .value_objects import FolderPermissions, MediaCategory


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaPermissionModel:
    """
    Domain service for media visibility.

    A folder default is a policy for new uploads only: it is read once,
    when an asset is created, and never pushed onto existing assets. Each
    asset can then be overridden on its own.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        """
        Initialize the permission model.

        Args:
            clock: Source of creation timestamps
        """
        self._clock = clock

    @staticmethod
    def default_for(
        category: Union[MediaCategory, str], folder_permissions: FolderPermissions
    ) -> bool:
        """
        Get the default share value for a category.

        Args:
            category: Media category (value or folder label)
            folder_permissions: The job's or draft's folder defaults

        Returns:
            The recorded default, or False when none is recorded

        Raises:
            UnknownCategoryError: If category is not one of the three
        """
        return folder_permissions.default_for(category)

    def resolve_shared(
        self,
        category: Union[MediaCategory, str],
        folder_permissions: FolderPermissions,
        explicit_shared: Optional[bool] = None,
    ) -> bool:
        """Initial ``shared`` value for a new asset; an explicit value wins."""
        default = self.default_for(category, folder_permissions)
        if explicit_shared is not None:
            return bool(explicit_shared)
        return default

    def create_asset(
        self,
        category: Union[MediaCategory, str],
        folder_permissions: FolderPermissions,
        url: str,
        name: Optional[str] = None,
        explicit_shared: Optional[bool] = None,
        asset_id: Optional[str] = None,
        storage_path: Optional[str] = None,
    ) -> MediaAsset:
        """
        Create an asset for a completed upload.

        Args:
            category: Target folder
            folder_permissions: Defaults in force at upload time
            url: Blob store URL of the uploaded content
            name: Display name (required for documents)
            explicit_shared: Caller override of the folder default
            asset_id: Identifier, generated when omitted
            storage_path: Blob path the content was uploaded to

        Returns:
            New MediaAsset

        Raises:
            UnknownCategoryError: If category is not one of the three
            MissingNameError: If a document has no name
        """
        resolved = MediaCategory.parse(category)
        self.require_name(resolved, name)
        return MediaAsset(
            asset_id=asset_id or uuid.uuid4().hex,
            url=url,
            category=resolved,
            shared=self.resolve_shared(resolved, folder_permissions, explicit_shared),
            created_at=self._clock(),
            name=name,
            storage_path=storage_path,
        )

    @staticmethod
    def require_name(category: MediaCategory, name: Optional[str]) -> None:
        """Raise MissingNameError when a document would be filed without a name."""
        if category is MediaCategory.DOCUMENT and not (name or "").strip():
            raise MissingNameError("Documents require a display name")

    @staticmethod
    def set_folder_default(
        folder_permissions: FolderPermissions,
        category: Union[MediaCategory, str],
        value: bool,
    ) -> FolderPermissions:
        """Change the default for future uploads in ``category``."""
        return folder_permissions.with_default(category, value)

    @staticmethod
    def set_asset_shared(library: MediaLibrary, asset_id: str, value: bool) -> MediaLibrary:
        """
        Override one asset's visibility regardless of its folder default.

        Raises:
            AssetNotFoundError: If asset_id is not in the library
        """
        asset = library.find(asset_id)
        return library.replace(replace(asset, shared=bool(value)))

    @staticmethod
    def recategorize(
        library: MediaLibrary, asset_id: str, category: Union[MediaCategory, str]
    ) -> MediaLibrary:
        """
        Move an asset to another folder, keeping its ``shared`` flag.

        Raises:
            UnknownCategoryError: If category is not one of the three
            AssetNotFoundError: If asset_id is not in the library
            MissingNameError: If a nameless asset is moved into documents
        """
        target = MediaCategory.parse(category)
        asset = library.find(asset_id)
        if asset.category is target:
            return library
        MediaPermissionModel.require_name(target, asset.name)
        return library.replace(replace(asset, category=target))

    @staticmethod
    def customer_visible(library: MediaLibrary):
        """Assets to show in the customer-facing view."""
        return library.shared_assets()
