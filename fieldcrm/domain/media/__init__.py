"""
Media Domain

Job photos and documents, their folders, and customer visibility rules.
"""

from .entities import MediaAsset, MediaLibrary
from .services import MediaPermissionModel
from .storage_repository import BlobStorage, build_blob_path
from .value_objects import FolderPermissions, MediaCategory

__all__ = [
    "MediaAsset",
    "MediaLibrary",
    "MediaCategory",
    "FolderPermissions",
    "MediaPermissionModel",
    "BlobStorage",
    "build_blob_path",
]
