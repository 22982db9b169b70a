"""
Unit tests for media categories, folder permissions and the permission model.
"""

import pytest

from fieldcrm.domain.errors import AssetNotFoundError, MissingNameError, UnknownCategoryError
from fieldcrm.domain.media import (
    FolderPermissions,
    MediaAsset,
    MediaCategory,
    MediaLibrary,
    MediaPermissionModel,
    build_blob_path,
)

from tests.fixtures import FixedClock


@pytest.fixture
def model():
    return MediaPermissionModel(FixedClock())


class TestMediaCategory:
    """Test category parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("inspection", MediaCategory.INSPECTION),
            ("Install", MediaCategory.INSTALL),
            ("Documents", MediaCategory.DOCUMENT),
            (MediaCategory.DOCUMENT, MediaCategory.DOCUMENT),
        ],
    )
    def test_parse_accepts_values_and_labels(self, value, expected):
        assert MediaCategory.parse(value) is expected

    @pytest.mark.parametrize("value", ["photos", "", None, 3])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(UnknownCategoryError):
            MediaCategory.parse(value)


class TestFolderPermissions:
    """Test per-category default-share values."""

    def test_missing_default_is_not_shared(self):
        assert FolderPermissions().default_for("install") is False

    def test_with_default_returns_new_value(self):
        perms = FolderPermissions()
        updated = perms.with_default("inspection", True)
        assert updated.default_for(MediaCategory.INSPECTION) is True
        assert perms.default_for(MediaCategory.INSPECTION) is False

    def test_to_dict_lists_every_category(self):
        assert FolderPermissions({"install": True}).to_dict() == {
            "inspection": False, "install": True, "document": False,
        }

    def test_from_dict_accepts_labels_and_drops_unknown_keys(self):
        perms = FolderPermissions.from_dict({"Inspection": True, "Videos": True})
        assert perms.default_for("inspection") is True
        assert perms.to_dict()["document"] is False


class TestMediaPermissionModel:
    """Test visibility inheritance and overrides."""

    def test_new_asset_inherits_folder_default(self, model):
        perms = FolderPermissions({"install": True})
        asset = model.create_asset("install", perms, url="mem://a")
        assert asset.shared is model.default_for("install", perms) is True

    def test_explicit_value_wins(self, model):
        perms = FolderPermissions({"install": True})
        asset = model.create_asset("install", perms, url="mem://a", explicit_shared=False)
        assert asset.shared is False

    def test_unknown_category_fails_even_with_explicit_value(self, model):
        with pytest.raises(UnknownCategoryError):
            model.resolve_shared("videos", FolderPermissions(), explicit_shared=True)

    def test_documents_require_a_name(self, model):
        with pytest.raises(MissingNameError):
            model.create_asset("document", FolderPermissions(), url="mem://d")

    def test_documented_folder_default_scenario(self, model):
        """Changing the folder default never touches existing assets."""
        # Arrange
        perms = FolderPermissions({"inspection": False})
        library = MediaLibrary()

        # Act
        a = model.create_asset("inspection", perms, url="mem://a", asset_id="A")
        library = library.add(a)
        perms = model.set_folder_default(perms, "inspection", True)
        b = model.create_asset("inspection", perms, url="mem://b", asset_id="B")
        library = library.add(b)
        perms = model.set_folder_default(perms, "inspection", False)

        # Assert
        assert library.find("A").shared is False
        assert library.find("B").shared is True
        assert perms.default_for("inspection") is False

    def test_set_asset_shared_overrides_one_asset(self, model):
        perms = FolderPermissions()
        library = MediaLibrary().add(model.create_asset("install", perms, "mem://a", asset_id="A"))
        library = library.add(model.create_asset("install", perms, "mem://b", asset_id="B"))

        library = model.set_asset_shared(library, "A", True)

        assert library.find("A").shared is True
        assert library.find("B").shared is False
        assert [a.asset_id for a in model.customer_visible(library)] == ["A"]

    def test_set_asset_shared_unknown_id(self, model):
        with pytest.raises(AssetNotFoundError):
            model.set_asset_shared(MediaLibrary(), "missing", True)

    def test_recategorize_keeps_shared_and_moves_folder(self, model):
        perms = FolderPermissions({"inspection": True})
        library = MediaLibrary().add(
            model.create_asset("inspection", perms, "mem://a", asset_id="A")
        )

        library = model.recategorize(library, "A", "install")

        moved = library.find("A")
        assert moved.category is MediaCategory.INSTALL
        assert moved.shared is True
        assert library.in_category(MediaCategory.INSPECTION) == ()

    def test_recategorize_to_document_requires_name(self, model):
        library = MediaLibrary().add(
            model.create_asset("install", FolderPermissions(), "mem://a", asset_id="A")
        )
        with pytest.raises(MissingNameError):
            model.recategorize(library, "A", "document")


class TestMediaLibrary:
    """Test the per-category media collection."""

    def test_nameless_document_record_loads(self):
        asset = MediaAsset.from_dict({
            "id": "d1", "url": "mem://d1", "type": "document",
            "isSharedWithCustomer": False, "createdAt": "2024-01-01T00:00:00.000Z",
        })

        assert asset.category is MediaCategory.DOCUMENT
        assert asset.name is None
        assert "name" not in asset.to_dict()

    def test_nameless_document_can_move_out_of_documents(self, model):
        legacy = MediaAsset.from_dict({
            "id": "d1", "url": "mem://d1", "type": "document",
            "isSharedWithCustomer": True, "createdAt": 1704067200000,
        })
        library = MediaLibrary().add(legacy)

        library = model.recategorize(library, "d1", "inspection")

        assert library.find("d1").category is MediaCategory.INSPECTION
        assert library.find("d1").shared is True

    def test_round_trip_through_media_map(self, model):
        perms = FolderPermissions({"document": True})
        library = MediaLibrary().add(
            model.create_asset("document", perms, "mem://d", name="Contract.pdf", asset_id="D")
        )
        assert MediaLibrary.from_dict(library.to_dict()) == library

    def test_remove(self, model):
        library = MediaLibrary().add(
            model.create_asset("install", FolderPermissions(), "mem://a", asset_id="A")
        )
        assert len(library.remove("A")) == 0
        with pytest.raises(AssetNotFoundError):
            library.remove("B")


class TestBlobPath:
    """Test blob path namespacing."""

    def test_layout(self):
        path = build_blob_path("acme", "job-1", MediaCategory.INSTALL, "abc")
        assert path == "acme/job-1/install/abc"

    @pytest.mark.parametrize("company", ["", "a/b"])
    def test_rejects_bad_segments(self, company):
        with pytest.raises(ValueError):
            build_blob_path(company, "job-1", MediaCategory.INSTALL, "abc")
