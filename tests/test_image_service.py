"""Tests for ImageService and the batched image lookups."""

import pytest

from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, InternalError, NotFoundError
from catalog.models import ImageType, ModuleType
from catalog.services.image_service import MediaFile, fetch_primary_urls


class TestImageService:
    def test_upload_records_url_and_key(self, image_svc, mock_storage, make_product, png):
        product = make_product()

        uploaded = image_svc.upload_image(png, "product", product["id"], "primary")

        key, data, content_type = mock_storage.put.call_args.args
        assert key.endswith(".png")
        assert data == png.content
        assert content_type == "image/png"
        assert uploaded["url"] == f"https://cdn.example.com/{key}"

        images = image_svc.find_by_module(ModuleType.PRODUCT, product["id"])
        assert images[0]["objectKey"] == key
        assert images[0]["bucket"] == "test-bucket"

    def test_rejects_disallowed_mime_type(self, image_svc, make_product):
        product = make_product()
        pdf = MediaFile(filename="doc.pdf", content_type="application/pdf", content=b"%PDF")

        with pytest.raises(BadRequestError):
            image_svc.upload_image(pdf, ModuleType.PRODUCT, product["id"], ImageType.PRIMARY)

    def test_rejects_unknown_module_type(self, image_svc, png):
        with pytest.raises(BadRequestError):
            image_svc.upload_image(png, "warehouse", "x", ImageType.PRIMARY)

    def test_missing_owner(self, image_svc, mock_storage, png):
        with pytest.raises(NotFoundError):
            image_svc.upload_image(png, ModuleType.PRODUCT, "missing", ImageType.PRIMARY)
        mock_storage.put.assert_not_called()

    def test_storage_failure_is_internal(self, image_svc, mock_storage, make_product, png):
        product = make_product()
        mock_storage.put.side_effect = RuntimeError("connection reset")

        with pytest.raises(InternalError):
            image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.PRIMARY)

    def test_find_by_module_filters_type_newest_first(self, image_svc, make_product, png):
        product = make_product()
        first = image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.GALLERY)
        second = image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.GALLERY)
        image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.PRIMARY)

        gallery = image_svc.find_by_module(ModuleType.PRODUCT, product["id"], ImageType.GALLERY)
        assert [i["id"] for i in gallery] == [second["imageId"], first["imageId"]]

    def test_remove_hides_image(self, image_svc, make_product, png):
        product = make_product()
        uploaded = image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.PRIMARY)

        image_svc.remove(uploaded["imageId"])

        assert image_svc.find_by_module(ModuleType.PRODUCT, product["id"]) == []
        with pytest.raises(NotFoundError):
            image_svc.remove(uploaded["imageId"])

    def test_primary_urls_batched_across_owner_types(self, image_svc, make_product, make_variant, png):
        product = make_product()
        variant = make_variant(product["id"], "S1", 10)
        image_svc.upload_image(png, ModuleType.PRODUCT, product["id"], ImageType.PRIMARY)
        image_svc.upload_image(png, ModuleType.VARIANT, variant["id"], ImageType.PRIMARY)
        image_svc.upload_image(png, ModuleType.VARIANT, variant["id"], ImageType.GALLERY)

        with db.session_scope() as session:
            urls = fetch_primary_urls(
                session,
                [(ModuleType.PRODUCT, product["id"]), (ModuleType.VARIANT, variant["id"]), (ModuleType.BRAND, "x")],
            )

        assert set(urls) == {(ModuleType.PRODUCT, product["id"]), (ModuleType.VARIANT, variant["id"])}
