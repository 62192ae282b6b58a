"""Shared fixtures: an in-memory SQLite store behind the global ``db`` and mocked Redis/S3."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from catalog.db.postgres_client import db
from catalog.models import ProductStatus
from catalog.services.brand_service import BrandService
from catalog.services.category_service import CategoryService
from catalog.services.image_service import ImageService, MediaFile
from catalog.services.listing_cache import listing_cache
from catalog.services.product_service import ProductService
from catalog.services.variant_service import VariantService

SELLER_ID = "seller-1"


@pytest.fixture(autouse=True)
def database():
    """Fresh schema per test. pysqlite needs manual BEGIN for SAVEPOINT to work."""
    db.configure("sqlite+pysqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(db.engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(db.engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    db.create_tables()
    yield db
    db.drop_tables()


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    client = MagicMock()
    client.get_json.return_value = None
    client.get_counter.return_value = 0
    client.delete_pattern.return_value = 0
    monkeypatch.setattr(listing_cache, "client", client)
    monkeypatch.setattr(listing_cache, "enabled", True)
    monkeypatch.setattr(listing_cache, "cache_hit_count", 0)
    monkeypatch.setattr(listing_cache, "cache_miss_count", 0)
    return client


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.bucket_name = "test-bucket"
    storage.put.side_effect = lambda key, data, content_type: f"https://cdn.example.com/{key}"
    return storage


@pytest.fixture
def image_svc(mock_storage):
    return ImageService(object_storage=mock_storage)


@pytest.fixture
def png():
    return MediaFile(filename="photo.png", content_type="image/png", content=b"\x89PNG")


@pytest.fixture
def brand():
    return BrandService().create({"name": "Acme"})


@pytest.fixture
def sub_category():
    categories = CategoryService()
    category = categories.create({"name": "Electronics"})
    return categories.create_sub_category({"name": "Phones", "category_id": category["id"]})


@pytest.fixture
def make_product(brand, sub_category):
    """Factory for products; ``status`` defaults to active so they show in public views."""
    products = ProductService()

    def _make(name="Phone", status=ProductStatus.ACTIVE, seller_id=SELLER_ID):
        product = products.create(
            {"name": name, "brand_id": brand["id"], "sub_category_id": sub_category["id"]}, seller_id
        )
        if status != ProductStatus.DRAFT:
            product = products.update_status(product["id"], status)
        return product

    return _make


@pytest.fixture
def make_variant():
    variants = VariantService()

    def _make(product_id, sku, price, **extra):
        return variants.create(product_id, {"sku": sku, "price": price, **extra})

    return _make
