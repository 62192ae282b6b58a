"""Tests for VariantService and the single-default invariant."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from catalog.auth import Caller
from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from catalog.models import ProductVariant
from catalog.services.product_service import ProductService
from catalog.services.variant_service import VariantService, resolve_default_variant


def live_defaults(product_id):
    with db.session_scope() as session:
        return session.scalars(
            select(ProductVariant.id).where(
                ProductVariant.product_id == product_id,
                ProductVariant.is_default.is_(True),
                ProductVariant.deleted_at.is_(None),
            )
        ).all()


def set_created_at(variant_id, when):
    with db.session_scope() as session:
        session.execute(update(ProductVariant).where(ProductVariant.id == variant_id).values(created_at=when))


class TestResolveDefaultVariant:
    def _variant(self, vid, minutes, is_default=False, is_active=True, deleted=False):
        return ProductVariant(
            id=vid,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
            is_default=is_default,
            is_active=is_active,
            deleted_at=datetime(2024, 2, 1, tzinfo=timezone.utc) if deleted else None,
        )

    def test_flagged_variant_wins(self):
        variants = [self._variant("a", 0), self._variant("b", 1, is_default=True)]
        assert resolve_default_variant(variants).id == "b"

    def test_oldest_active_when_none_flagged(self):
        variants = [self._variant("b", 5), self._variant("a", 1), self._variant("c", 0, is_active=False)]
        assert resolve_default_variant(variants).id == "a"

    def test_inactive_flagged_variant_is_ignored(self):
        variants = [self._variant("a", 0, is_default=True, is_active=False), self._variant("b", 1)]
        assert resolve_default_variant(variants).id == "b"

    def test_id_breaks_timestamp_ties(self):
        variants = [self._variant("b", 0), self._variant("a", 0)]
        assert resolve_default_variant(variants).id == "a"

    def test_nothing_active(self):
        assert resolve_default_variant([self._variant("a", 0, deleted=True)]) is None


class TestVariantService:
    @pytest.fixture
    def variant_service(self):
        return VariantService()

    def test_phone_scenario_default_switch(self, variant_service, make_product, make_variant):
        """Flagged B is the default; set_default(A) moves the flag to A and clears B."""
        phone = make_product("Phone")
        assert phone["slug"] == "phone"
        variant_a = make_variant(phone["id"], "A1", 100)
        variant_b = make_variant(phone["id"], "A2", 200, is_default=True)

        detail = ProductService().get_product_detail(phone["id"])
        assert detail["defaultVariant"]["id"] == variant_b["id"]

        result = variant_service.set_default(variant_a["id"])
        assert result["isDefault"] is True

        detail = ProductService().get_product_detail(phone["id"])
        assert detail["defaultVariant"]["id"] == variant_a["id"]
        flags = {v["id"]: v["isDefault"] for v in detail["variants"]}
        assert flags == {variant_a["id"]: True, variant_b["id"]: False}

    def test_set_default_keeps_exactly_one(self, variant_service, make_product, make_variant):
        product = make_product()
        ids = [make_variant(product["id"], f"SKU-{i}", 10 + i)["id"] for i in range(3)]

        for vid in [ids[2], ids[0], ids[1], ids[1]]:
            variant_service.set_default(vid)
            assert live_defaults(product["id"]) == [vid]

    def test_create_with_default_clears_previous(self, variant_service, make_product, make_variant):
        product = make_product()
        first = make_variant(product["id"], "S1", 10, is_default=True)
        second = make_variant(product["id"], "S2", 20, is_default=True)

        assert live_defaults(product["id"]) == [second["id"]]
        assert variant_service.find_one(first["id"])["isDefault"] is False

    def test_update_with_default_switches(self, variant_service, make_product, make_variant):
        product = make_product()
        first = make_variant(product["id"], "S1", 10, is_default=True)
        second = make_variant(product["id"], "S2", 20)

        variant_service.update(second["id"], {"is_default": True, "price": 25})

        assert live_defaults(product["id"]) == [second["id"]]
        assert variant_service.find_one(second["id"])["price"] == 25
        assert variant_service.find_one(first["id"])["isDefault"] is False

    def test_set_default_on_deleted_variant(self, variant_service, make_product, make_variant):
        product = make_product()
        variant = make_variant(product["id"], "S1", 10)
        variant_service.remove(variant["id"])

        with pytest.raises(NotFoundError):
            variant_service.set_default(variant["id"])

    def test_inactive_variant_cannot_become_default(self, variant_service, make_product, make_variant):
        product = make_product()
        inactive = make_variant(product["id"], "S1", 10, is_active=False)
        active = make_variant(product["id"], "S2", 20)

        with pytest.raises(BadRequestError):
            variant_service.set_default(inactive["id"])
        with pytest.raises(BadRequestError):
            variant_service.update(inactive["id"], {"is_default": True})
        with pytest.raises(BadRequestError):
            make_variant(product["id"], "S3", 30, is_active=False, is_default=True)

        assert live_defaults(product["id"]) == []
        assert variant_service.get_default_or_promote(product["id"])["id"] == active["id"]

    def test_set_default_survives_the_next_read(self, variant_service, make_product, make_variant):
        product = make_product()
        chosen = make_variant(product["id"], "S1", 10)
        make_variant(product["id"], "S2", 20, is_default=True)

        variant_service.set_default(chosen["id"])

        assert variant_service.get_default_or_promote(product["id"])["id"] == chosen["id"]
        detail = variant_service.get_variant_detail(product_id=product["id"])
        assert detail["selectedVariant"]["id"] == chosen["id"]
        assert live_defaults(product["id"]) == [chosen["id"]]

    def test_deactivating_default_clears_flag(self, variant_service, make_product, make_variant):
        product = make_product()
        default = make_variant(product["id"], "S1", 10, is_default=True)
        other = make_variant(product["id"], "S2", 20)

        updated = variant_service.update(default["id"], {"is_active": False})

        assert updated["isDefault"] is False
        assert live_defaults(product["id"]) == []
        assert variant_service.get_default_or_promote(product["id"])["id"] == other["id"]

    def test_set_default_on_deleted_product(self, variant_service, make_product, make_variant):
        product = make_product()
        variant = make_variant(product["id"], "S1", 10)
        ProductService().remove(product["id"])

        with pytest.raises(NotFoundError):
            variant_service.set_default(variant["id"])

    def test_promotes_oldest_active_when_no_default(self, variant_service, make_product, make_variant):
        product = make_product()
        newer = make_variant(product["id"], "S1", 10)
        older = make_variant(product["id"], "S2", 20)
        inactive = make_variant(product["id"], "S3", 30, is_active=False)
        set_created_at(newer["id"], datetime(2024, 1, 2, tzinfo=timezone.utc))
        set_created_at(older["id"], datetime(2024, 1, 1, tzinfo=timezone.utc))
        set_created_at(inactive["id"], datetime(2023, 1, 1, tzinfo=timezone.utc))

        first = variant_service.get_default_or_promote(product["id"])
        second = variant_service.get_default_or_promote(product["id"])

        assert first["id"] == older["id"]
        assert second["id"] == first["id"]
        assert live_defaults(product["id"]) == [older["id"]]

    def test_promotion_after_default_deleted(self, variant_service, make_product, make_variant):
        product = make_product()
        default = make_variant(product["id"], "S1", 10, is_default=True)
        other = make_variant(product["id"], "S2", 20)
        variant_service.remove(default["id"])

        assert variant_service.get_default_or_promote(product["id"])["id"] == other["id"]

    def test_promote_without_active_variants(self, variant_service, make_product, make_variant):
        product = make_product()
        make_variant(product["id"], "S1", 10, is_active=False)

        with pytest.raises(NotFoundError):
            variant_service.get_default_or_promote(product["id"])

    def test_sku_is_globally_unique_including_deleted(self, variant_service, make_product, make_variant):
        first = make_product("Phone")
        second = make_product("Tablet")
        variant = make_variant(first["id"], "DUP", 10)
        variant_service.remove(variant["id"])

        with pytest.raises(ConflictError):
            make_variant(second["id"], "DUP", 20)

    def test_update_sku_conflict_excludes_self(self, variant_service, make_product, make_variant):
        product = make_product()
        first = make_variant(product["id"], "S1", 10)
        make_variant(product["id"], "S2", 20)

        assert variant_service.update(first["id"], {"sku": "S1"})["sku"] == "S1"
        with pytest.raises(ConflictError):
            variant_service.update(first["id"], {"sku": "S2"})

    def test_non_owner_cannot_set_default(self, variant_service, make_product, make_variant):
        product = make_product(seller_id="seller-1")
        variant = make_variant(product["id"], "S1", 10)

        with pytest.raises(ForbiddenError):
            variant_service.set_default(variant["id"], Caller("seller-2", "seller"))
        assert variant_service.set_default(variant["id"], Caller("admin-1", "admin"))["isDefault"] is True

    def test_variant_detail_requires_an_id(self, variant_service):
        with pytest.raises(BadRequestError):
            variant_service.get_variant_detail()

    def test_variant_detail_by_product_selects_default(self, variant_service, make_product, make_variant):
        product = make_product()
        make_variant(product["id"], "S1", 10)
        flagged = make_variant(product["id"], "S2", 20, is_default=True)

        detail = variant_service.get_variant_detail(product_id=product["id"])

        assert detail["id"] == product["id"]
        assert detail["selectedVariant"]["id"] == flagged["id"]
        assert len(detail["variants"]) == 2
        assert detail["brand"]["name"] == "Acme"

    def test_variant_detail_by_variant(self, variant_service, make_product, make_variant):
        product = make_product()
        chosen = make_variant(product["id"], "S1", 10)
        make_variant(product["id"], "S2", 20, is_default=True)

        detail = variant_service.get_variant_detail(variant_id=chosen["id"])
        assert detail["selectedVariant"]["id"] == chosen["id"]

    def test_writes_invalidate_listing_cache(self, variant_service, make_product, make_variant, mock_redis):
        product = make_product()
        mock_redis.delete_pattern.reset_mock()

        make_variant(product["id"], "S1", 10)

        mock_redis.delete_pattern.assert_called_once_with("products:*")
