"""Merchandising sections and their curated items.

Items keep a fixed reference to a product or a variant. Whether that target is
still showable is decided on every read: items pointing at deleted or inactive
products/variants are skipped, but never removed.
"""

import logging
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, aliased

from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, NotFoundError
from catalog.models import ModuleType, Product, ProductStatus, ProductVariant, Section, SectionItem
from catalog.services.image_service import fetch_primary_urls
from catalog.services.slug_service import ensure_available
from catalog.utils.serializers import section_item_to_dict, section_to_dict

logger = logging.getLogger(__name__)


def _live_product_clause(product):
    return and_(product.deleted_at.is_(None), product.status == ProductStatus.ACTIVE)


def load_section_items(session: Session, section_id: str, include_inactive: bool) -> list[dict[str, Any]]:
    """Items of a section in display order, with their targets and cover images.

    Unless ``include_inactive`` is set, inactive items and items whose target is
    no longer live are skipped.
    """
    item_product = aliased(Product)
    variant_product = aliased(Product)

    stmt = (
        select(SectionItem, item_product, ProductVariant, variant_product)
        .outerjoin(item_product, and_(SectionItem.product_id == item_product.id, _live_product_clause(item_product)))
        .outerjoin(
            ProductVariant,
            and_(
                SectionItem.variant_id == ProductVariant.id,
                ProductVariant.deleted_at.is_(None),
                ProductVariant.is_active.is_(True),
            ),
        )
        .outerjoin(
            variant_product,
            and_(ProductVariant.product_id == variant_product.id, _live_product_clause(variant_product)),
        )
        .where(SectionItem.section_id == section_id)
        .order_by(SectionItem.sort_order.asc(), SectionItem.created_at.asc(), SectionItem.id.asc())
    )
    if not include_inactive:
        stmt = stmt.where(SectionItem.is_active.is_(True))

    rows = []
    for item, product, variant, owner in session.execute(stmt):
        if not include_inactive:
            if item.product_id and product is None:
                continue
            if item.variant_id and (variant is None or owner is None):
                continue
        rows.append((item, product, variant, owner))

    owners = []
    for _, product, variant, owner in rows:
        if product is not None:
            owners.append((ModuleType.PRODUCT, product.id))
        if variant is not None:
            owners.append((ModuleType.VARIANT, variant.id))
        if owner is not None:
            owners.append((ModuleType.PRODUCT, owner.id))
    covers = fetch_primary_urls(session, owners)

    items = []
    for item, product, variant, owner in rows:
        data = section_item_to_dict(item)
        data["product"] = (
            {
                "id": product.id,
                "name": product.name,
                "slug": product.slug,
                "coverImage": covers.get((ModuleType.PRODUCT, product.id)),
            }
            if product is not None
            else None
        )
        data["variant"] = (
            {
                "id": variant.id,
                "sku": variant.sku,
                "price": variant.price,
                "mrp": variant.mrp,
                "attributes": variant.attributes or {},
                "product": {"id": owner.id, "name": owner.name, "slug": owner.slug} if owner else None,
                "coverImage": covers.get((ModuleType.VARIANT, variant.id))
                or (covers.get((ModuleType.PRODUCT, owner.id)) if owner else None),
            }
            if variant is not None
            else None
        )
        items.append(data)
    return items


class SectionService:
    def __init__(self, database=None):
        self.db = database or db

    def _get_section(self, session: Session, section_id: str) -> Section:
        section = session.get(Section, section_id)
        if not section:
            raise NotFoundError("Section not found")
        return section

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("create section") as session:
            ensure_available(session, Section, "key", data["key"], "Section")
            section = Section(name=data["name"], key=data["key"], is_active=data.get("is_active", True))
            session.add(section)
            session.flush()
            return section_to_dict(section)

    def find_all(self) -> list[dict[str, Any]]:
        with self.db.session_scope("fetch sections") as session:
            sections = session.scalars(select(Section).order_by(Section.created_at.desc(), Section.id.desc())).all()
            return [section_to_dict(s) for s in sections]

    def find_one(self, section_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch section") as session:
            return section_to_dict(self._get_section(session, section_id))

    def update(self, section_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("update section") as session:
            section = self._get_section(session, section_id)
            new_key = data.get("key")
            if new_key and new_key != section.key:
                ensure_available(session, Section, "key", new_key, "Section", exclude_id=section_id)
                section.key = new_key
            if data.get("name"):
                section.name = data["name"]
            if data.get("is_active") is not None:
                section.is_active = data["is_active"]
            session.flush()
            return section_to_dict(section)

    def remove(self, section_id: str) -> dict[str, Any]:
        """Hard delete; the section's items go with it."""
        with self.db.session_scope("delete section") as session:
            section = self._get_section(session, section_id)
            session.delete(section)
        return {"message": "Section deleted successfully"}

    def resolve_section(self, key: str) -> dict[str, Any]:
        """
        Active section by key with its showable items in display order.

        Items are ordered by ``sort_order`` then creation time. An item is shown
        only when it is active and its target is live: a product must be
        non-deleted and active; a variant must be non-deleted and active and its
        product non-deleted and active.
        """
        with self.db.session_scope("fetch section") as session:
            section = session.scalars(
                select(Section).where(Section.key == key, Section.is_active.is_(True))
            ).first()
            if not section:
                raise NotFoundError("Section not found")

            result = section_to_dict(section)
            result["items"] = load_section_items(session, section.id, include_inactive=False)
            return result


class SectionItemService:
    def __init__(self, database=None):
        self.db = database or db

    def _get_item(self, session: Session, item_id: str) -> SectionItem:
        item = session.get(SectionItem, item_id)
        if not item:
            raise NotFoundError("Section item not found")
        return item

    def create(self, section_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Add a product or a variant (exactly one) to a section."""
        product_id = data.get("product_id")
        variant_id = data.get("variant_id")
        if not product_id and not variant_id:
            raise BadRequestError("Either productId or variantId must be provided")
        if product_id and variant_id:
            raise BadRequestError("Cannot provide both productId and variantId")

        with self.db.session_scope("create section item") as session:
            if not session.get(Section, section_id):
                raise NotFoundError("Section not found")

            if product_id:
                product = session.scalars(
                    select(Product).where(Product.id == product_id, _live_product_clause(Product))
                ).first()
                if not product:
                    raise NotFoundError("Product not found or not active")

            if variant_id:
                variant = session.scalars(
                    select(ProductVariant).where(ProductVariant.id == variant_id, ProductVariant.deleted_at.is_(None))
                ).first()
                if not variant:
                    raise NotFoundError("Variant not found")
                owner = session.get(Product, variant.product_id)
                if owner is None or owner.deleted_at is not None or owner.status != ProductStatus.ACTIVE:
                    raise BadRequestError("Variant belongs to an inactive or deleted product")

            item = SectionItem(
                section_id=section_id,
                product_id=product_id or None,
                variant_id=variant_id or None,
                sort_order=data.get("sort_order", 0),
                is_active=data.get("is_active", True),
            )
            session.add(item)
            session.flush()
            return section_item_to_dict(item)

    def find_by_section(self, section_id: str, include_inactive: bool = False) -> list[dict[str, Any]]:
        """Items of a section; ``include_inactive`` returns everything, stale targets included."""
        with self.db.session_scope("fetch section items") as session:
            if not session.get(Section, section_id):
                raise NotFoundError("Section not found")
            return load_section_items(session, section_id, include_inactive)

    def find_one(self, item_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch section item") as session:
            return section_item_to_dict(self._get_item(session, item_id))

    def update(self, item_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("update section item") as session:
            item = self._get_item(session, item_id)
            if data.get("sort_order") is not None:
                item.sort_order = data["sort_order"]
            if data.get("is_active") is not None:
                item.is_active = data["is_active"]
            session.flush()
            return section_item_to_dict(item)

    def remove(self, item_id: str) -> dict[str, Any]:
        with self.db.session_scope("delete section item") as session:
            session.delete(self._get_item(session, item_id))
        return {"message": "Section item deleted successfully"}


# Singleton instances
section_service = SectionService()
section_item_service = SectionItemService()
