"""Brand management."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import NotFoundError
from catalog.models import Brand
from catalog.services.slug_service import ensure_available, slug_from
from catalog.utils.serializers import brand_to_dict

logger = logging.getLogger(__name__)


class BrandService:
    def __init__(self, database=None):
        self.db = database or db

    def _get_live_brand(self, session: Session, brand_id: str) -> Brand:
        brand = session.scalars(select(Brand).where(Brand.id == brand_id, Brand.deleted_at.is_(None))).first()
        if not brand:
            raise NotFoundError("Brand not found")
        return brand

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a brand; slug defaults to the normalized name. Taken slug or name is a conflict."""
        slug = slug_from(data)

        with self.db.session_scope("create brand") as session:
            ensure_available(session, Brand, "slug", slug, "Brand")
            ensure_available(session, Brand, "name", data["name"], "Brand")

            brand = Brand(name=data["name"], slug=slug, is_active=data.get("is_active", True))
            session.add(brand)
            session.flush()
            result = brand_to_dict(brand)

        logger.info(f"Created brand {result['id']} ({result['slug']})")
        return result

    def find_all(self) -> list[dict[str, Any]]:
        with self.db.session_scope("fetch brands") as session:
            brands = session.scalars(
                select(Brand)
                .where(Brand.deleted_at.is_(None), Brand.is_active.is_(True))
                .order_by(Brand.created_at.desc(), Brand.id.desc())
            ).all()
            return [brand_to_dict(b) for b in brands]

    def find_one(self, brand_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch brand") as session:
            return brand_to_dict(self._get_live_brand(session, brand_id))

    def update(self, brand_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("update brand") as session:
            brand = self._get_live_brand(session, brand_id)

            if data.get("slug") or data.get("name"):
                new_slug = slug_from(data)
                if new_slug != brand.slug:
                    ensure_available(session, Brand, "slug", new_slug, "Brand", exclude_id=brand_id)
                    brand.slug = new_slug

            if data.get("name") and data["name"] != brand.name:
                ensure_available(session, Brand, "name", data["name"], "Brand", exclude_id=brand_id)
                brand.name = data["name"]
            if data.get("is_active") is not None:
                brand.is_active = data["is_active"]

            session.flush()
            return brand_to_dict(brand)

    def remove(self, brand_id: str) -> dict[str, Any]:
        with self.db.session_scope("delete brand") as session:
            self._get_live_brand(session, brand_id).deleted_at = utcnow()
        return {"id": brand_id}


# Singleton instance
brand_service = BrandService()
