"""Category and sub-category management."""

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import NotFoundError
from catalog.models import Category, SubCategory
from catalog.services.slug_service import ensure_available, slug_from
from catalog.utils.pagination import build_pagination, page_offset, wants_pagination
from catalog.utils.serializers import category_to_dict, sub_category_to_dict

logger = logging.getLogger(__name__)


def _search_clause(model, search: str):
    return or_(model.name.icontains(search, autoescape=True), model.slug.icontains(search, autoescape=True))


class CategoryService:
    def __init__(self, database=None):
        self.db = database or db

    def _get_live_category(self, session: Session, category_id: str) -> Category:
        category = session.scalars(
            select(Category).where(Category.id == category_id, Category.deleted_at.is_(None))
        ).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    def _get_live_sub_category(self, session: Session, sub_category_id: str) -> SubCategory:
        sub_category = session.scalars(
            select(SubCategory).where(SubCategory.id == sub_category_id, SubCategory.deleted_at.is_(None))
        ).first()
        if not sub_category:
            raise NotFoundError("Sub-category not found")
        return sub_category

    # Categories

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        slug = slug_from(data)
        with self.db.session_scope("create category") as session:
            ensure_available(session, Category, "slug", slug, "Category")
            ensure_available(session, Category, "name", data["name"], "Category")

            category = Category(name=data["name"], slug=slug, is_active=data.get("is_active", True))
            session.add(category)
            session.flush()
            result = category_to_dict(category)

        logger.info(f"Created category {result['id']} ({result['slug']})")
        return result

    def find_all(self, search: str | None = None, page: int | None = None, limit: int | None = None):
        """Live categories, newest first; paginated only when page and limit are both positive."""
        with self.db.session_scope("fetch categories") as session:
            conditions = [Category.deleted_at.is_(None)]
            if search:
                conditions.append(_search_clause(Category, search))
            stmt = select(Category).where(*conditions).order_by(Category.created_at.desc(), Category.id.desc())

            if wants_pagination(page, limit):
                total = session.scalar(select(func.count()).select_from(Category).where(*conditions))
                categories = session.scalars(stmt.offset(page_offset(page, limit)).limit(limit)).all()
                return {
                    "data": [category_to_dict(c) for c in categories],
                    "pagination": build_pagination(page, limit, total),
                }
            return [category_to_dict(c) for c in session.scalars(stmt).all()]

    def find_one(self, category_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch category") as session:
            category = self._get_live_category(session, category_id)
            sub_categories = session.scalars(
                select(SubCategory)
                .where(SubCategory.category_id == category_id, SubCategory.deleted_at.is_(None))
                .order_by(SubCategory.created_at.desc(), SubCategory.id.desc())
            ).all()
            result = category_to_dict(category)
            result["subCategories"] = [sub_category_to_dict(s) for s in sub_categories]
            return result

    def update(self, category_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("update category") as session:
            category = self._get_live_category(session, category_id)

            if data.get("slug") or data.get("name"):
                new_slug = slug_from(data)
                if new_slug != category.slug:
                    ensure_available(session, Category, "slug", new_slug, "Category", exclude_id=category_id)
                    category.slug = new_slug

            if data.get("name") and data["name"] != category.name:
                ensure_available(session, Category, "name", data["name"], "Category", exclude_id=category_id)
                category.name = data["name"]
            if data.get("is_active") is not None:
                category.is_active = data["is_active"]

            session.flush()
            return category_to_dict(category)

    def remove(self, category_id: str) -> dict[str, Any]:
        with self.db.session_scope("delete category") as session:
            self._get_live_category(session, category_id).deleted_at = utcnow()
        return {"id": category_id}

    # Sub-categories

    def create_sub_category(self, data: dict[str, Any]) -> dict[str, Any]:
        """Slugs are unique per parent category, soft-deleted rows included."""
        slug = slug_from(data)
        with self.db.session_scope("create sub-category") as session:
            category = self._get_live_category(session, data["category_id"])
            ensure_available(
                session, SubCategory, "slug", slug, "Sub-category", category_id=category.id
            )

            sub_category = SubCategory(
                category_id=category.id,
                name=data["name"],
                slug=slug,
                is_active=data.get("is_active", True),
            )
            session.add(sub_category)
            session.flush()
            return sub_category_to_dict(sub_category, category)

    def find_all_sub_categories(self, search: str | None = None, category_id: str | None = None):
        """
        Live sub-categories, newest first.

        ``search`` matches name OR slug; ``category_id``, when given, applies to
        both alternatives.
        """
        with self.db.session_scope("fetch sub-categories") as session:
            stmt = select(SubCategory, Category).join(Category, SubCategory.category_id == Category.id)
            stmt = stmt.where(SubCategory.deleted_at.is_(None))
            if category_id:
                stmt = stmt.where(SubCategory.category_id == category_id)
            if search:
                stmt = stmt.where(_search_clause(SubCategory, search))
            rows = session.execute(stmt.order_by(SubCategory.created_at.desc(), SubCategory.id.desc())).all()
            return [sub_category_to_dict(sub, category) for sub, category in rows]

    def find_sub_categories_by_category(self, category_id: str, search: str | None = None):
        with self.db.session_scope("fetch sub-categories") as session:
            self._get_live_category(session, category_id)
        return self.find_all_sub_categories(search=search, category_id=category_id)

    def find_one_sub_category(self, sub_category_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch sub-category") as session:
            sub_category = self._get_live_sub_category(session, sub_category_id)
            return sub_category_to_dict(sub_category, session.get(Category, sub_category.category_id))

    def update_sub_category(self, sub_category_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self.db.session_scope("update sub-category") as session:
            sub_category = self._get_live_sub_category(session, sub_category_id)

            target_category_id = data.get("category_id") or sub_category.category_id
            if target_category_id != sub_category.category_id:
                self._get_live_category(session, target_category_id)

            new_slug = slug_from(data) if (data.get("slug") or data.get("name")) else sub_category.slug
            if new_slug != sub_category.slug or target_category_id != sub_category.category_id:
                # Moving categories changes the uniqueness scope, so re-check even an unchanged slug
                ensure_available(
                    session,
                    SubCategory,
                    "slug",
                    new_slug,
                    "Sub-category",
                    exclude_id=sub_category_id,
                    category_id=target_category_id,
                )
            sub_category.slug = new_slug
            sub_category.category_id = target_category_id

            if data.get("name"):
                sub_category.name = data["name"]
            if data.get("is_active") is not None:
                sub_category.is_active = data["is_active"]

            session.flush()
            return sub_category_to_dict(sub_category, session.get(Category, sub_category.category_id))

    def remove_sub_category(self, sub_category_id: str) -> dict[str, Any]:
        with self.db.session_scope("delete sub-category") as session:
            self._get_live_sub_category(session, sub_category_id).deleted_at = utcnow()
        return {"id": sub_category_id}


# Singleton instance
category_service = CategoryService()
