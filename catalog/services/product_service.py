"""Product CRUD and the aggregated listing/detail views.

A product's display data is spread over three tables: the product row, its
variants (price, default flag) and polymorphic image rows. Both views resolve
them with a fixed number of queries per request regardless of page size:
products, then variants for the whole page, then images for the whole page.
"""

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.auth import Caller, ensure_owner_or_admin
from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, ConflictError, NotFoundError
from catalog.models import Brand, ModuleType, Product, ProductStatus, ProductVariant, SubCategory
from catalog.services.image_service import fetch_images, fetch_primary_urls, images_payload
from catalog.services.listing_cache import listing_cache
from catalog.services.slug_service import insert_with_unique_slug, require_base_slug, unique_slug
from catalog.services.variant_service import resolve_default_variant
from catalog.utils.pagination import build_pagination, page_offset, wants_pagination
from catalog.utils.serializers import product_to_dict, variant_to_dict

logger = logging.getLogger(__name__)

# Status visible to non-privileged callers
PUBLIC_STATUS = ProductStatus.ACTIVE


def _parse_status(value) -> ProductStatus:
    try:
        return ProductStatus(value)
    except ValueError as e:
        raise BadRequestError(f"Invalid status '{value}'. Allowed: {', '.join(s.value for s in ProductStatus)}") from e


class ProductService:
    def __init__(self, database=None, cache=None):
        self.db = database or db
        self.cache = cache or listing_cache

    def _get_live_product(self, session: Session, product_id: str) -> Product:
        product = session.scalars(
            select(Product).where(Product.id == product_id, Product.deleted_at.is_(None))
        ).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def _ensure_brand(self, session: Session, brand_id: str):
        if not session.execute(select(Brand.id).where(Brand.id == brand_id, Brand.deleted_at.is_(None))).first():
            raise NotFoundError("Brand not found")

    def _ensure_sub_category(self, session: Session, sub_category_id: str):
        exists = session.execute(
            select(SubCategory.id).where(SubCategory.id == sub_category_id, SubCategory.deleted_at.is_(None))
        ).first()
        if not exists:
            raise NotFoundError("Sub-category not found")

    def create(self, data: dict[str, Any], user_id: str) -> dict[str, Any]:
        """
        Create a draft product owned by ``user_id``.

        Args:
            data: name, brand_id, sub_category_id and optional description
            user_id: Creator, also recorded as the seller

        Returns:
            The created product
        """
        base_slug = require_base_slug(data["name"])

        with self.db.session_scope("create product") as session:
            self._ensure_brand(session, data["brand_id"])
            self._ensure_sub_category(session, data["sub_category_id"])

            product = insert_with_unique_slug(
                session,
                Product,
                base_slug,
                lambda slug: Product(
                    name=data["name"],
                    slug=slug,
                    description=data.get("description"),
                    brand_id=data["brand_id"],
                    sub_category_id=data["sub_category_id"],
                    status=ProductStatus.DRAFT,
                    created_by=user_id,
                    seller_id=user_id,
                ),
            )
            result = product_to_dict(product)

        logger.info(f"Created product {result['id']} with slug '{result['slug']}'")
        self.cache.invalidate()
        return result

    def _filter_conditions(self, filters: dict[str, Any], is_privileged: bool) -> list:
        conditions = [Product.deleted_at.is_(None)]

        if not is_privileged:
            conditions.append(Product.status == PUBLIC_STATUS)
        elif filters.get("status"):
            conditions.append(Product.status == _parse_status(filters["status"]))

        if filters.get("search"):
            conditions.append(Product.name.icontains(filters["search"], autoescape=True))
        if filters.get("brand_id"):
            conditions.append(Product.brand_id == filters["brand_id"])
        if filters.get("sub_category_id"):
            conditions.append(Product.sub_category_id == filters["sub_category_id"])

        min_price = filters.get("min_price")
        max_price = filters.get("max_price")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequestError("minPrice must not be greater than maxPrice")
        if min_price is not None or max_price is not None:
            # EXISTS keeps one row per product however many variants match
            in_range = select(ProductVariant.id).where(
                ProductVariant.product_id == Product.id,
                ProductVariant.deleted_at.is_(None),
            )
            if min_price is not None:
                in_range = in_range.where(ProductVariant.price >= min_price)
            if max_price is not None:
                in_range = in_range.where(ProductVariant.price <= max_price)
            conditions.append(in_range.exists())

        return conditions

    def _summaries(self, session: Session, products: list[Product]) -> list[dict[str, Any]]:
        if not products:
            return []
        product_ids = [p.id for p in products]

        variants_by_product: dict[str, list[ProductVariant]] = defaultdict(list)
        active_variants = session.scalars(
            select(ProductVariant).where(
                ProductVariant.product_id.in_(product_ids),
                ProductVariant.deleted_at.is_(None),
                ProductVariant.is_active.is_(True),
            )
        )
        for variant in active_variants:
            variants_by_product[variant.product_id].append(variant)

        defaults = {pid: resolve_default_variant(variants) for pid, variants in variants_by_product.items()}

        owners = [(ModuleType.PRODUCT, pid) for pid in product_ids]
        owners += [(ModuleType.VARIANT, v.id) for v in defaults.values() if v is not None]
        cover_urls = fetch_primary_urls(session, owners)

        data = []
        for product in products:
            variant = defaults.get(product.id)
            prices = [v.price for v in variants_by_product.get(product.id, [])]
            cover = cover_urls.get((ModuleType.PRODUCT, product.id))
            if cover is None and variant is not None:
                cover = cover_urls.get((ModuleType.VARIANT, variant.id))

            summary = product_to_dict(product)
            summary.update(
                {
                    "coverImage": cover,
                    "defaultVariantId": variant.id if variant else None,
                    "price": variant.price if variant else None,
                    "mrp": variant.mrp if variant else None,
                    "priceRange": {"min": min(prices), "max": max(prices)} if prices else None,
                }
            )
            data.append(summary)
        return data

    def list_products(
        self,
        filters: dict[str, Any] | None = None,
        page: int | None = None,
        limit: int | None = None,
        is_privileged: bool = False,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """
        List live products with variant pricing and a cover image.

        Args:
            filters: search, brand_id, sub_category_id, min_price, max_price, status (privileged only)
            page: 1-based page number
            limit: Page size; both page and limit must be positive to paginate
            is_privileged: Admin callers see every status

        Returns:
            ``{"data": [...], "pagination": {...}}`` when paginated, else the full list
        """
        filters = {k: v for k, v in (filters or {}).items() if v is not None and v != ""}
        paginate = wants_pagination(page, limit)

        cache_params = {"filters": filters, "page": page, "limit": limit} if paginate else {"filters": filters}
        if not is_privileged:
            cache_key, cached = self.cache.get(cache_params)
            if cached is not None:
                logger.info("Cache hit for product listing")
                return cached

        with self.db.session_scope("list products") as session:
            conditions = self._filter_conditions(filters, is_privileged)
            stmt = select(Product).where(*conditions).order_by(Product.created_at.desc(), Product.id.desc())

            if paginate:
                # Counted on the bare filtered set, before any variant/image work
                total = session.scalar(select(func.count()).select_from(Product).where(*conditions))
                products = session.scalars(stmt.offset(page_offset(page, limit)).limit(limit)).all()
                result = {"data": self._summaries(session, products), "pagination": build_pagination(page, limit, total)}
            else:
                result = self._summaries(session, session.scalars(stmt).all())

        if not is_privileged:
            self.cache.set(cache_key, result)
        return result

    def get_product_detail(self, product_id: str) -> dict[str, Any]:
        """
        Product with brand, sub-category, all live variants and their images.

        The default variant is read-only here: when none is flagged, the oldest
        active variant is reported without promoting it.
        """
        with self.db.session_scope("fetch product") as session:
            product = self._get_live_product(session, product_id)
            variants = session.scalars(
                select(ProductVariant)
                .where(ProductVariant.product_id == product_id, ProductVariant.deleted_at.is_(None))
                .order_by(ProductVariant.created_at.asc(), ProductVariant.id.asc())
            ).all()
            brand = session.get(Brand, product.brand_id)
            sub_category = session.get(SubCategory, product.sub_category_id)

            owners = [(ModuleType.PRODUCT, product.id)] + [(ModuleType.VARIANT, v.id) for v in variants]
            grouped = fetch_images(session, owners)

            variant_rows = [
                variant_to_dict(v, images_payload(grouped, ModuleType.VARIANT, v.id)) for v in variants
            ]
            default = resolve_default_variant(variants)

            detail = product_to_dict(product)
            detail.update(
                {
                    "brand": {"id": brand.id, "name": brand.name, "slug": brand.slug} if brand else None,
                    "subCategory": (
                        {"id": sub_category.id, "name": sub_category.name, "slug": sub_category.slug}
                        if sub_category
                        else None
                    ),
                    "images": images_payload(grouped, ModuleType.PRODUCT, product.id),
                    "variants": variant_rows,
                    "defaultVariant": next((v for v in variant_rows if v["id"] == default.id), None)
                    if default
                    else None,
                }
            )
            return detail

    def update(self, product_id: str, data: dict[str, Any], caller: Caller | None = None) -> dict[str, Any]:
        """Update product fields; a name change regenerates the slug."""
        with self.db.session_scope("update product") as session:
            product = self._get_live_product(session, product_id)
            ensure_owner_or_admin(product.seller_id, caller, "update this product")

            new_name = data.get("name")
            if new_name and new_name != product.name:
                product.slug = unique_slug(session, Product, require_base_slug(new_name), exclude_id=product_id)
                product.name = new_name
            if "description" in data:
                product.description = data["description"]
            if data.get("brand_id"):
                self._ensure_brand(session, data["brand_id"])
                product.brand_id = data["brand_id"]
            if data.get("sub_category_id"):
                self._ensure_sub_category(session, data["sub_category_id"])
                product.sub_category_id = data["sub_category_id"]

            try:
                session.flush()
            except IntegrityError as e:
                raise ConflictError("Product with this slug already exists") from e
            result = product_to_dict(product)

        self.cache.invalidate()
        return result

    def update_status(self, product_id: str, status, caller: Caller | None = None) -> dict[str, Any]:
        new_status = _parse_status(status)
        with self.db.session_scope("update product status") as session:
            product = self._get_live_product(session, product_id)
            ensure_owner_or_admin(product.seller_id, caller, "change the status of this product")
            product.status = new_status
            session.flush()
            result = product_to_dict(product)

        logger.info(f"Product {product_id} status set to {new_status.value}")
        self.cache.invalidate()
        return result

    def remove(self, product_id: str, caller: Caller | None = None) -> dict[str, Any]:
        with self.db.session_scope("delete product") as session:
            product = self._get_live_product(session, product_id)
            ensure_owner_or_admin(product.seller_id, caller, "delete this product")
            product.deleted_at = utcnow()

        self.cache.invalidate()
        return {"message": "Product deleted successfully"}


# Singleton instance
product_service = ProductService()
