"""Product variants and the single-default-variant invariant.

Every live product has at most one live variant flagged ``is_default``. The
flag only ever moves through :func:`apply_default`, which clears the flag on
all live variants of the product and sets it on the target inside the caller's
transaction, after taking a row lock on the product. Readers therefore see the
state before or after a switch, never zero or two defaults mid-way. Concurrent
switches on the same product serialize on that lock; the last one to commit
wins. The partial unique index on ``product_variants`` rejects anything that
bypasses this path.

A product can still end up with no default (its default was deleted,
deactivated or unflagged). That state is healed lazily: the next
:meth:`VariantService.get_default_or_promote` promotes the oldest active
variant. "Exactly one default" is therefore restored on read, not enforced
continuously.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.auth import Caller, ensure_owner_or_admin
from catalog.db.postgres_bootstrap import utcnow
from catalog.db.postgres_client import db
from catalog.errors import BadRequestError, ConflictError, NotFoundError
from catalog.models import Brand, ModuleType, Product, ProductVariant, SubCategory
from catalog.services.image_service import fetch_images, images_payload
from catalog.services.listing_cache import listing_cache
from catalog.services.slug_service import ensure_available
from catalog.utils.serializers import variant_to_dict

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("sku", "attributes", "price", "mrp", "stock", "is_active")
INACTIVE_DEFAULT_MESSAGE = "Only an active variant can be the default"


def _creation_order(variant: ProductVariant):
    # Timestamps may tie on stores without sub-second precision; the id keeps it stable
    return (variant.created_at, variant.id)


def resolve_default_variant(variants: Iterable[ProductVariant]) -> ProductVariant | None:
    """Pick the display default from already-loaded variants, without writing.

    The flagged variant wins when it is live and active; otherwise the oldest
    active variant stands in. Returns None when nothing is active.
    """
    active = sorted(
        (v for v in variants if v.deleted_at is None and v.is_active),
        key=_creation_order,
    )
    for variant in active:
        if variant.is_default:
            return variant
    return active[0] if active else None


def ensure_can_be_default(variant: ProductVariant) -> None:
    if not variant.is_active:
        raise BadRequestError(INACTIVE_DEFAULT_MESSAGE)


def lock_live_product(session: Session, product_id: str) -> Product:
    """Load a live product with a row lock held until the transaction ends."""
    product = session.scalars(
        select(Product).where(Product.id == product_id, Product.deleted_at.is_(None)).with_for_update()
    ).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def apply_default(session: Session, product_id: str, variant_id: str) -> None:
    """Clear every live default of the product, then flag ``variant_id``.

    Must run inside a transaction that already holds the product lock.
    """
    session.execute(
        update(ProductVariant)
        .where(
            ProductVariant.product_id == product_id,
            ProductVariant.deleted_at.is_(None),
            ProductVariant.id != variant_id,
        )
        .values(is_default=False)
    )
    session.execute(update(ProductVariant).where(ProductVariant.id == variant_id).values(is_default=True))


def oldest_active_variant(session: Session, product_id: str) -> ProductVariant | None:
    return session.scalars(
        select(ProductVariant)
        .where(
            ProductVariant.product_id == product_id,
            ProductVariant.is_active.is_(True),
            ProductVariant.deleted_at.is_(None),
        )
        .order_by(ProductVariant.created_at.asc(), ProductVariant.id.asc())
        .limit(1)
    ).first()


class VariantService:
    def __init__(self, database=None, cache=None):
        self.db = database or db
        self.cache = cache or listing_cache

    def _get_live_variant(self, session: Session, variant_id: str) -> ProductVariant:
        variant = session.scalars(
            select(ProductVariant).where(ProductVariant.id == variant_id, ProductVariant.deleted_at.is_(None))
        ).first()
        if not variant:
            raise NotFoundError("Variant not found")
        return variant

    def _flush_variant(self, session: Session):
        try:
            session.flush()
        except IntegrityError as e:
            # A concurrent request took the SKU between our check and the write
            raise ConflictError("Variant with this SKU already exists") from e

    def create(self, product_id: str, data: dict[str, Any], caller: Caller | None = None) -> dict[str, Any]:
        """
        Create a variant under a live product.

        Args:
            product_id: Owning product
            data: sku, price, and optionally attributes, mrp, stock, is_active, is_default
            caller: Acting user; must own the product unless admin

        Returns:
            The created variant
        """
        if data.get("is_default") and data.get("is_active") is False:
            raise BadRequestError(INACTIVE_DEFAULT_MESSAGE)

        with self.db.session_scope("create variant") as session:
            product = lock_live_product(session, product_id)
            ensure_owner_or_admin(product.seller_id, caller, "add variants to this product")
            ensure_available(session, ProductVariant, "sku", data["sku"], "Variant")

            variant = ProductVariant(
                product_id=product_id,
                sku=data["sku"],
                attributes=data.get("attributes") or {},
                price=data["price"],
                mrp=data.get("mrp"),
                stock=data.get("stock", 0),
                is_active=data.get("is_active", True),
                is_default=False,
            )
            session.add(variant)
            self._flush_variant(session)

            if data.get("is_default"):
                apply_default(session, product_id, variant.id)
            session.refresh(variant)
            result = variant_to_dict(variant)

        logger.info(f"Created variant {result['id']} (sku={result['sku']}) for product {product_id}")
        self.cache.invalidate()
        return result

    def find_one(self, variant_id: str) -> dict[str, Any]:
        with self.db.session_scope("fetch variant") as session:
            variant = self._get_live_variant(session, variant_id)
            product = session.get(Product, variant.product_id)
            result = variant_to_dict(variant)
            result["product"] = {"id": product.id, "name": product.name, "slug": product.slug} if product else None
            return result

    def update(self, variant_id: str, data: dict[str, Any], caller: Caller | None = None) -> dict[str, Any]:
        """Update variant fields. ``is_default=True`` switches the default atomically."""
        with self.db.session_scope("update variant") as session:
            variant = self._get_live_variant(session, variant_id)
            product = lock_live_product(session, variant.product_id)
            ensure_owner_or_admin(product.seller_id, caller, "update this variant")

            new_sku = data.get("sku")
            if new_sku and new_sku != variant.sku:
                ensure_available(session, ProductVariant, "sku", new_sku, "Variant", exclude_id=variant_id)

            for field in UPDATABLE_FIELDS:
                if data.get(field) is not None:
                    setattr(variant, field, data[field])
            if data.get("mrp") is None and "mrp" in data:
                variant.mrp = None

            is_default = data.get("is_default")
            if is_default:
                ensure_can_be_default(variant)
            if is_default is False or not variant.is_active:
                # A deactivated variant gives up the flag; the next read promotes another
                variant.is_default = False
            self._flush_variant(session)

            if is_default:
                apply_default(session, variant.product_id, variant_id)
            session.refresh(variant)
            result = variant_to_dict(variant)

        self.cache.invalidate()
        return result

    def remove(self, variant_id: str, caller: Caller | None = None) -> dict[str, Any]:
        with self.db.session_scope("delete variant") as session:
            variant = self._get_live_variant(session, variant_id)
            product = session.get(Product, variant.product_id)
            if product is not None:
                ensure_owner_or_admin(product.seller_id, caller, "delete this variant")
            variant.deleted_at = utcnow()

        self.cache.invalidate()
        return {"message": "Variant deleted successfully"}

    def set_default(self, variant_id: str, caller: Caller | None = None) -> dict[str, Any]:
        """
        Make a variant the single default of its product.

        Both the variant and its product must be live, and the variant active
        (an inactive default would be replaced on the next read). The switch is one
        transaction: other variants are cleared and the target flagged under the
        product row lock.
        """
        with self.db.session_scope("set default variant") as session:
            variant = self._get_live_variant(session, variant_id)
            product = lock_live_product(session, variant.product_id)
            ensure_owner_or_admin(product.seller_id, caller, "change the default variant")

            # Re-read under the lock; the variant may have been deleted or deactivated meanwhile
            session.refresh(variant)
            if variant.deleted_at is not None:
                raise NotFoundError("Variant not found")
            ensure_can_be_default(variant)
            apply_default(session, product.id, variant_id)
            session.refresh(variant)
            result = variant_to_dict(variant)

        logger.info(f"Variant {variant_id} set as default for product {result['productId']}")
        self.cache.invalidate()
        return result

    def get_default_or_promote(self, product_id: str) -> dict[str, Any]:
        """
        Return the product's default variant, promoting one if none is usable.

        When no live, active variant is flagged, the oldest active variant is
        promoted with the same clear-then-set switch as :meth:`set_default`.
        Calling this repeatedly yields the same variant.

        Raises:
            NotFoundError: product missing or without any active variant
        """
        promoted = False
        with self.db.session_scope("resolve default variant") as session:
            lock_live_product(session, product_id)

            # Checked again under the lock: a concurrent promotion may have won
            variant = session.scalars(
                select(ProductVariant).where(
                    ProductVariant.product_id == product_id,
                    ProductVariant.is_default.is_(True),
                    ProductVariant.is_active.is_(True),
                    ProductVariant.deleted_at.is_(None),
                )
            ).first()

            if variant is None:
                variant = oldest_active_variant(session, product_id)
                if variant is None:
                    raise NotFoundError("No active variants found for this product")
                apply_default(session, product_id, variant.id)
                session.refresh(variant)
                promoted = True

            result = variant_to_dict(variant)

        if promoted:
            logger.info(f"Promoted variant {result['id']} to default for product {product_id}")
            self.cache.invalidate()
        return result

    def get_variant_detail(self, product_id: str | None = None, variant_id: str | None = None) -> dict[str, Any]:
        """
        Get variant detail with full product context, for variant switching.

        With ``variant_id`` that variant is selected; with ``product_id`` the
        product's default is selected (promoted if needed).
        """
        if variant_id:
            selected_id = variant_id
        elif product_id:
            selected_id = self.get_default_or_promote(product_id)["id"]
        else:
            raise BadRequestError("Either productId or variantId must be provided")

        with self.db.session_scope("fetch variant detail") as session:
            selected = self._get_live_variant(session, selected_id)
            product = session.scalars(
                select(Product).where(Product.id == selected.product_id, Product.deleted_at.is_(None))
            ).first()
            if not product:
                raise NotFoundError("Variant not found")

            variants = session.scalars(
                select(ProductVariant)
                .where(ProductVariant.product_id == product.id, ProductVariant.deleted_at.is_(None))
                .order_by(ProductVariant.created_at.asc(), ProductVariant.id.asc())
            ).all()
            brand = session.get(Brand, product.brand_id)
            sub_category = session.get(SubCategory, product.sub_category_id)

            owners = [(ModuleType.PRODUCT, product.id)] + [(ModuleType.VARIANT, v.id) for v in variants]
            grouped = fetch_images(session, owners)

            variant_rows = [
                variant_to_dict(v, images_payload(grouped, ModuleType.VARIANT, v.id)) for v in variants
            ]
            return {
                "id": product.id,
                "name": product.name,
                "slug": product.slug,
                "brand": {"id": brand.id, "name": brand.name} if brand else None,
                "subCategory": {"id": sub_category.id, "name": sub_category.name} if sub_category else None,
                "images": images_payload(grouped, ModuleType.PRODUCT, product.id),
                "variants": variant_rows,
                "selectedVariant": next(v for v in variant_rows if v["id"] == selected.id),
            }


# Singleton instance
variant_service = VariantService()
