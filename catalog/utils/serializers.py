"""Convert ORM rows into the camelCase dictionaries returned by the API."""

from datetime import datetime
from typing import Any


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _enum_value(value):
    return getattr(value, "value", value)


def image_to_dict(image) -> dict[str, Any]:
    return {"id": image.id, "url": image.url, "type": _enum_value(image.type)}


def image_to_full_dict(image) -> dict[str, Any]:
    return {
        **image_to_dict(image),
        "bucket": image.bucket,
        "objectKey": image.object_key,
        "moduleType": _enum_value(image.module_type),
        "moduleId": image.module_id,
        "createdAt": _iso(image.created_at),
    }


def brand_to_dict(brand) -> dict[str, Any]:
    return {
        "id": brand.id,
        "name": brand.name,
        "slug": brand.slug,
        "isActive": brand.is_active,
        "createdAt": _iso(brand.created_at),
        "updatedAt": _iso(brand.updated_at),
    }


def category_to_dict(category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "isActive": category.is_active,
        "createdAt": _iso(category.created_at),
        "updatedAt": _iso(category.updated_at),
    }


def sub_category_to_dict(sub_category, category=None) -> dict[str, Any]:
    data = {
        "id": sub_category.id,
        "categoryId": sub_category.category_id,
        "name": sub_category.name,
        "slug": sub_category.slug,
        "isActive": sub_category.is_active,
        "createdAt": _iso(sub_category.created_at),
        "updatedAt": _iso(sub_category.updated_at),
    }
    if category is not None:
        data["category"] = {"id": category.id, "name": category.name, "slug": category.slug}
    return data


def product_to_dict(product) -> dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "brandId": product.brand_id,
        "subCategoryId": product.sub_category_id,
        "status": _enum_value(product.status),
        "createdBy": product.created_by,
        "sellerId": product.seller_id,
        "createdAt": _iso(product.created_at),
        "updatedAt": _iso(product.updated_at),
    }


def variant_to_dict(variant, images: list | None = None) -> dict[str, Any]:
    data = {
        "id": variant.id,
        "productId": variant.product_id,
        "sku": variant.sku,
        "attributes": variant.attributes or {},
        "price": variant.price,
        "mrp": variant.mrp,
        "stock": variant.stock,
        "isActive": variant.is_active,
        "isDefault": variant.is_default,
        "createdAt": _iso(variant.created_at),
        "updatedAt": _iso(variant.updated_at),
    }
    if images is not None:
        data["images"] = images
    return data


def review_to_dict(review, images: list | None = None) -> dict[str, Any]:
    data = {
        "id": review.id,
        "productId": review.product_id,
        "userId": review.user_id,
        "rating": review.rating,
        "title": review.title,
        "comment": review.comment,
        "isVerifiedPurchase": review.is_verified_purchase,
        "isActive": review.is_active,
        "createdAt": _iso(review.created_at),
        "updatedAt": _iso(review.updated_at),
    }
    if images is not None:
        data["images"] = images
    return data


def section_to_dict(section) -> dict[str, Any]:
    return {
        "id": section.id,
        "name": section.name,
        "key": section.key,
        "isActive": section.is_active,
        "createdAt": _iso(section.created_at),
        "updatedAt": _iso(section.updated_at),
    }


def section_item_to_dict(item) -> dict[str, Any]:
    return {
        "id": item.id,
        "sectionId": item.section_id,
        "productId": item.product_id,
        "variantId": item.variant_id,
        "sortOrder": item.sort_order,
        "isActive": item.is_active,
        "createdAt": _iso(item.created_at),
        "updatedAt": _iso(item.updated_at),
    }
