"""Request bodies. Field names are camelCase on the wire, snake_case in Python."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def payload(self) -> dict[str, Any]:
        """Fields the client actually sent, keyed by snake_case name."""
        return self.model_dump(exclude_unset=True)


# Brands / categories

class BrandCreate(CamelModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    is_active: bool = True


class BrandUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryCreate(BrandCreate):
    pass


class CategoryUpdate(BrandUpdate):
    pass


class SubCategoryCreate(BrandCreate):
    category_id: str


class SubCategoryUpdate(BrandUpdate):
    category_id: Optional[str] = None


# Products / variants

class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    brand_id: str
    sub_category_id: str


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    brand_id: Optional[str] = None
    sub_category_id: Optional[str] = None


class ProductStatusUpdate(CamelModel):
    status: str


class VariantCreate(CamelModel):
    sku: str = Field(..., min_length=1)
    attributes: Optional[dict[str, Any]] = None
    price: float = Field(..., ge=0)
    mrp: Optional[float] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    is_active: bool = True
    is_default: bool = False


class VariantUpdate(CamelModel):
    sku: Optional[str] = Field(None, min_length=1)
    attributes: Optional[dict[str, Any]] = None
    price: Optional[float] = Field(None, ge=0)
    mrp: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None


# Sections

class SectionCreate(CamelModel):
    name: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    is_active: bool = True


class SectionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    key: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class SectionItemCreate(CamelModel):
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class SectionItemUpdate(CamelModel):
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


# Reviews

class ReviewUpdate(CamelModel):
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    is_active: Optional[bool] = None
