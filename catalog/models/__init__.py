"""
Init file for the SQLAlchemy models.
"""

from .brands import Brand
from .categories import Category, SubCategory
from .images import Image, ImageType, ModuleType
from .product_variants import ProductVariant
from .products import Product, ProductStatus
from .reviews import ProductReview
from .sections import Section, SectionItem

__all__ = [
    "Brand",
    "Category",
    "Image",
    "ImageType",
    "ModuleType",
    "Product",
    "ProductReview",
    "ProductStatus",
    "ProductVariant",
    "Section",
    "SectionItem",
    "SubCategory",
]
