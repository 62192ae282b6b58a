"""
Products SQLAlchemy model.
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from catalog.db.postgres_bootstrap import Base, new_id, utcnow

class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"

class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False, index=True)
    sub_category_id = Column(String(36), ForeignKey("sub_categories.id"), nullable=False, index=True)
    status = Column(
        Enum(ProductStatus, name="product_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProductStatus.DRAFT,
        index=True,
    )
    created_by = Column(String(36), nullable=False)
    seller_id = Column(String(36), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    brand = relationship("Brand")
    sub_category = relationship("SubCategory")
    variants = relationship("ProductVariant", back_populates="product")

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, slug={self.slug}, status={self.status}, seller_id={self.seller_id})>"
