"""
Product variants SQLAlchemy model.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint

from catalog.db.postgres_bootstrap import Base, new_id, utcnow


class ProductVariant(Base):
    __tablename__ = "product_variants"
    __table_args__ = (
        # At most one live default per product. The service keeps this true with a
        # clear-then-set transaction; the index rejects anything that slips past it.
        Index(
            "uq_product_variants_one_default",
            "product_id",
            unique=True,
            postgresql_where=text("is_default AND deleted_at IS NULL"),
            sqlite_where=text("is_default = 1 AND deleted_at IS NULL"),
        ),
        Index("ix_product_variants_product_created", "product_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    sku = Column(String(100), nullable=False, unique=True)  # global, soft-deleted rows included
    attributes = Column(JSON, nullable=False, default=dict)
    price = Column(Float, CheckConstraint("price >= 0.0"), nullable=False)
    mrp = Column(Float, CheckConstraint("mrp IS NULL OR mrp >= 0.0"), nullable=True)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    product = relationship("Product", back_populates="variants")

    def __repr__(self):
        return (
            f"<ProductVariant(id={self.id}, product_id={self.product_id}, sku={self.sku}, price={self.price}, "
            f"is_default={self.is_default}, is_active={self.is_active})>"
        )
