"""
Sections and section items SQLAlchemy models.

Curation data is hard-deleted; nothing here carries a ``deleted_at`` column.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint

from catalog.db.postgres_bootstrap import Base, new_id, utcnow


class Section(Base):
    __tablename__ = "sections"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    key = Column(String(100), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship("SectionItem", back_populates="section", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Section(id={self.id}, key={self.key}, name={self.name}, is_active={self.is_active})>"


class SectionItem(Base):
    __tablename__ = "section_items"
    __table_args__ = (
        CheckConstraint(
            "(product_id IS NULL) <> (variant_id IS NULL)",
            name="ck_section_items_one_target",
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    section_id = Column(String(36), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id"), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    section = relationship("Section", back_populates="items")
    product = relationship("Product")
    variant = relationship("ProductVariant")

    def __repr__(self):
        return (
            f"<SectionItem(id={self.id}, section_id={self.section_id}, product_id={self.product_id}, "
            f"variant_id={self.variant_id}, sort_order={self.sort_order})>"
        )
