"""
Images SQLAlchemy model.

An image belongs to exactly one owner, named by a ``(module_type, module_id)``
pair instead of one nullable foreign key per owner table.
"""

import enum

from sqlalchemy import Column, DateTime, Enum, Index, String

from catalog.db.postgres_bootstrap import Base, new_id, utcnow


class ModuleType(str, enum.Enum):
    PRODUCT = "product"
    VARIANT = "variant"
    PRODUCT_REVIEW = "product_review"
    SECTION = "section"
    BRAND = "brand"


class ImageType(str, enum.Enum):
    PRIMARY = "primary"
    GALLERY = "gallery"
    THUMBNAIL = "thumbnail"
    LOGO = "logo"
    BANNER = "banner"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Image(Base):
    __tablename__ = "images"
    __table_args__ = (Index("ix_images_module", "module_type", "module_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    url = Column(String(500), nullable=False)
    bucket = Column(String(100), nullable=False)
    object_key = Column(String(500), nullable=False)
    module_type = Column(Enum(ModuleType, name="image_module_type", values_callable=_values), nullable=False)
    module_id = Column(String(36), nullable=False)
    type = Column(Enum(ImageType, name="image_type", values_callable=_values), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Image(id={self.id}, module_type={self.module_type}, module_id={self.module_id}, type={self.type})>"
