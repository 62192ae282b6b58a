"""
Brands SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, String

from catalog.db.postgres_bootstrap import Base, new_id, utcnow


class Brand(Base):
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=new_id)
    # Unique across soft-deleted rows too, so a deleted brand still reserves its name/slug
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Brand(id={self.id}, name={self.name}, slug={self.slug}, is_active={self.is_active})>"
