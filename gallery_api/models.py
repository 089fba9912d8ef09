"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from gallery_api.database import Base

# Largest value an Integer column holds on every supported backend
# (PostgreSQL INTEGER is 32-bit; SQLite integers are 64-bit)
MAX_INTEGER = 2**31 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Media(Base):
    """
    Media entity referenced by galleries.
    Owned by the media library; galleries only read it.
    """
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    enabled = Column(Boolean, nullable=False, default=False)
    provider_name = Column(String(255), nullable=False)
    provider_reference = Column(String(255), nullable=False)
    content_type = Column(String(255), nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    size = Column(Integer, nullable=True)
    context = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class Gallery(Base):
    """
    Gallery model.
    A named collection of media, displayed in the order of its associations.
    """
    __tablename__ = "galleries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    context = Column(String(64), nullable=False, default="default")
    default_format = Column(String(255), nullable=False, default="reference")
    enabled = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    gallery_has_medias = relationship(
        "GalleryHasMedia",
        back_populates="gallery",
        order_by="GalleryHasMedia.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Gallery id={self.id} name={self.name!r}>"


class GalleryHasMedia(Base):
    """
    Link between a gallery and a media item.
    Position is unique within one gallery and drives display order.
    """
    __tablename__ = "gallery_has_medias"
    __table_args__ = (
        Index("ix_gallery_has_medias_gallery_position", "gallery_id", "position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    gallery_id = Column(Integer, ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False)
    # References media.id; not a foreign key, media may disappear independently
    media_id = Column(Integer, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    caption = Column(String(255), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    gallery = relationship("Gallery", back_populates="gallery_has_medias")

    def __repr__(self) -> str:
        return f"<GalleryHasMedia gallery={self.gallery_id} media={self.media_id} position={self.position}>"
