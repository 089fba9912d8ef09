"""
Pydantic schemas for request and response data validation.
Read views are used for listing/detail responses, write views echo back
created or updated galleries, and the *Input schemas validate untrusted payloads.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List

from gallery_api.models import MAX_INTEGER


class MediaRead(BaseModel):
    """
    Response schema for media referenced by a gallery.
    Used by GET /api/galleries/{id}/medias endpoint.
    """
    id: int
    name: str
    description: Optional[str] = None
    enabled: bool
    provider_name: str
    provider_reference: str
    content_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None
    context: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryHasMediaRead(BaseModel):
    """
    Response schema for a gallery/media association.
    Used by GET /api/galleries/{id}/galleryhasmedias and nested in GalleryRead.
    """
    id: int
    media_id: int
    position: int
    caption: Optional[str] = None
    enabled: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryRead(BaseModel):
    """
    Read view of a gallery.
    Used by GET /api/galleries and GET /api/galleries/{id}.
    """
    id: int
    name: str
    context: str
    default_format: str
    enabled: bool
    created_at: datetime
    updated_at: datetime
    gallery_has_medias: List[GalleryHasMediaRead] = []

    model_config = ConfigDict(from_attributes=True)


class GalleryHasMediaWrite(BaseModel):
    media_id: int
    position: int
    caption: Optional[str] = None
    enabled: bool

    model_config = ConfigDict(from_attributes=True)


class GalleryWrite(BaseModel):
    """
    Write view of a gallery: the writable fields plus the assigned id.
    Returned by POST /api/galleries and PUT /api/galleries/{id}.
    """
    id: Optional[int] = None
    name: str
    context: str
    default_format: str
    enabled: bool
    gallery_has_medias: List[GalleryHasMediaWrite] = []

    model_config = ConfigDict(from_attributes=True)


class DeleteResponse(BaseModel):
    deleted: bool


class GalleryHasMediaInput(BaseModel):
    """
    Payload entry for one association.
    Position may be omitted; it is then assigned after the highest explicit one.
    """
    media_id: int = Field(ge=0, le=MAX_INTEGER)
    position: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    caption: Optional[str] = Field(default=None, max_length=255)
    enabled: bool = True

    model_config = ConfigDict(extra="forbid")

    @field_validator("caption")
    @classmethod
    def normalize_caption(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None


class GalleryInput(BaseModel):
    """
    Request schema for creating or updating a gallery.
    Used by POST /api/galleries and PUT /api/galleries/{id}.
    """
    name: str = Field(max_length=255)
    context: str = Field(default="default", min_length=1, max_length=64)
    default_format: str = Field(default="reference", min_length=1, max_length=255)
    enabled: bool = False
    gallery_has_medias: List[GalleryHasMediaInput] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v


def to_read_view(gallery) -> GalleryRead:
    """Project a Gallery model onto its read view."""
    return GalleryRead.model_validate(gallery)


def to_write_view(gallery) -> GalleryWrite:
    """Project a Gallery model onto its write view."""
    return GalleryWrite.model_validate(gallery)
