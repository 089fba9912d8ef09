"""
Gallery routes.
Thin HTTP layer over GalleryResource; errors are mapped to responses by the
exception handlers registered in main.py.
"""
from fastapi import APIRouter, Body, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List

from gallery_api.config import settings
from gallery_api.database import get_db
from gallery_api.schemas import (
    DeleteResponse,
    GalleryHasMediaRead,
    GalleryRead,
    GalleryWrite,
    MediaRead,
    to_read_view,
    to_write_view,
)
from gallery_api.services.gallery_pipeline import GalleryWritePipeline
from gallery_api.services.gallery_resource import GalleryResource
from gallery_api.services.gallery_store import GalleryStore
from gallery_api.services.media_resolver import MediaRepository, MediaResolver
from gallery_api.utils.query_params import parse_listing_params

router = APIRouter()


def get_gallery_resource(db: AsyncSession = Depends(get_db)) -> GalleryResource:
    """FastAPI dependency wiring a GalleryResource to the request's session."""
    store = GalleryStore(db, max_page_size=settings.MAX_PAGE_SIZE)
    media_repository = MediaRepository(db)
    return GalleryResource(
        store=store,
        resolver=MediaResolver(media_repository),
        pipeline=GalleryWritePipeline(store, media_repository),
        default_count=settings.DEFAULT_PAGE_SIZE,
    )


@router.get("/galleries", response_model=List[GalleryRead])
async def get_galleries(
    request: Request,
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """
    Get paginated galleries.

    Query parameters:
        page: Page number, 1-indexed (default: 1)
        count: Galleries per page (default: 10)
        enabled: 0 or 1 to filter on the enabled flag
        orderBy[<field>]: ASC or DESC, repeatable
        any other parameter filters on the field of the same name

    Returns:
        List[GalleryRead]: Galleries of the requested page
    """
    params = parse_listing_params(request.query_params)
    galleries = await resource.list_galleries(params)
    return [to_read_view(gallery) for gallery in galleries]


@router.get("/galleries/{gallery_id}", response_model=GalleryRead)
async def get_gallery(
    gallery_id: int = Path(..., ge=0),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """Get a single gallery; 404 if it does not exist."""
    return to_read_view(await resource.get_gallery(gallery_id))


@router.get("/galleries/{gallery_id}/medias", response_model=List[MediaRead])
async def get_gallery_medias(
    gallery_id: int = Path(..., ge=0),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """Get the media of a gallery in display order."""
    media = await resource.get_gallery_media(gallery_id)
    return [MediaRead.model_validate(item) for item in media]


@router.get("/galleries/{gallery_id}/galleryhasmedias", response_model=List[GalleryHasMediaRead])
async def get_gallery_galleryhasmedias(
    gallery_id: int = Path(..., ge=0),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """Get the gallery/media associations of a gallery in display order."""
    associations = await resource.get_gallery_associations(gallery_id)
    return [GalleryHasMediaRead.model_validate(ghm) for ghm in associations]


@router.post("/galleries", response_model=GalleryWrite, status_code=status.HTTP_201_CREATED)
async def post_gallery(
    payload: Any = Body(default=None),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """
    Create a gallery.

    Returns:
        GalleryWrite: The created gallery

    Raises:
        400 with field errors if the payload is invalid
    """
    gallery = await resource.create_gallery(payload)
    return to_write_view(gallery)


@router.put("/galleries/{gallery_id}", response_model=GalleryWrite)
async def put_gallery(
    gallery_id: int = Path(..., ge=0),
    payload: Any = Body(default=None),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """
    Update a gallery. Fields missing from the payload keep their stored values;
    a gallery_has_medias list replaces the current associations.
    """
    gallery = await resource.update_gallery(gallery_id, payload)
    return to_write_view(gallery)


@router.delete("/galleries/{gallery_id}", response_model=DeleteResponse)
async def delete_gallery(
    gallery_id: int = Path(..., ge=0),
    resource: GalleryResource = Depends(get_gallery_resource),
):
    """Delete a gallery and its associations."""
    return await resource.delete_gallery(gallery_id)
