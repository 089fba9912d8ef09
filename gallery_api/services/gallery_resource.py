"""
Gallery resource facade.
The operations the HTTP layer calls: list, get, nested media/associations,
create, update and delete. Collaborators are injected at construction.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging
import re

from gallery_api.exceptions import FieldError, GalleryNotFound, ValidationFailed
from gallery_api.models import MAX_INTEGER, Gallery, GalleryHasMedia, Media
from gallery_api.services.gallery_pipeline import GalleryWritePipeline
from gallery_api.services.gallery_store import GalleryStore, OrderBy
from gallery_api.services.media_resolver import MediaResolver

logger = logging.getLogger(__name__)

PAGE_PARAM = "page"
COUNT_PARAM = "count"
ORDER_BY_PARAM = "orderBy"
LISTING_PARAMS = (PAGE_PARAM, COUNT_PARAM, ORDER_BY_PARAM)

DEFAULT_PAGE = 1
DEFAULT_COUNT = 10

_DIGITS = re.compile(r"^\d+$")


def split_list_params(
    params: Mapping[str, Any],
    default_count: int = DEFAULT_COUNT,
) -> Tuple[Dict[str, Any], Optional[OrderBy], int, int]:
    """
    Separate pagination and ordering from filter criteria.

    Args:
        params: Raw listing parameters (page, count, orderBy and filters)
        default_count: Page size used when count is absent

    Returns:
        (criteria, order_by, count, page) where criteria has no null values
        and never contains page, count or orderBy

    Raises:
        ValidationFailed: if page or count is not an integer in [0, MAX_INTEGER]
    """
    errors = []
    page = _coerce_digits(params.get(PAGE_PARAM), DEFAULT_PAGE, PAGE_PARAM, errors)
    count = _coerce_digits(params.get(COUNT_PARAM), default_count, COUNT_PARAM, errors)
    if errors:
        raise ValidationFailed(errors)

    criteria = {
        key: value
        for key, value in params.items()
        if key not in LISTING_PARAMS and value is not None
    }
    return criteria, params.get(ORDER_BY_PARAM) or None, count, page


def _coerce_digits(value: Any, default: int, name: str, errors: List[FieldError]) -> int:
    if value is None:
        return default
    if isinstance(value, str) and _DIGITS.match(value):
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        errors.append(FieldError(name, "Must be a non-negative integer"))
        return default
    if value > MAX_INTEGER:
        errors.append(FieldError(name, f"Must be at most {MAX_INTEGER}"))
        return default
    return value


class GalleryResource:
    """
    Facade over the gallery store, media resolver and write pipeline.
    Stateless between calls; one instance is built per request.
    """

    def __init__(
        self,
        store: GalleryStore,
        resolver: MediaResolver,
        pipeline: GalleryWritePipeline,
        default_count: int = DEFAULT_COUNT,
    ):
        self.store = store
        self.resolver = resolver
        self.pipeline = pipeline
        self.default_count = default_count

    async def list_galleries(self, params: Mapping[str, Any]) -> List[Gallery]:
        """
        Retrieve one page of galleries.

        Args:
            params: page, count, orderBy and any filter criteria

        Returns:
            List[Gallery]: At most `count` galleries
        """
        criteria, order_by, count, page = split_list_params(params, self.default_count)
        return await self.store.find_by(criteria, order_by, count, page)

    async def get_gallery(self, gallery_id: int) -> Gallery:
        """
        Retrieve a gallery or raise if it does not exist.

        Raises:
            GalleryNotFound: if no gallery has this id
        """
        gallery = await self.store.find_by_id(gallery_id)
        if gallery is None:
            raise GalleryNotFound(gallery_id)
        return gallery

    async def get_gallery_media(self, gallery_id: int) -> List[Media]:
        gallery = await self.get_gallery(gallery_id)
        return await self.resolver.media_of(gallery)

    async def get_gallery_associations(self, gallery_id: int) -> List[GalleryHasMedia]:
        gallery = await self.get_gallery(gallery_id)
        return self.resolver.associations_of(gallery)

    async def create_gallery(self, raw_input: Any) -> Gallery:
        gallery = await self.pipeline.write(None, raw_input)
        logger.info(f"Created gallery ID {gallery.id}")
        return gallery

    async def update_gallery(self, gallery_id: int, raw_input: Any) -> Gallery:
        """
        Update an existing gallery.

        Raises:
            GalleryNotFound: before any validation if the gallery does not exist
            ValidationFailed: if the payload is invalid
        """
        await self.get_gallery(gallery_id)
        gallery = await self.pipeline.write(gallery_id, raw_input)
        logger.info(f"Updated gallery ID {gallery.id}")
        return gallery

    async def delete_gallery(self, gallery_id: int) -> Dict[str, bool]:
        gallery = await self.get_gallery(gallery_id)
        await self.store.delete(gallery)
        return {"deleted": True}
