"""
Media reference resolution for galleries.
Maps a gallery's ordered associations to the media they reference.
"""
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Iterable, List, Protocol
import logging

from gallery_api.exceptions import StoreUnavailable
from gallery_api.models import Gallery, GalleryHasMedia, Media

logger = logging.getLogger(__name__)


class MediaLookup(Protocol):
    """Anything able to resolve media ids to Media snapshots."""

    async def get_many(self, media_ids: Iterable[int]) -> Dict[int, Media]: ...


class MediaRepository:
    """Read-only access to the media table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many(self, media_ids: Iterable[int]) -> Dict[int, Media]:
        """
        Load media by id.

        Returns:
            dict: media id -> Media, containing only the ids that exist
        """
        ids = set(media_ids)
        if not ids:
            return {}
        try:
            result = await self.session.execute(select(Media).where(Media.id.in_(ids)))
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to load media: {str(e)}") from e
        return {media.id: media for media in result.scalars().all()}


class MediaResolver:
    """Extracts associations and referenced media from a gallery."""

    def __init__(self, media_lookup: MediaLookup):
        self.media_lookup = media_lookup

    def associations_of(self, gallery: Gallery) -> List[GalleryHasMedia]:
        return sorted(gallery.gallery_has_medias, key=lambda ghm: ghm.position)

    async def media_of(self, gallery: Gallery) -> List[Media]:
        """
        Get the media of a gallery in display order.

        References that no longer resolve are skipped with a warning,
        so the result may be shorter than the association list.
        """
        associations = self.associations_of(gallery)
        found = await self.media_lookup.get_many(ghm.media_id for ghm in associations)

        media = []
        for ghm in associations:
            item = found.get(ghm.media_id)
            if item is None:
                logger.warning(
                    f"Gallery {gallery.id} references missing media {ghm.media_id} "
                    f"at position {ghm.position}, skipping"
                )
                continue
            media.append(item)
        return media
