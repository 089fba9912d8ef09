"""
Gallery store: persistence of Gallery records and their associations.
Wraps an AsyncSession with lookup, paginated criteria queries, save and delete.
"""
from datetime import datetime
from sqlalchemy import select, func, delete, Boolean, DateTime, Integer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from gallery_api.exceptions import FieldError, GalleryNotFound, StoreUnavailable, ValidationFailed
from gallery_api.models import MAX_INTEGER, Gallery, GalleryHasMedia

logger = logging.getLogger(__name__)

OrderBy = Union[Mapping[str, str], Sequence[Tuple[str, str]]]

ORDER_DIRECTIONS = ("ASC", "DESC")

_TRUE_VALUES = {"1", "true"}
_FALSE_VALUES = {"0", "false"}

# LIMIT and OFFSET are 64-bit on every supported backend
MAX_OFFSET = 2**63 - 1


class GalleryStore:
    """
    Owns persisted Gallery records.

    Save and delete each run in a single transaction on the injected session,
    so a gallery and its associations are written or removed together.
    """

    def __init__(self, session: AsyncSession, max_page_size: Optional[int] = None):
        self.session = session
        self.max_page_size = max_page_size

    async def find_by_id(self, gallery_id: int) -> Optional[Gallery]:
        """Return the gallery with the given primary key, or None."""
        if not 0 <= gallery_id <= MAX_INTEGER:
            return None
        try:
            result = await self.session.execute(
                select(Gallery).where(Gallery.id == gallery_id)
            )
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to load gallery {gallery_id}: {str(e)}") from e
        return result.scalar_one_or_none()

    async def find_by(
        self,
        criteria: Optional[Mapping[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        limit: int = 10,
        page: int = 1,
    ) -> List[Gallery]:
        """
        Get one page of galleries matching the criteria.

        Args:
            criteria: field -> value; sequences filter with IN, scalars with equality
            order_by: (field, direction) pairs, or a mapping of field -> direction
            limit: Page size
            page: 1-indexed page number (0 is treated as 1)

        Returns:
            List[Gallery]: At most `limit` galleries

        Raises:
            ValidationFailed: if a criteria/ordering field or direction is unknown
        """
        if self.max_page_size is not None:
            limit = min(limit, self.max_page_size)

        query = select(Gallery)
        for clause in self._filter_clauses(criteria or {}):
            query = query.where(clause)

        # id is always the final sort key so pagination is stable
        query = query.order_by(*self._order_clauses(order_by), Gallery.id.asc())
        offset = max(page - 1, 0) * limit
        if offset > MAX_OFFSET:
            logger.info(f"Page {page} of size {limit} is past any stored gallery")
            return []
        query = query.limit(limit).offset(offset)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to query galleries: {str(e)}") from e
        galleries = list(result.scalars().all())

        logger.info(
            f"Retrieved {len(galleries)} galleries "
            f"(criteria: {dict(criteria or {})}, page: {page}, limit: {limit})"
        )
        return galleries

    async def count(self, criteria: Optional[Mapping[str, Any]] = None) -> int:
        query = select(func.count(Gallery.id))
        for clause in self._filter_clauses(criteria or {}):
            query = query.where(clause)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to count galleries: {str(e)}") from e
        return result.scalar()

    async def save(self, gallery: Gallery) -> Gallery:
        """Insert or update a gallery together with its associations."""
        try:
            self.session.add(gallery)
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving gallery: {str(e)}", exc_info=True)
            await self.session.rollback()
            raise StoreUnavailable(f"Failed to save gallery: {str(e)}") from e

        logger.info(
            f"Saved gallery ID {gallery.id} with {len(gallery.gallery_has_medias)} media"
        )
        return gallery

    async def delete(self, gallery: Gallery) -> None:
        """
        Remove a gallery and its associations.

        Raises:
            GalleryNotFound: if the row was removed concurrently
        """
        gallery_id = gallery.id
        try:
            await self.session.execute(
                delete(GalleryHasMedia).where(GalleryHasMedia.gallery_id == gallery_id)
            )
            result = await self.session.execute(
                delete(Gallery).where(Gallery.id == gallery_id)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise GalleryNotFound(gallery_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting gallery {gallery_id}: {str(e)}", exc_info=True)
            await self.session.rollback()
            raise StoreUnavailable(f"Failed to delete gallery {gallery_id}: {str(e)}") from e

        if gallery in self.session:
            self.session.expunge(gallery)
        logger.info(f"Deleted gallery ID {gallery_id}")

    def _filter_clauses(self, criteria: Mapping[str, Any]) -> Iterable:
        errors = []
        clauses = []
        for field, value in criteria.items():
            column = Gallery.__table__.columns.get(field)
            if column is None:
                errors.append(FieldError(field, "Unknown filter field"))
                continue
            try:
                if isinstance(value, (list, tuple, set, frozenset)):
                    clauses.append(
                        getattr(Gallery, field).in_([_coerce(column, v) for v in value])
                    )
                else:
                    clauses.append(getattr(Gallery, field) == _coerce(column, value))
            except ValueError as e:
                errors.append(FieldError(field, str(e)))

        if errors:
            raise ValidationFailed(errors)
        return clauses

    def _order_clauses(self, order_by: Optional[OrderBy]) -> list:
        if not order_by:
            return []
        pairs = order_by.items() if isinstance(order_by, Mapping) else order_by

        errors = []
        clauses = []
        for field, direction in pairs:
            if field not in Gallery.__table__.columns:
                errors.append(FieldError(f"orderBy.{field}", "Unknown order field"))
                continue
            direction = str(direction).upper()
            if direction not in ORDER_DIRECTIONS:
                errors.append(FieldError(f"orderBy.{field}", "Direction must be ASC or DESC"))
                continue
            attr = getattr(Gallery, field)
            clauses.append(attr.asc() if direction == "ASC" else attr.desc())

        if errors:
            raise ValidationFailed(errors)
        return clauses


def _coerce(column, value):
    """Convert a raw criteria value to the column's Python type."""
    if isinstance(column.type, Boolean):
        if isinstance(value, bool):
            return value
        text_value = str(value).strip().lower()
        if text_value in _TRUE_VALUES:
            return True
        if text_value in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean value: {value!r}")
    if isinstance(column.type, Integer):
        if not isinstance(value, int):
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid integer value: {value!r}")
        if not -MAX_INTEGER - 1 <= value <= MAX_INTEGER:
            raise ValueError(f"Integer value out of range: {value!r}")
        return value
    if isinstance(column.type, DateTime) and not isinstance(value, datetime):
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            raise ValueError(f"Invalid datetime value: {value!r}, expected ISO 8601")
    return value
