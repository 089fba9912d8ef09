"""
Validate-then-persist write path for galleries.

A write runs in three steps:
    prepare  -- overlay the raw payload on the stored gallery (or an empty one)
    validate -- pure check of the candidate, returning ValidGallery or InvalidGallery
    commit   -- apply validated data to the model and save it

Nothing reaches the store unless validation succeeds.
"""
from dataclasses import dataclass, field
from pydantic import ValidationError as PydanticValidationError
from typing import Any, FrozenSet, List, Mapping, Optional, Set, Union
import logging

from gallery_api.exceptions import FieldError, GalleryNotFound, ValidationFailed
from gallery_api.models import MAX_INTEGER, Gallery, GalleryHasMedia
from gallery_api.schemas import GalleryInput, to_write_view
from gallery_api.services.gallery_store import GalleryStore
from gallery_api.services.media_resolver import MediaLookup

logger = logging.getLogger(__name__)


@dataclass
class GalleryCandidate:
    """Unvalidated write target: a base gallery plus the merged raw fields."""
    base: Optional[Gallery]
    fields: Any
    missing_media_ids: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ValidGallery:
    base: Optional[Gallery]
    data: GalleryInput


@dataclass(frozen=True)
class InvalidGallery:
    errors: List[FieldError]


ValidationResult = Union[ValidGallery, InvalidGallery]


class GalleryWritePipeline:
    """Create/update entry point shared by POST and PUT."""

    def __init__(self, store: GalleryStore, media_lookup: MediaLookup):
        self.store = store
        self.media_lookup = media_lookup

    async def prepare(self, existing_id: Optional[int], raw_input: Any) -> GalleryCandidate:
        """
        Build a candidate from the raw payload.

        Args:
            existing_id: Gallery to update, or None to create a new one
            raw_input: Untrusted payload (normally a dict decoded from JSON)

        Returns:
            GalleryCandidate: Merged fields; the base gallery itself is left untouched

        Raises:
            GalleryNotFound: if existing_id does not resolve
        """
        base = None
        if existing_id is not None:
            base = await self.store.find_by_id(existing_id)
            if base is None:
                raise GalleryNotFound(existing_id)

        if not isinstance(raw_input, Mapping):
            return GalleryCandidate(base=base, fields=raw_input)

        fields = to_write_view(base).model_dump(exclude={"id"}) if base is not None else {}
        fields.update(raw_input)

        # Only media the payload names are checked; references already stored
        # on the base may be dangling and are resolved leniently on read
        referenced = _referenced_media_ids(raw_input.get("gallery_has_medias"))
        if base is not None:
            referenced -= {ghm.media_id for ghm in base.gallery_has_medias}
        found = await self.media_lookup.get_many(referenced) if referenced else {}

        return GalleryCandidate(
            base=base,
            fields=fields,
            missing_media_ids=frozenset(referenced - set(found)),
        )

    def validate(self, candidate: GalleryCandidate) -> ValidationResult:
        """
        Check a candidate without touching the store.

        Positions must be unique within the gallery; entries without a position
        are numbered after the highest explicit one, in payload order.
        """
        if not isinstance(candidate.fields, Mapping):
            return InvalidGallery([FieldError("", "Payload must be a JSON object")])

        try:
            data = GalleryInput.model_validate(candidate.fields)
        except PydanticValidationError as e:
            return InvalidGallery([_to_field_error(err) for err in e.errors()])

        errors = []
        used_positions = {}
        for index, item in enumerate(data.gallery_has_medias):
            if item.media_id in candidate.missing_media_ids:
                errors.append(FieldError(
                    f"gallery_has_medias.{index}.media_id",
                    f"Media ({item.media_id}) not found",
                ))
            if item.position is None:
                continue
            if item.position in used_positions:
                errors.append(FieldError(
                    f"gallery_has_medias.{index}.position",
                    f"Position {item.position} is already used by "
                    f"gallery_has_medias.{used_positions[item.position]}",
                ))
            else:
                used_positions[item.position] = index

        if errors:
            return InvalidGallery(errors)

        next_position = max(used_positions, default=-1) + 1
        items = []
        for item in data.gallery_has_medias:
            if item.position is None:
                item = item.model_copy(update={"position": next_position})
                next_position += 1
            items.append(item)
        items.sort(key=lambda item: item.position)

        return ValidGallery(
            base=candidate.base,
            data=data.model_copy(update={"gallery_has_medias": items}),
        )

    async def commit(self, valid: ValidGallery) -> Gallery:
        """Apply validated data to the base gallery (or a new one) and save it."""
        gallery = valid.base if valid.base is not None else Gallery()
        data = valid.data

        gallery.name = data.name
        gallery.context = data.context
        gallery.default_format = data.default_format
        gallery.enabled = data.enabled

        # Rows with the same (media, position) are kept so their ids and timestamps survive
        existing = {(ghm.media_id, ghm.position): ghm for ghm in gallery.gallery_has_medias}
        associations = []
        for item in data.gallery_has_medias:
            ghm = existing.pop((item.media_id, item.position), None)
            if ghm is None:
                ghm = GalleryHasMedia(media_id=item.media_id, position=item.position)
            ghm.caption = item.caption
            ghm.enabled = item.enabled
            associations.append(ghm)
        gallery.gallery_has_medias = associations

        return await self.store.save(gallery)

    async def write(self, existing_id: Optional[int], raw_input: Any) -> Gallery:
        """
        Run prepare, validate and commit.

        Raises:
            GalleryNotFound: if existing_id does not resolve (before validation runs)
            ValidationFailed: if the payload is invalid; nothing is written
        """
        candidate = await self.prepare(existing_id, raw_input)
        result = self.validate(candidate)
        if isinstance(result, InvalidGallery):
            logger.info(
                f"Rejected gallery write (id: {existing_id}): "
                f"{[error.to_dict() for error in result.errors]}"
            )
            raise ValidationFailed(result.errors)
        return await self.commit(result)


def _referenced_media_ids(items: Any) -> Set[int]:
    """Collect the media ids a payload refers to, ignoring malformed entries."""
    ids = set()
    if not isinstance(items, list):
        return ids
    for item in items:
        if not isinstance(item, Mapping):
            continue
        value = item.get("media_id")
        if isinstance(value, bool):
            continue
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        elif isinstance(value, str) and value.strip().isdigit():
            value = int(value)
        # Out-of-range ids are left to schema validation
        if isinstance(value, int) and 0 <= value <= MAX_INTEGER:
            ids.add(value)
    return ids


def _to_field_error(error: dict) -> FieldError:
    return FieldError(".".join(str(part) for part in error["loc"]), error["msg"])
