"""
Error taxonomy for the gallery resource layer.
The HTTP layer maps these to responses in main.py.
"""
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class FieldError:
    """A single validation message attached to a (dotted) field path."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class GalleryAPIError(Exception):
    """Base class for errors raised by the gallery services."""


class GalleryNotFound(GalleryAPIError):
    """Raised when a gallery id does not resolve in the store."""

    def __init__(self, gallery_id):
        self.gallery_id = gallery_id
        super().__init__(f"Gallery ({gallery_id}) not found")


class ValidationFailed(GalleryAPIError):
    """Raised when input is rejected; the store has not been touched."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Validation failed: {summary}")


class StoreUnavailable(GalleryAPIError):
    """Raised when the underlying database fails."""
