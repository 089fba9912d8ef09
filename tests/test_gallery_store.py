"""Tests for GalleryStore.

Runs against a real SQLite database (see conftest.py).
"""
import pytest
from unittest.mock import AsyncMock, Mock
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from gallery_api.exceptions import GalleryNotFound, StoreUnavailable, ValidationFailed
from gallery_api.models import Gallery, GalleryHasMedia
from gallery_api.services.gallery_store import GalleryStore


# =============================================================================
# Lookup
# =============================================================================

@pytest.mark.asyncio
async def test_find_by_id_returns_gallery(store, add_gallery):
    gallery = await add_gallery("Holidays")

    found = await store.find_by_id(gallery.id)

    assert found is not None
    assert found.name == "Holidays"


@pytest.mark.asyncio
async def test_find_by_id_returns_none_for_unknown_id(store):
    assert await store.find_by_id(12345) is None


@pytest.mark.asyncio
async def test_find_by_id_beyond_integer_range_returns_none(store):
    assert await store.find_by_id(10**20) is None


# =============================================================================
# Criteria, ordering and pagination
# =============================================================================

@pytest.mark.asyncio
async def test_find_by_filters_on_enabled(store, add_gallery):
    a = await add_gallery("A", enabled=True)
    await add_gallery("B", enabled=False)

    galleries = await store.find_by({"enabled": True}, [], 10, 1)

    assert [g.id for g in galleries] == [a.id]


@pytest.mark.asyncio
async def test_find_by_sequence_value_filters_with_in(store, add_gallery):
    a = await add_gallery("A")
    await add_gallery("B")
    c = await add_gallery("C")

    galleries = await store.find_by({"id": [a.id, c.id]})

    assert [g.name for g in galleries] == ["A", "C"]


@pytest.mark.asyncio
async def test_find_by_coerces_string_values_to_column_type(store, add_gallery):
    a = await add_gallery("A", enabled=False)
    await add_gallery("B", enabled=True)

    galleries = await store.find_by({"id": str(a.id), "enabled": "0"})

    assert [g.name for g in galleries] == ["A"]


@pytest.mark.asyncio
async def test_find_by_orders_by_requested_fields(store, add_gallery):
    for name in ("beta", "alpha", "gamma"):
        await add_gallery(name)

    galleries = await store.find_by({}, [("name", "DESC")], 10, 1)

    assert [g.name for g in galleries] == ["gamma", "beta", "alpha"]


@pytest.mark.asyncio
async def test_find_by_accepts_mapping_ordering(store, add_gallery):
    for name in ("beta", "alpha"):
        await add_gallery(name)

    galleries = await store.find_by({}, {"name": "asc"}, 10, 1)

    assert [g.name for g in galleries] == ["alpha", "beta"]


@pytest.mark.asyncio
async def test_find_by_default_order_is_stable_by_id(store, add_gallery):
    created = [await add_gallery(f"g{i}") for i in range(4)]

    first = await store.find_by({}, None, 10, 1)
    second = await store.find_by({}, None, 10, 1)

    assert [g.id for g in first] == [g.id for g in created]
    assert [g.id for g in second] == [g.id for g in first]


@pytest.mark.asyncio
async def test_pages_concatenate_to_unpaginated_result(store, add_gallery):
    for i in range(7):
        await add_gallery(f"g{i}", enabled=i % 2 == 0)

    pages = []
    for page in (1, 2, 3):
        result = await store.find_by({}, [("enabled", "DESC")], 3, page)
        assert len(result) <= 3
        pages.extend(g.id for g in result)

    everything = await store.find_by({}, [("enabled", "DESC")], 100, 1)
    assert pages == [g.id for g in everything][:9]


@pytest.mark.asyncio
async def test_page_zero_is_first_page(store, add_gallery):
    for i in range(3):
        await add_gallery(f"g{i}")

    assert [g.id for g in await store.find_by({}, None, 2, 0)] == \
        [g.id for g in await store.find_by({}, None, 2, 1)]


@pytest.mark.asyncio
async def test_max_page_size_caps_limit(session, add_gallery):
    for i in range(5):
        await add_gallery(f"g{i}")

    galleries = await GalleryStore(session, max_page_size=2).find_by({}, None, 50, 1)

    assert len(galleries) == 2


@pytest.mark.asyncio
async def test_unknown_filter_field_is_rejected(store):
    with pytest.raises(ValidationFailed) as exc_info:
        await store.find_by({"colour": "red"})

    assert exc_info.value.errors[0].field == "colour"


@pytest.mark.asyncio
async def test_bad_boolean_filter_is_rejected(store):
    with pytest.raises(ValidationFailed):
        await store.find_by({"enabled": "maybe"})


@pytest.mark.asyncio
async def test_out_of_range_integer_filter_is_rejected(store):
    with pytest.raises(ValidationFailed) as exc_info:
        await store.find_by({"id": "99999999999999999999"})

    assert exc_info.value.errors[0].field == "id"


@pytest.mark.asyncio
async def test_bad_datetime_filter_is_rejected(store):
    with pytest.raises(ValidationFailed) as exc_info:
        await store.find_by({"created_at": "yesterday"})

    assert exc_info.value.errors[0].field == "created_at"


@pytest.mark.asyncio
async def test_iso_datetime_filter_is_parsed(store, add_gallery):
    await add_gallery("A")

    assert await store.find_by({"created_at": "2001-01-01T00:00:00+00:00"}) == []


@pytest.mark.asyncio
async def test_page_past_offset_range_is_empty(store, add_gallery):
    await add_gallery("A")

    assert await store.find_by({}, None, 2**31 - 1, 2**40) == []


@pytest.mark.asyncio
async def test_bad_order_direction_is_rejected(store):
    with pytest.raises(ValidationFailed) as exc_info:
        await store.find_by({}, [("name", "SIDEWAYS")])

    assert exc_info.value.errors[0].field == "orderBy.name"


@pytest.mark.asyncio
async def test_count_with_criteria(store, add_gallery):
    await add_gallery("A", enabled=True)
    await add_gallery("B", enabled=False)
    await add_gallery("C", enabled=True)

    assert await store.count() == 3
    assert await store.count({"enabled": True}) == 2


# =============================================================================
# Save and delete
# =============================================================================

@pytest.mark.asyncio
async def test_save_assigns_id_and_persists_associations(store, session):
    gallery = Gallery(
        name="New",
        gallery_has_medias=[
            GalleryHasMedia(media_id=10, position=0),
            GalleryHasMedia(media_id=11, position=1),
        ],
    )

    saved = await store.save(gallery)

    assert saved.id is not None
    assert saved.context == "default"
    assert saved.enabled is False
    result = await session.execute(
        select(func.count(GalleryHasMedia.id)).where(GalleryHasMedia.gallery_id == saved.id)
    )
    assert result.scalar() == 2


@pytest.mark.asyncio
async def test_delete_removes_gallery_and_associations(store, session, add_gallery):
    gallery = await add_gallery("Doomed", items=[(10, 0), (11, 1)])
    gallery_id = gallery.id

    await store.delete(gallery)

    assert await store.find_by_id(gallery_id) is None
    result = await session.execute(
        select(func.count(GalleryHasMedia.id)).where(GalleryHasMedia.gallery_id == gallery_id)
    )
    assert result.scalar() == 0


@pytest.mark.asyncio
async def test_delete_of_vanished_gallery_raises_not_found(store, add_gallery):
    gallery = await add_gallery("Twice")
    await store.delete(gallery)

    with pytest.raises(GalleryNotFound):
        await store.delete(gallery)


# =============================================================================
# Driver failures
# =============================================================================

@pytest.mark.asyncio
async def test_driver_errors_surface_as_store_unavailable():
    session = Mock()
    session.execute = AsyncMock(
        side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
    )

    with pytest.raises(StoreUnavailable):
        await GalleryStore(session).find_by_id(1)


@pytest.mark.asyncio
async def test_failed_save_rolls_back():
    session = Mock()
    session.commit = AsyncMock(
        side_effect=OperationalError("INSERT", {}, Exception("disk full"))
    )
    session.rollback = AsyncMock()

    with pytest.raises(StoreUnavailable):
        await GalleryStore(session).save(Gallery(name="x"))

    session.rollback.assert_awaited_once()
