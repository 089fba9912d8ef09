"""Test configuration and fixtures for the Gallery API.

Every test gets its own SQLite database file under tmp_path, so tests never
share state. Route tests talk to the app through httpx's ASGI transport with
get_db overridden to use the test database.
"""
import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gallery_api.database import Base, get_db
from gallery_api.main import app
from gallery_api.models import Gallery, GalleryHasMedia, Media
from gallery_api.services.gallery_pipeline import GalleryWritePipeline
from gallery_api.services.gallery_resource import GalleryResource
from gallery_api.services.gallery_store import GalleryStore
from gallery_api.services.media_resolver import MediaRepository, MediaResolver


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine on a fresh database file with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return GalleryStore(session)


@pytest.fixture
def media_repository(session):
    return MediaRepository(session)


@pytest.fixture
def pipeline(store, media_repository):
    return GalleryWritePipeline(store, media_repository)


@pytest.fixture
def resource(store, media_repository, pipeline):
    return GalleryResource(
        store=store,
        resolver=MediaResolver(media_repository),
        pipeline=pipeline,
    )


@pytest.fixture
def add_media(session):
    """Insert media rows with the given ids."""
    async def _add_media(*media_ids):
        media = [
            Media(
                id=media_id,
                name=f"media-{media_id}",
                enabled=True,
                provider_name="image",
                provider_reference=f"{media_id}.jpg",
                content_type="image/jpeg",
            )
            for media_id in media_ids
        ]
        session.add_all(media)
        await session.commit()
        return media

    return _add_media


@pytest.fixture
def add_gallery(session):
    """Insert a gallery; items are (media_id, position) pairs."""
    async def _add_gallery(name, enabled=True, items=(), context="default"):
        gallery = Gallery(
            name=name,
            enabled=enabled,
            context=context,
            gallery_has_medias=[
                GalleryHasMedia(media_id=media_id, position=position)
                for media_id, position in items
            ],
        )
        session.add(gallery)
        await session.commit()
        return gallery

    return _add_gallery


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client bound to the app, using the per-test database."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
