"""Tests for database URL diagnostics."""
from gallery_api.database import _validate_database_url


def test_empty_url_is_invalid():
    assert _validate_database_url("") == (False, "DATABASE_URL is empty")


def test_sqlite_url_is_valid():
    is_valid, diagnostic = _validate_database_url("sqlite+aiosqlite:///./gallery.db")

    assert is_valid
    assert "SQLite" in diagnostic


def test_unsupported_scheme_is_invalid():
    is_valid, diagnostic = _validate_database_url("mysql://user@localhost/db")

    assert not is_valid
    assert "mysql" in diagnostic


def test_postgres_url_without_host_is_invalid():
    assert _validate_database_url("postgresql+asyncpg:///gallery")[0] is False
