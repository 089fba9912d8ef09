"""Tests for the Alembic revision creating the gallery schema."""
import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from gallery_api.database import Base
from gallery_api import models  # noqa: F401

MIGRATION_PATH = (
    Path(__file__).parent.parent / "alembic" / "versions" / "3b8d2c7a91f4_create_gallery_tables.py"
)


def load_migration():
    spec = importlib.util.spec_from_file_location("create_gallery_tables", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def run(engine, step):
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            step()


def test_upgrade_matches_models(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
    migration = load_migration()

    run(engine, migration.upgrade)

    inspector = inspect(engine)
    for table in Base.metadata.sorted_tables:
        columns = {column["name"] for column in inspector.get_columns(table.name)}
        assert columns == set(table.columns.keys()), table.name


def test_downgrade_drops_tables(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
    migration = load_migration()

    run(engine, migration.upgrade)
    run(engine, migration.downgrade)

    assert inspect(engine).get_table_names() == []
