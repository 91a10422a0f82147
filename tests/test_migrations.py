from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DB_UPGRADE_PATH = PROJECT_ROOT / "tools" / "db_upgrade.py"


def _load_db_upgrade_module():
    spec = importlib.util.spec_from_file_location("db_upgrade", DB_UPGRADE_PATH)
    if spec is None or spec.loader is None:
        raise RuntimeError("Unable to load tools/db_upgrade.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migration_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
    yield engine
    engine.dispose()


def test_upgrade_creates_schema(migration_engine):
    db_upgrade = _load_db_upgrade_module()

    with migration_engine.begin() as connection:
        db_upgrade.upgrade("head", connection=connection)

    inspector = inspect(migration_engine)
    assert {"posts", "post_series_items"} <= set(inspector.get_table_names())
    columns = {column["name"] for column in inspector.get_columns("posts")}
    assert {"id", "slug", "tags", "tags_searchable", "created_at"} <= columns
    series_indexes = {index["name"] for index in inspector.get_indexes("post_series_items")}
    assert "ix_post_series_items_series_slug" in series_indexes


def test_downgrade_drops_schema(migration_engine):
    db_upgrade = _load_db_upgrade_module()

    with migration_engine.begin() as connection:
        db_upgrade.upgrade("head", connection=connection)
    with migration_engine.begin() as connection:
        db_upgrade.downgrade("base", connection=connection)

    tables = set(inspect(migration_engine).get_table_names())
    assert "posts" not in tables
    assert "post_series_items" not in tables
