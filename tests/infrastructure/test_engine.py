"""Tests for SQLite engine setup."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from tasklistctl.infrastructure.database.engine import init_database

EXPECTED_TABLES = {
    "task_lists",
    "tasks",
    "tags",
    "task_tags",
    "list_tags",
    "attribute_definitions",
    "task_attributes",
    "list_attributes",
    "templates",
    "template_tasks",
}


class TestInitDatabase:
    def test_creates_all_tables(self, db_engine: Engine) -> None:
        assert EXPECTED_TABLES <= set(inspect(db_engine).get_table_names())

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "tasks.db"
        engine = init_database(db_path)
        try:
            assert db_path.exists()
        finally:
            engine.dispose()

    def test_idempotent(self, tmp_path: Path) -> None:
        db_path = tmp_path / "tasks.db"
        init_database(db_path).dispose()
        engine = init_database(db_path)
        try:
            assert EXPECTED_TABLES <= set(inspect(engine).get_table_names())
        finally:
            engine.dispose()


class TestPragmas:
    def test_wal_mode(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def test_foreign_keys_on(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
