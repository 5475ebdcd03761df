"""Shared pytest fixtures and test helpers for tasklistctl tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from tasklistctl.config.settings import TaskSettings
from tasklistctl.infrastructure.database.engine import init_database
from tasklistctl.infrastructure.store import Store
from tasklistctl.services.telemetry import _current_span, disable_telemetry


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` CLI runs enable telemetry process-wide; switch it off again."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / "test.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary workspace directory, isolated from any ambient config."""
    monkeypatch.delenv("TASKLISTCTL_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def store(store_root: Path) -> Generator[Store]:
    """Store over a fresh database in the temporary workspace."""
    s = Store(TaskSettings.from_cli(root=store_root))
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_store(store_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_store")`` on command test
    classes.
    """
    monkeypatch.chdir(store_root)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def create_list(store: Store, name: str, **kwargs: Any) -> dict[str, Any]:
    """Create a list via ListService, asserting success."""
    from tasklistctl.services.lists import ListService

    result = ListService(store).create_list(name, **kwargs)
    assert result.ok, result.error
    return result.data


def create_task(store: Store, title: str, list_id: int, **kwargs: Any) -> dict[str, Any]:
    """Create a task via TaskService, asserting success."""
    from tasklistctl.services.tasks import TaskService

    result = TaskService(store).create_task(title, list_id, **kwargs)
    assert result.ok, result.error
    return result.data


def create_tag(store: Store, name: str, **kwargs: Any) -> dict[str, Any]:
    """Create a tag via TagService, asserting success."""
    from tasklistctl.services.tags import TagService

    result = TagService(store).create_tag(name, **kwargs)
    assert result.ok, result.error
    return result.data


def task_status(store: Store, task_id: int) -> str:
    """Current stored status of a task."""
    from tasklistctl.services.tasks import TaskService

    result = TaskService(store).get_task(task_id)
    assert result.ok, result.error
    return result.data["status"]
