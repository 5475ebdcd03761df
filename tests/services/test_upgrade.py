"""Tests for UpgradeService against a store whose tables predate tracking."""

from __future__ import annotations

from pathlib import Path

from tasklistctl.infrastructure.store import Store
from tasklistctl.services.upgrade import UpgradeService
from tests.conftest import create_list


class TestCheckPending:
    def test_untracked_database_has_baseline_pending(self, store: Store) -> None:
        result = UpgradeService(store).check_pending()
        assert result.ok
        assert result.data["current"] is None
        assert result.data["head"] == "001_baseline"
        assert result.data["pending_count"] == 1
        assert result.data["pending"][0]["revision"] == "001_baseline"


class TestApply:
    def test_stamps_existing_tables_and_backs_up(self, store: Store) -> None:
        create_list(store, "keep me")
        result = UpgradeService(store).apply()
        assert result.ok, result.error
        assert result.data["stamped"] is True
        assert result.data["applied_count"] == 0
        assert result.data["current"] == "001_baseline"
        assert result.warnings == []

        backup = Path(result.data["backup_path"])
        assert backup.exists()
        assert backup.parent == store.db_path.parent / "backups"

        after = UpgradeService(store).check_pending()
        assert after.data["pending_count"] == 0
        assert after.data["current"] == "001_baseline"

    def test_second_apply_is_noop(self, store: Store) -> None:
        svc = UpgradeService(store)
        svc.apply()
        result = svc.apply()
        assert result.ok
        assert result.data["applied_count"] == 0
        assert result.data["message"] == "Database is already up to date"


class TestStamp:
    def test_stamp_current(self, store: Store) -> None:
        result = UpgradeService(store).stamp_current()
        assert result.ok
        assert result.data == {"stamped": True, "current": "001_baseline"}
        assert UpgradeService(store).check_pending().data["pending_count"] == 0
