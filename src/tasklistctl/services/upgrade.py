"""UpgradeService: database schema migration with Alembic.

Pipeline: BACKUP → MIGRATE → VALIDATE → REPORT
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from tasklistctl.infrastructure.database.migrations import build_config
from tasklistctl.services._helpers import now_compact
from tasklistctl.services.base import BaseService
from tasklistctl.services.result import ServiceError, ServiceResult
from tasklistctl.services.telemetry import traced

logger = logging.getLogger(__name__)

OP = "upgrade"


class UpgradeService(BaseService):
    """Reports, applies and stamps Alembic revisions for the store's database."""

    def _tables_exist(self) -> bool:
        """True when the schema predates version tracking (tables but no revision)."""
        return "tasks" in inspect(self._store.engine).get_table_names()

    def _backup_db(self) -> Path:
        """Snapshot the database (WAL contents included) next to it."""
        backup_dir = self._store.db_path.parent / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = backup_dir / f"tasklist-{now_compact()}.db"
        backup_path.unlink(missing_ok=True)

        raw = self._store.engine.raw_connection()
        try:
            cursor = raw.cursor()
            cursor.execute("VACUUM INTO ?", (str(backup_path),))
            cursor.close()
        finally:
            raw.close()

        keep = self._store.settings.database.backup_max_count
        backups = sorted(backup_dir.glob("tasklist-*.db"))
        for old in backups[: max(0, len(backups) - keep)]:
            old.unlink(missing_ok=True)
        return backup_path

    def _integrity_problems(self) -> list[str]:
        problems: list[str] = []
        with self._store.engine.connect() as conn:
            result = conn.exec_driver_sql("PRAGMA integrity_check").scalar()
            if result != "ok":
                problems.append(f"integrity_check: {result}")
            for row in conn.exec_driver_sql("PRAGMA foreign_key_check"):
                problems.append(f"foreign key violation in {row[0]} (rowid {row[1]})")
        return problems

    @traced
    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        try:
            cfg = build_config(self._store.db_path)
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._store.engine.connect() as conn:
                current = MigrationContext.configure(conn).get_current_revision()

            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                rev_obj = script.get_revision(head)
                while rev_obj is not None and rev_obj.revision != current:
                    pending.append({"revision": rev_obj.revision, "description": rev_obj.doc or ""})
                    down = rev_obj.down_revision
                    if down is None:
                        break
                    rev_obj = script.get_revision(str(down))
        except Exception as exc:
            logger.warning("Migration check failed", exc_info=True)
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(
                    code="CHECK_FAILED", message=f"Failed to check migrations: {exc}"
                ),
            )

        return ServiceResult(
            ok=True,
            op=OP,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    @traced
    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → VALIDATE → REPORT pipeline."""
        check_result = self.check_pending()
        if not check_result.ok:
            return check_result

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=OP,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Database is already up to date",
                },
            )

        try:
            backup_path = self._backup_db()
        except Exception as exc:
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(code="BACKUP_FAILED", message=f"Backup failed: {exc}"),
            )

        stamped = False
        try:
            cfg = build_config(self._store.db_path)
            if check_result.data["current"] is None and self._tables_exist():
                # Tables were created directly from the schema: record them as head.
                command.stamp(cfg, "head")
                stamped = True
            else:
                command.upgrade(cfg, "head")
        except Exception as exc:
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(
                    code="MIGRATION_FAILED",
                    message=f"Migration failed: {exc}. Backup at: {backup_path}",
                    detail={"backup_path": str(backup_path)},
                ),
            )

        warnings = [f"Post-migration check: {p}" for p in self._integrity_problems()]
        return ServiceResult(
            ok=True,
            op=OP,
            data={
                "applied_count": 0 if stamped else pending_count,
                "stamped": stamped,
                "current": check_result.data["head"],
                "backup_path": str(backup_path),
            },
            warnings=warnings,
        )

    @traced
    def stamp_current(self) -> ServiceResult:
        """Stamp the database as at head without running migrations."""
        try:
            cfg = build_config(self._store.db_path)
            command.stamp(cfg, "head")
            head = ScriptDirectory.from_config(cfg).get_current_head()
        except Exception as exc:
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(code="STAMP_FAILED", message=f"Failed to stamp database: {exc}"),
            )
        return ServiceResult(ok=True, op=OP, data={"stamped": True, "current": head})
