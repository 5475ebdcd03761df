"""Store: the storage gateway injected into every service.

Each domain operation opens its own scope with :meth:`Store.transaction`
(writes) or :meth:`Store.read` (reads). A scope owns one pooled connection
for its lifetime and releases it on every exit path; no connection is
shared between operations.

Storage-level failures are translated to domain errors at the scope
boundary so callers never see driver exceptions or SQL text.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table, select
from sqlalchemy import exc as sa_exc

from tasklistctl.domain.errors import (
    ConflictError,
    IntegrityError,
    NotFoundError,
    TransientStorageError,
)
from tasklistctl.infrastructure.database.engine import init_database

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from tasklistctl.config.settings import TaskSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within a scope
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active scope with its connection and row-resolution helpers."""

    conn: Connection

    def fetch(self, table: Table, entity_id: int) -> dict[str, Any] | None:
        """Return the row with *entity_id* (deleted or not), or None."""
        row = self.conn.execute(select(table).where(table.c.id == entity_id)).first()
        return dict(row._mapping) if row is not None else None

    def require_live(self, table: Table, entity_id: int, entity: str) -> dict[str, Any]:
        """Return the live row with *entity_id*.

        Raises NotFoundError when it is absent or soft-deleted.
        """
        row = self.fetch(table, entity_id)
        if row is None or row.get("deleted_at") is not None:
            raise NotFoundError.for_entity(entity, entity_id)
        return row

    def require_writable(self, table: Table, entity_id: int, entity: str) -> dict[str, Any]:
        """Return the live row with *entity_id* for an association write.

        Raises NotFoundError when absent and ConflictError when the row
        exists but is soft-deleted.
        """
        row = self.fetch(table, entity_id)
        if row is None:
            raise NotFoundError.for_entity(entity, entity_id)
        if row.get("deleted_at") is not None:
            raise ConflictError(
                f"{entity} {entity_id} is deleted and cannot be modified",
                entity=entity,
                id=entity_id,
            )
        return row


def _translate(exc: sa_exc.DBAPIError) -> Exception:
    """Map a driver error to the domain taxonomy without leaking SQL."""
    raw = str(exc.orig) if exc.orig is not None else ""
    if isinstance(exc, sa_exc.IntegrityError):
        if "UNIQUE" in raw:
            return ConflictError("A record with the same unique value already exists")
        return IntegrityError("A storage constraint was violated")
    if not isinstance(exc, sa_exc.OperationalError):
        return TransientStorageError("Storage could not be read; check the database file")
    return TransientStorageError("Storage is unavailable or timed out; retry later")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Store:
    """Owns the SQLAlchemy engine and hands out scoped transactions.

    Created once per process (CLI invocation or MCP server) from the
    resolved :class:`TaskSettings`. Services receive it through their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: TaskSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            settings.db_path, busy_timeout=settings.database.busy_timeout
        )

    @property
    def db_path(self) -> Path:
        return self._settings.db_path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> TaskSettings:
        return self._settings

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Atomic write scope.

        Commits when the block exits normally and rolls back on any
        exception, so a domain error raised mid-operation leaves the
        database unchanged.

        Usage::

            with store.transaction() as txn:
                txn.require_live(tasks, task_id, "Task")
                txn.conn.execute(update(tasks)...)
        """
        try:
            with self._engine.begin() as conn:
                yield StoreTransaction(conn=conn)
        except sa_exc.DBAPIError as exc:
            logger.debug("Storage error in transaction: %s", exc.orig)
            raise _translate(exc) from exc

    @contextmanager
    def read(self) -> Iterator[StoreTransaction]:
        """Read-only scope; never commits."""
        try:
            with self._engine.connect() as conn:
                yield StoreTransaction(conn=conn)
        except sa_exc.DBAPIError as exc:
            logger.debug("Storage error in read scope: %s", exc.orig)
            raise _translate(exc) from exc

    def close(self) -> None:
        """Dispose of the connection pool."""
        self._engine.dispose()
