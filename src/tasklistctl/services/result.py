"""What every list, task, template, tag, attribute and search operation returns.

INVARIANT: service methods never raise domain errors to their callers;
they return a ServiceResult whose ``error`` carries the machine-readable
code (``NOT_FOUND``, ``CONFLICT`` and so on). The CLI renders it and the
MCP tools forward it as a plain dict.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Failure details: a DomainError code, its message and the offending ids or field."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_task"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal notes, such as an unusual status transition.
        error: Structured error if ``ok`` is False.
        meta: Telemetry span tree when verbose mode is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
