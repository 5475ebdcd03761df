"""BaseService: foundation for all tasklistctl services.

Every service receives a :class:`Store` at construction time and owns its
transaction boundaries via ``self._store.transaction()``. Domain errors
raised inside a scope roll it back; :func:`reports_errors` turns them into
a failed :class:`ServiceResult` at the public method boundary.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Concatenate, ParamSpec, TypeVar

from tasklistctl.domain.errors import DomainError
from tasklistctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from tasklistctl.infrastructure.store import Store

logger = logging.getLogger(__name__)

_P = ParamSpec("_P")
_S = TypeVar("_S", bound="BaseService")


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class TaskService(BaseService):
            @reports_errors("create_task")
            def create_task(self, title: str, list_id: int) -> ServiceResult:
                with self._store.transaction() as txn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store


def failure(op: str, exc: DomainError) -> ServiceResult:
    """Build the failed result for a domain error."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail),
    )


def reports_errors(
    op: str,
) -> Callable[
    [Callable[Concatenate[_S, _P], ServiceResult]],
    Callable[Concatenate[_S, _P], ServiceResult],
]:
    """Decorator: convert a :class:`DomainError` escaping *func* into ``ok=False``."""

    def decorator(
        func: Callable[Concatenate[_S, _P], ServiceResult],
    ) -> Callable[Concatenate[_S, _P], ServiceResult]:
        @functools.wraps(func)
        def wrapper(self: _S, *args: _P.args, **kwargs: _P.kwargs) -> ServiceResult:
            try:
                return func(self, *args, **kwargs)
            except DomainError as exc:
                logger.info("%s failed: %s (%s)", op, exc.message, exc.code)
                return failure(op, exc)

        return wrapper

    return decorator
