"""Domain error taxonomy.

Services raise these inside a storage transaction so the scope rolls back,
then convert them to a ``ServiceError`` at the method boundary. Each class
carries the machine-readable ``code`` that callers switch on.
"""

from __future__ import annotations

from typing import Any, ClassVar


class DomainError(Exception):
    """Base for every failure the domain layer reports to callers."""

    code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class ValidationError(DomainError):
    """Malformed or missing input (empty title, oversized name, bad attribute value)."""

    code = "VALIDATION_FAILED"


class NotFoundError(DomainError):
    """A referenced id does not resolve to a live row."""

    code = "NOT_FOUND"

    @classmethod
    def for_entity(cls, entity: str, entity_id: int) -> NotFoundError:
        return cls(f"{entity} {entity_id} not found", entity=entity, id=entity_id)


class ConflictError(DomainError):
    """Uniqueness violation, or a write against an already-deleted entity."""

    code = "CONFLICT"


class IntegrityError(DomainError):
    """Structural invariant violation (hierarchy cycle, blocked delete)."""

    code = "INTEGRITY_VIOLATION"


class TransientStorageError(DomainError):
    """The store is locked, timed out, or unavailable. Callers own the retry policy."""

    code = "STORAGE_UNAVAILABLE"
