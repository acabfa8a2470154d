"""
Exceptions raised by the content-set engine.

InputMissingError and ValidationFailure are returned to callers with actionable
detail. PersistenceError is fatal for the single content set (or duplication id)
being written. Soft-reference misses are never errors.
"""

from __future__ import annotations


class ContentSetError(Exception):
    """Base class for all content-set engine errors."""


class InputMissingError(ContentSetError):
    """Raised when required top-level sections of the editable model are absent."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Required data missing: {', '.join(missing)}")


class ValidationFailure(ContentSetError):
    """Raised when a final save is attempted on a graph that violates business counts."""

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__(f"{len(violations)} validation violation(s): " + "; ".join(violations))


class PersistenceError(ContentSetError):
    """Raised when the underlying store rejects a write or read."""

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"{table}: {reason}")


class ConcurrencyConflictError(ContentSetError):
    """Raised under the optimistic_version policy when the stored version moved on."""

    def __init__(self, content_set_id: str, expected: int | None, actual: int | None):
        self.content_set_id = content_set_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Content set {content_set_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class InvalidStatusError(ContentSetError):
    """Raised for an unknown status value or a status callers may not assign."""


class ContentSetNotFoundError(ContentSetError):
    """Raised when an operation targets a content set id that is not stored."""

    def __init__(self, content_set_id: str):
        self.content_set_id = content_set_id
        super().__init__(f"{content_set_id}: content set not found")


class MalformedInputError(ContentSetError):
    """Raised when the editable model is present but has the wrong shape."""
