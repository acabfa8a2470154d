"""
Status lifecycle - review status changes and the delete guard.

Any listed review status may be set directly; the only rule enforced is that a
content set can be deleted while it is still in pre-review (검수 전). The
duplicated marker (복제) is written by the duplicator alone.

Every status change bumps the content set's version. Under the
optimistic_version conflict policy a change must name the version it was based
on and fails when the stored row has moved on.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from config import get_settings
from content_sets.db import CHILD_TABLES, ContentStore
from content_sets.exceptions import ConcurrencyConflictError, ContentSetError, InvalidStatusError

from .taxonomy import ContentStatus


@dataclass
class StatusChangeResult:
    success: bool
    content_set_id: str
    message: str
    status: ContentStatus | None = None
    version: int | None = None


@dataclass
class BatchStatusResult:
    """Result of a batch status change."""

    status: ContentStatus
    attempted: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.attempted - self.updated


@dataclass
class DeletionResult:
    success: bool
    content_set_id: str
    message: str
    removed: dict[str, int] = field(default_factory=dict)  # table -> rows removed


def not_found_message(content_set_id: str) -> str:
    return f"{content_set_id}: content set not found"


class StatusLifecycle:
    """Set review status and guard deletion of content sets."""

    def __init__(self, store: ContentStore | None = None, conflict_policy: str | None = None):
        self.store = store or ContentStore()
        self.conflict_policy = conflict_policy or get_settings().conflict_policy

    @property
    def optimistic(self) -> bool:
        return self.conflict_policy == "optimistic_version"

    # ========================================
    # Delete guard
    # ========================================

    @staticmethod
    def can_delete(status: ContentStatus | str | None) -> bool:
        """Only pre-review content sets may be deleted."""
        if status is None:
            return False
        try:
            return ContentStatus.parse(status) is ContentStatus.PRE_REVIEW
        except InvalidStatusError:
            return False

    def delete(self, content_set_id: str) -> DeletionResult:
        """Delete a pre-review content set and every child row it owns."""
        row = self.store.select_one("content_sets", id=content_set_id)
        if row is None:
            return DeletionResult(False, content_set_id, not_found_message(content_set_id))

        if not self.can_delete(row["status"]):
            message = (
                f"Content set {content_set_id} is in status '{row['status']}'. "
                f"Change its status back to '{ContentStatus.PRE_REVIEW.value}' (pre-review) before deleting."
            )
            logger.info(f"Delete rejected: {message}")
            return DeletionResult(False, content_set_id, message)

        removed: dict[str, int] = {}
        with self.store.transaction() as store:
            for table in reversed(CHILD_TABLES):
                removed[table] = store.delete(table, content_set_id=content_set_id)
            removed["content_sets"] = store.delete("content_sets", id=content_set_id)

        logger.info(f"Deleted content set {content_set_id} ({sum(removed.values())} row(s))")
        return DeletionResult(True, content_set_id, "Content set deleted", removed)

    # ========================================
    # Status changes
    # ========================================

    @staticmethod
    def assignable(status: ContentStatus | str) -> ContentStatus:
        """Parse a status callers may set. Raises InvalidStatusError otherwise."""
        target = ContentStatus.parse(status)
        if target is ContentStatus.DUPLICATED:
            raise InvalidStatusError(
                f"Status '{target.value}' is assigned by duplication and cannot be set directly"
            )
        return target

    def set_status(
        self,
        content_set_id: str,
        status: ContentStatus | str,
        expected_version: int | None = None,
    ) -> StatusChangeResult:
        """
        Set the review status of one content set.

        Raises:
            InvalidStatusError: Unknown status or the duplicated marker
            ConcurrencyConflictError: Version mismatch under optimistic_version
        """
        target = self.assignable(status)
        row = self.store.select_one("content_sets", id=content_set_id)
        if row is None:
            return StatusChangeResult(False, content_set_id, not_found_message(content_set_id))

        if self.optimistic and expected_version is None:
            raise ConcurrencyConflictError(content_set_id, None, row["version"])
        based_on = expected_version if self.optimistic else None

        version = self._write_status(content_set_id, target, row["version"], based_on)
        logger.info(f"Content set {content_set_id}: status '{row['status']}' -> '{target.value}'")
        return StatusChangeResult(
            True,
            content_set_id,
            f"Status changed to '{target.value}'",
            status=target,
            version=version,
        )

    def batch_set_status(
        self, content_set_ids: list[str], status: ContentStatus | str
    ) -> BatchStatusResult:
        """Set one status on many content sets; each id succeeds or fails on its own."""
        target = self.assignable(status)
        result = BatchStatusResult(status=target)

        for content_set_id in content_set_ids:
            result.attempted += 1
            try:
                row = self.store.select_one("content_sets", id=content_set_id)
                if row is None:
                    result.errors.append(not_found_message(content_set_id))
                    logger.warning(not_found_message(content_set_id))
                    continue
                # Compare against the version just read so concurrent edits still surface
                based_on = row["version"] if self.optimistic else None
                self._write_status(content_set_id, target, row["version"], based_on)
                result.updated += 1
            except ContentSetError as e:
                result.errors.append(f"{content_set_id}: {e}")
                logger.warning(f"Status change failed for {content_set_id}: {e}")

        logger.info(
            f"Batch status '{target.value}': {result.updated}/{result.attempted} updated, "
            f"{len(result.errors)} error(s)"
        )
        return result

    def _write_status(
        self,
        content_set_id: str,
        target: ContentStatus,
        current_version: int,
        expected_version: int | None,
    ) -> int:
        """Write the status and bump the version; compare-and-set when a version is expected."""
        filters: dict[str, object] = {"id": content_set_id}
        base = current_version
        if expected_version is not None:
            filters["version"] = expected_version
            base = expected_version

        updated = self.store.update(
            "content_sets", {"status": target.value, "version": base + 1}, **filters
        )
        if not updated:
            latest = self.store.select_one("content_sets", id=content_set_id)
            raise ConcurrencyConflictError(
                content_set_id, expected_version, latest["version"] if latest else None
            )
        return updated[0]["version"]
