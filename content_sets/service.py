"""
Content set service - the operations the surrounding application calls.

Wires the builder, validator, persister, duplicator, updater and status
lifecycle over one store. Single-item saves return a SaveResult with a definite
success flag and message; lower-level calls raise.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from loguru import logger

from config import Settings, get_settings
from content_sets.db import TABLES, ContentStore
from content_sets.exceptions import ContentSetError, ContentSetNotFoundError, ValidationFailure
from content_sets.graph import (
    BatchStatusResult,
    ContentGraph,
    ContentGraphBuilder,
    ContentStatus,
    DeletionResult,
    DuplicationResult,
    FlagAuditResult,
    GraphDuplicator,
    GraphPersister,
    GraphUpdater,
    InvariantValidator,
    QuestionFlagAuditor,
    StatusChangeResult,
    StatusLifecycle,
    ValidationReport,
)


@dataclass
class SaveResult:
    """Result of a save or update."""

    success: bool
    message: str
    content_set_id: str | None = None
    status: ContentStatus | None = None
    version: int | None = None
    violations: list[str] = field(default_factory=list)


class ContentSetService:
    """Facade over the content graph engine."""

    def __init__(
        self,
        store: ContentStore | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings()
        self.store = store or ContentStore()

        self.builder = ContentGraphBuilder(default_user_id=self.settings.default_user_id, clock=clock)
        self.validator = InvariantValidator()
        self.persister = GraphPersister(self.store, in_transaction=self.settings.persist_in_transaction)
        self.duplicator = GraphDuplicator(self.store, title_suffix=self.settings.duplicate_title_suffix)
        self.updater = GraphUpdater(self.store, conflict_policy=self.settings.conflict_policy)
        self.lifecycle = StatusLifecycle(self.store, conflict_policy=self.settings.conflict_policy)
        self.flag_auditor = QuestionFlagAuditor(self.store)

    # ========================================
    # Build / validate / persist
    # ========================================

    def build_graph(self, raw_input: dict[str, Any]) -> ContentGraph:
        return self.builder.build(raw_input)

    def validate(self, graph: ContentGraph) -> ValidationReport:
        return self.validator.validate(graph)

    def persist(self, graph: ContentGraph) -> str:
        return self.persister.persist(graph)

    # ========================================
    # Save transitions
    # ========================================

    def save_final(self, raw_input: dict[str, Any]) -> SaveResult:
        """Validate the full graph, then store it in pre-review."""
        try:
            graph = self.build_graph(raw_input)
            report = self.validate(graph)
            if not report.ok:
                raise ValidationFailure(report.violations)
            graph.content_set.status = ContentStatus.PRE_REVIEW
            content_set_id = self.persist(graph)
        except ValidationFailure as e:
            return SaveResult(False, str(e), violations=e.violations)
        except ContentSetError as e:
            logger.error(f"Final save failed: {e}")
            return SaveResult(False, str(e))

        return SaveResult(
            True,
            "Content saved",
            content_set_id=content_set_id,
            status=ContentStatus.PRE_REVIEW,
            version=1,
        )

    def save_intermediate(self, raw_input: dict[str, Any]) -> SaveResult:
        """Store header, passages and terms without validation, in first review."""
        try:
            graph = self.build_graph(raw_input).intermediate()
            graph.content_set = replace(graph.content_set, status=ContentStatus.FIRST_REVIEW)
            content_set_id = self.persist(graph)
        except ContentSetError as e:
            logger.error(f"Intermediate save failed: {e}")
            return SaveResult(False, str(e))

        return SaveResult(
            True,
            f"Intermediate content saved (status: {ContentStatus.FIRST_REVIEW.value})",
            content_set_id=content_set_id,
            status=ContentStatus.FIRST_REVIEW,
            version=1,
        )

    def update(
        self,
        content_set_id: str,
        raw_input: dict[str, Any],
        expected_version: int | None = None,
    ) -> SaveResult:
        """Replace the content of a stored set with a freshly built graph."""
        try:
            graph = self.build_graph(raw_input)
            version = self.updater.update(content_set_id, graph, expected_version=expected_version)
        except ContentSetError as e:
            logger.error(f"Update of {content_set_id} failed: {e}")
            return SaveResult(False, str(e), content_set_id=content_set_id)
        return SaveResult(True, "Content updated", content_set_id=content_set_id, version=version)

    # ========================================
    # Duplication and status
    # ========================================

    def duplicate(self, content_set_ids: list[str]) -> DuplicationResult:
        return self.duplicator.duplicate(content_set_ids)

    def set_status(
        self,
        content_set_id: str,
        status: ContentStatus | str,
        expected_version: int | None = None,
    ) -> StatusChangeResult:
        return self.lifecycle.set_status(content_set_id, status, expected_version=expected_version)

    def batch_set_status(self, content_set_ids: list[str], status: ContentStatus | str) -> BatchStatusResult:
        return self.lifecycle.batch_set_status(content_set_ids, status)

    def can_delete(self, status: ContentStatus | str | None) -> bool:
        return self.lifecycle.can_delete(status)

    def delete(self, content_set_id: str) -> DeletionResult:
        return self.lifecycle.delete(content_set_id)

    def recompute_question_flags(
        self,
        statuses: list[ContentStatus | str] | None = None,
        session_range: tuple[int, int] | None = None,
        dry_run: bool = True,
    ) -> FlagAuditResult:
        """Re-derive has_question_generated on stored terms; reports only unless dry_run is False."""
        return self.flag_auditor.recompute(statuses, session_range=session_range, dry_run=dry_run)

    # ========================================
    # Reads
    # ========================================

    def load_graph(self, content_set_id: str) -> dict[str, list[dict[str, Any]]]:
        """Stored rows of one content set, keyed by table name."""
        header = self.store.select_one("content_sets", id=content_set_id)
        if header is None:
            raise ContentSetNotFoundError(content_set_id)
        rows: dict[str, list[dict[str, Any]]] = {"content_sets": [header]}
        for table in TABLES:
            if table != "content_sets":
                rows[table] = self.store.select(table, content_set_id=content_set_id)
        return rows
