"""
Graph duplicator - clones stored content sets into independent copies.

Each source id is copied on its own, in order. Within one copy the steps run
parent first (content set, passages, terms, questions); a failed child step is
recorded and the remaining steps still run. The new content set row is never
removed once written, so a partial copy stays visible under its new id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from config import get_settings
from content_sets.db import ContentStore, new_id
from content_sets.exceptions import PersistenceError

from .taxonomy import ContentStatus

# Columns regenerated rather than copied
_FRESH_COLUMNS = ("id", "created_at", "updated_at")


@dataclass
class DuplicationResult:
    """Result of a duplication batch."""

    attempted: int = 0
    succeeded: int = 0
    errors: list[str] = field(default_factory=list)
    copies: dict[str, str] = field(default_factory=dict)  # source id -> new id

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


def _fresh(row: dict[str, Any], **overrides: Any) -> dict[str, Any]:
    copied = {key: value for key, value in row.items() if key not in _FRESH_COLUMNS}
    copied["id"] = new_id()
    copied.update(overrides)
    return copied


class GraphDuplicator:
    """Copy stored content graphs with new ids and remapped internal links."""

    def __init__(self, store: ContentStore | None = None, title_suffix: str | None = None):
        self.store = store or ContentStore()
        self.title_suffix = title_suffix if title_suffix is not None else get_settings().duplicate_title_suffix

    def duplicate(self, content_set_ids: list[str]) -> DuplicationResult:
        result = DuplicationResult()
        for source_id in content_set_ids:
            result.attempted += 1
            errors_before = len(result.errors)
            self._duplicate_one(source_id, result)
            if len(result.errors) == errors_before:
                result.succeeded += 1

        logger.info(
            f"Duplication finished: {result.succeeded}/{result.attempted} succeeded, "
            f"{len(result.errors)} error(s)"
        )
        return result

    def _duplicate_one(self, source_id: str, result: DuplicationResult) -> None:
        try:
            source = self.store.select_one("content_sets", id=source_id)
        except PersistenceError as e:
            self._fail(result, f"{source_id}: content set read failed - {e.reason}")
            return
        if source is None:
            self._fail(result, f"{source_id}: source not found")
            return

        try:
            copy = self.store.insert(
                "content_sets",
                [
                    _fresh(
                        source,
                        status=ContentStatus.DUPLICATED.value,
                        title=f"{source.get('title') or ''}{self.title_suffix}",
                        version=1,
                    )
                ],
            )[0]
        except PersistenceError as e:
            self._fail(result, f"{source_id}: content set copy failed - {e.reason}")
            return

        target_id = copy["id"]
        result.copies[source_id] = target_id

        passage_ids: dict[str, str] = {}
        steps = (
            ("passages", lambda: self._copy_passages(source_id, target_id, passage_ids)),
            ("vocabulary terms", lambda: self._copy_terms(source_id, target_id, passage_ids)),
            ("vocabulary questions", lambda: self._copy_rows("vocabulary_questions", source_id, target_id)),
            ("paragraph questions", lambda: self._copy_rows("paragraph_questions", source_id, target_id)),
            ("comprehensive questions", lambda: self._copy_comprehensive(source_id, target_id)),
        )
        for step, run in steps:
            try:
                copied = run()
                logger.debug(f"{source_id}: copied {copied} {step}")
            except PersistenceError as e:
                self._fail(result, f"{source_id}: {step} copy failed - {e.reason}")

        logger.info(f"Duplicated content set {source_id} -> {target_id}")

    @staticmethod
    def _fail(result: DuplicationResult, message: str) -> None:
        logger.warning(message)
        result.errors.append(message)

    # ========================================
    # Steps
    # ========================================

    def _copy_passages(self, source_id: str, target_id: str, passage_ids: dict[str, str]) -> int:
        rows = []
        for row in self.store.select("passages", content_set_id=source_id):
            copied = _fresh(row, content_set_id=target_id)
            passage_ids[row["id"]] = copied["id"]
            rows.append(copied)
        return len(self.store.insert("passages", rows))

    def _copy_terms(self, source_id: str, target_id: str, passage_ids: dict[str, str]) -> int:
        rows = []
        for row in self.store.select("vocabulary_terms", content_set_id=source_id):
            # Unmapped passage ids are kept as they are
            passage_id = passage_ids.get(row["passage_id"], row["passage_id"])
            rows.append(_fresh(row, content_set_id=target_id, passage_id=passage_id))
        return len(self.store.insert("vocabulary_terms", rows))

    def _copy_rows(self, table: str, source_id: str, target_id: str) -> int:
        rows = [
            _fresh(row, content_set_id=target_id)
            for row in self.store.select(table, content_set_id=source_id)
        ]
        return len(self.store.insert(table, rows))

    def _copy_comprehensive(self, source_id: str, target_id: str) -> int:
        source_rows = self.store.select("comprehensive_questions", content_set_id=source_id)
        question_ids = {row["id"]: new_id() for row in source_rows}
        rows = []
        for row in source_rows:
            original = row["original_question_id"]
            copied = _fresh(
                row,
                content_set_id=target_id,
                original_question_id=question_ids.get(original, original),
            )
            copied["id"] = question_ids[row["id"]]
            rows.append(copied)
        return len(self.store.insert("comprehensive_questions", rows))
