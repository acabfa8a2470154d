"""
Question flag audit - re-derives has_question_generated for stored terms.

A term is flagged when its own content set holds a vocabulary question whose
normalized term text matches. The audit selects content sets by status (and
optionally a numeric session range), reports every term whose stored flag
disagrees, and in a live run writes the corrected value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from content_sets.db import ContentStore
from content_sets.exceptions import PersistenceError

from .references import TermReference
from .taxonomy import ContentStatus


@dataclass
class FlagChange:
    term_id: str
    content_set_id: str
    term: str
    current: bool
    should_be: bool

    @property
    def reason(self) -> str:
        if self.should_be:
            return "vocabulary question exists but term is not flagged"
        return "term is flagged but no vocabulary question exists"


@dataclass
class FlagAuditResult:
    """Result of a flag audit run."""

    dry_run: bool
    content_sets: int = 0
    terms_checked: int = 0
    changes: list[FlagChange] = field(default_factory=list)
    updated: int = 0
    errors: list[str] = field(default_factory=list)


def _in_session_range(row: dict[str, Any], start: int, end: int) -> bool:
    """Sets without a numeric session number fall outside every range."""
    try:
        number = int(str(row.get("session_number") or "").strip())
    except ValueError:
        return False
    return start <= number <= end


class QuestionFlagAuditor:
    """Find and repair vocabulary terms whose question flag is out of date."""

    def __init__(self, store: ContentStore | None = None):
        self.store = store or ContentStore()

    def recompute(
        self,
        statuses: list[ContentStatus | str] | None = None,
        session_range: tuple[int, int] | None = None,
        dry_run: bool = True,
    ) -> FlagAuditResult:
        """
        Re-derive has_question_generated for the selected content sets.

        Args:
            statuses: Only audit sets in these statuses (all sets when empty)
            session_range: Inclusive (start, end) session numbers; sets without
                a numeric session number are skipped when given
            dry_run: Report the changes without writing them

        Raises:
            InvalidStatusError: Unknown status value
        """
        result = FlagAuditResult(dry_run=dry_run)
        content_sets = self._select_sets(statuses, session_range)
        result.content_sets = len(content_sets)

        for content_set in content_sets:
            content_set_id = content_set["id"]
            terms = self.store.select("vocabulary_terms", content_set_id=content_set_id)
            references = [
                TermReference.of(q["term"])
                for q in self.store.select("vocabulary_questions", content_set_id=content_set_id)
            ]
            result.terms_checked += len(terms)
            for term in terms:
                should_be = any(ref.matches(term["term"]) for ref in references)
                if bool(term["has_question_generated"]) != should_be:
                    result.changes.append(
                        FlagChange(
                            term_id=term["id"],
                            content_set_id=content_set_id,
                            term=term["term"],
                            current=bool(term["has_question_generated"]),
                            should_be=should_be,
                        )
                    )

        logger.info(
            f"Flag audit: {len(result.changes)} of {result.terms_checked} term(s) "
            f"in {result.content_sets} content set(s) disagree"
        )
        if dry_run:
            return result

        for change in result.changes:
            try:
                self.store.update(
                    "vocabulary_terms", {"has_question_generated": change.should_be}, id=change.term_id
                )
                result.updated += 1
            except PersistenceError as e:
                message = f"{change.term_id}: flag update failed - {e.reason}"
                logger.warning(message)
                result.errors.append(message)

        logger.info(f"Flag audit: updated {result.updated} term(s), {len(result.errors)} error(s)")
        return result

    def _select_sets(
        self,
        statuses: list[ContentStatus | str] | None,
        session_range: tuple[int, int] | None,
    ) -> list[dict[str, Any]]:
        if statuses:
            content_sets = []
            for status in dict.fromkeys(ContentStatus.parse(s) for s in statuses):
                content_sets.extend(self.store.select("content_sets", status=status.value))
        else:
            content_sets = self.store.select("content_sets")

        if session_range is not None:
            start, end = session_range
            content_sets = [row for row in content_sets if _in_session_range(row, start, end)]
        return content_sets
