"""
Value-based references between graph records.

Vocabulary questions point at terms by text and paragraph questions point at
paragraphs by ordinal. Neither is a foreign key: a reference that does not
resolve is not an error, the resolver simply returns None.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import PassageRecord, VocabularyTermRecord


def normalize_term(text: str | None) -> str:
    """Comparison key for term text: trimmed and case-folded."""
    return (text or "").strip().casefold()


@dataclass(frozen=True)
class TermReference:
    """Reference to a vocabulary term by its normalized text."""

    text: str

    @classmethod
    def of(cls, raw: str | None) -> TermReference:
        return cls(normalize_term(raw))

    def matches(self, term: str | None) -> bool:
        return bool(self.text) and normalize_term(term) == self.text

    def resolve(self, terms: Iterable[VocabularyTermRecord]) -> VocabularyTermRecord | None:
        """First term sharing this text, or None."""
        for term in terms:
            if self.matches(term.term):
                return term
        return None

    def resolve_all(self, terms: Iterable[VocabularyTermRecord]) -> list[VocabularyTermRecord]:
        """Every term sharing this text; a question may mark more than one term."""
        return [term for term in terms if self.matches(term.term)]


@dataclass(frozen=True)
class ParagraphReference:
    """Reference to a paragraph slot (1..10) of a passage by ordinal."""

    paragraph_number: int

    def resolve(self, passage: PassageRecord | None) -> str | None:
        """Paragraph text at this ordinal, or None when absent or blank."""
        if passage is None:
            return None
        index = self.paragraph_number - 1
        if not 0 <= index < len(passage.paragraphs):
            return None
        return passage.paragraphs[index]
