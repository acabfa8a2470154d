"""
Business-count checks run before a final save.

All checks run on every call; the report lists every violation found rather
than stopping at the first.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from loguru import logger

from .models import ContentGraph
from .references import normalize_term
from .taxonomy import Difficulty

VOCABULARY_BASIC_PER_TERM = 3
VOCABULARY_SUPPLEMENTARY_PER_TERM = 2
QUESTIONS_PER_PARAGRAPH = 2
COMPREHENSIVE_TYPES = 3
COMPREHENSIVE_BASIC_PER_TYPE = 1
COMPREHENSIVE_SUPPLEMENTARY_PER_TYPE = 2


@dataclass
class ValidationReport:
    """Result of validating a graph."""

    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


class InvariantValidator:
    """Check vocabulary, paragraph and comprehensive question counts."""

    def validate(self, graph: ContentGraph) -> ValidationReport:
        report = ValidationReport()
        report.violations.extend(self._check_vocabulary(graph))
        report.violations.extend(self._check_paragraphs(graph))
        report.violations.extend(self._check_comprehensive(graph))

        if report.ok:
            logger.debug(f"Graph '{graph.content_set.title}' passed validation")
        else:
            logger.info(
                f"Graph '{graph.content_set.title}' failed validation with "
                f"{len(report.violations)} violation(s)"
            )
        return report

    @staticmethod
    def _check_vocabulary(graph: ContentGraph) -> list[str]:
        basic: Counter[str] = Counter()
        supplementary: Counter[str] = Counter()
        labels: dict[str, str] = {}
        for q in graph.vocabulary_questions:
            key = normalize_term(q.term)
            labels.setdefault(key, q.term.strip())
            if q.difficulty is Difficulty.SUPPLEMENTARY:
                supplementary[key] += 1
            else:
                basic[key] += 1

        violations = []
        for key, label in labels.items():
            if (basic[key], supplementary[key]) != (
                VOCABULARY_BASIC_PER_TERM,
                VOCABULARY_SUPPLEMENTARY_PER_TERM,
            ):
                violations.append(
                    f"Vocabulary term '{label}': expected {VOCABULARY_BASIC_PER_TERM} basic + "
                    f"{VOCABULARY_SUPPLEMENTARY_PER_TERM} supplementary questions, "
                    f"found {basic[key]} + {supplementary[key]}"
                )
        return violations

    @staticmethod
    def _check_paragraphs(graph: ContentGraph) -> list[str]:
        per_paragraph = Counter(q.paragraph_number for q in graph.paragraph_questions)
        return [
            f"Paragraph {number}: expected {QUESTIONS_PER_PARAGRAPH} questions, found {count}"
            for number, count in sorted(per_paragraph.items())
            if count != QUESTIONS_PER_PARAGRAPH
        ]

    @staticmethod
    def _check_comprehensive(graph: ContentGraph) -> list[str]:
        basic: Counter[str] = Counter()
        supplementary: Counter[str] = Counter()
        types: list[str] = []
        for q in graph.comprehensive_questions:
            if q.question_type not in types:
                types.append(q.question_type)
            if q.is_supplementary:
                supplementary[q.question_type] += 1
            else:
                basic[q.question_type] += 1

        violations = []
        if len(types) != COMPREHENSIVE_TYPES:
            violations.append(
                f"Comprehensive questions: expected {COMPREHENSIVE_TYPES} question types, found {len(types)}"
            )
        for question_type in types:
            if (basic[question_type], supplementary[question_type]) != (
                COMPREHENSIVE_BASIC_PER_TYPE,
                COMPREHENSIVE_SUPPLEMENTARY_PER_TYPE,
            ):
                violations.append(
                    f"Comprehensive type '{question_type}': expected {COMPREHENSIVE_BASIC_PER_TYPE} basic + "
                    f"{COMPREHENSIVE_SUPPLEMENTARY_PER_TYPE} supplementary questions, "
                    f"found {basic[question_type]} + {supplementary[question_type]}"
                )
        return violations
