"""
In-memory records of a built content graph.

Records carry no ids: the store assigns them on write. Vocabulary terms point at
their passage by provisional ordinal until the persister rewrites it into the
generated passage id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .taxonomy import (
    DEFAULT_COMPREHENSIVE_TYPE,
    DEFAULT_PARAGRAPH_TYPE,
    PARAGRAPH_SLOTS,
    ContentStatus,
    Difficulty,
    QuestionFormat,
)

OPTION_SLOTS = 5


def _option_columns(options: list[str | None]) -> dict[str, str | None]:
    padded = (list(options) + [None] * OPTION_SLOTS)[:OPTION_SLOTS]
    return {f"option_{i}": value for i, value in enumerate(padded, start=1)}


def _is_filled(text: str | None) -> bool:
    return bool(text and text.strip())


# ========================================
# Header
# ========================================


@dataclass
class ContentSetRecord:
    """Content set header: owner, curriculum metadata, title and status."""

    user_id: str | None = None
    division: str | None = None
    grade: str | None = None
    grade_number: str | None = None
    subject: str | None = None
    area: str | None = None
    session_number: str | None = None
    main_topic: str | None = None
    sub_topic: str | None = None
    keywords: str | None = None
    passage_length: str | None = None
    text_type: str | None = None
    title: str = ""
    introduction_question: str | None = None
    status: ContentStatus = ContentStatus.PRE_REVIEW

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "division": self.division,
            "grade": self.grade,
            "grade_number": self.grade_number,
            "subject": self.subject,
            "area": self.area,
            "session_number": self.session_number,
            "main_topic": self.main_topic,
            "sub_topic": self.sub_topic,
            "keywords": self.keywords,
            "passage_length": self.passage_length,
            "text_type": self.text_type,
            "title": self.title,
            "introduction_question": self.introduction_question,
            "status": self.status.value,
        }


# ========================================
# Children
# ========================================


@dataclass
class PassageRecord:
    passage_number: int
    title: str | None = None
    paragraphs: list[str | None] = field(default_factory=list)

    @property
    def filled_paragraphs(self) -> list[str]:
        return [p for p in self.paragraphs if _is_filled(p)]

    def to_row(self, content_set_id: str) -> dict[str, Any]:
        slots = (list(self.paragraphs) + [None] * PARAGRAPH_SLOTS)[:PARAGRAPH_SLOTS]
        row: dict[str, Any] = {
            "content_set_id": content_set_id,
            "passage_number": self.passage_number,
            "title": self.title,
        }
        row.update({f"paragraph_{i}": text for i, text in enumerate(slots, start=1)})
        return row


@dataclass
class VocabularyTermRecord:
    term: str
    definition: str = ""
    example_sentence: str | None = None
    passage_number: int | None = None  # provisional; rewritten to passage_id on write
    has_question_generated: bool = False

    def to_row(self, content_set_id: str, passage_id: str | None) -> dict[str, Any]:
        return {
            "content_set_id": content_set_id,
            "passage_id": passage_id,
            "term": self.term,
            "definition": self.definition,
            "example_sentence": self.example_sentence,
            "has_question_generated": self.has_question_generated,
        }


@dataclass
class VocabularyQuestionRecord:
    question_number: int
    term: str
    question_type: QuestionFormat = QuestionFormat.OBJECTIVE
    detailed_question_type: str | None = None
    difficulty: Difficulty = Difficulty.BASIC
    question_text: str = ""
    options: list[str | None] = field(default_factory=list)
    correct_answer: str = ""
    answer_initials: str | None = None
    explanation: str = ""

    def to_row(self, content_set_id: str) -> dict[str, Any]:
        return {
            "content_set_id": content_set_id,
            "question_number": self.question_number,
            "term": self.term,
            "question_type": self.question_type.value,
            "detailed_question_type": self.detailed_question_type,
            "difficulty": self.difficulty.value,
            "question_text": self.question_text,
            **_option_columns(self.options),
            "correct_answer": self.correct_answer,
            "answer_initials": self.answer_initials,
            "explanation": self.explanation,
        }


@dataclass
class ParagraphQuestionRecord:
    question_number: int
    paragraph_number: int
    question_type: str = DEFAULT_PARAGRAPH_TYPE.value
    paragraph_text: str | None = None
    question_text: str = ""
    options: list[str | None] = field(default_factory=list)
    correct_answer: str = ""
    answer_initials: str | None = None
    explanation: str = ""
    word_segments: list[str] | None = None

    def to_row(self, content_set_id: str) -> dict[str, Any]:
        return {
            "content_set_id": content_set_id,
            "question_number": self.question_number,
            "question_type": self.question_type,
            "paragraph_number": self.paragraph_number,
            "paragraph_text": self.paragraph_text,
            "question_text": self.question_text,
            **_option_columns(self.options),
            "correct_answer": self.correct_answer,
            "answer_initials": self.answer_initials,
            "explanation": self.explanation,
            "word_segments": self.word_segments,
        }


@dataclass
class ComprehensiveQuestionRecord:
    question_number: int
    question_type: str = DEFAULT_COMPREHENSIVE_TYPE.value
    question_format: QuestionFormat = QuestionFormat.OBJECTIVE
    difficulty: Difficulty = Difficulty.BASIC
    question_text: str = ""
    options: list[str | None] = field(default_factory=list)
    correct_answer: str = ""
    answer_initials: str | None = None
    explanation: str = ""
    is_supplementary: bool = False
    original_question_id: str | None = None  # set key shared by one basic + its supplements
    question_set_number: int = 1

    def to_row(self, content_set_id: str) -> dict[str, Any]:
        return {
            "content_set_id": content_set_id,
            "question_number": self.question_number,
            "question_type": self.question_type,
            "question_format": self.question_format.value,
            "difficulty": self.difficulty.value,
            "question_text": self.question_text,
            **_option_columns(self.options),
            "correct_answer": self.correct_answer,
            "answer_initials": self.answer_initials,
            "explanation": self.explanation,
            "is_supplementary": self.is_supplementary,
            "original_question_id": self.original_question_id,
            "question_set_number": self.question_set_number,
        }


# ========================================
# Graph
# ========================================


@dataclass
class AggregateCounts:
    total_passages: int = 0
    total_vocabulary_terms: int = 0
    total_vocabulary_questions: int = 0
    total_paragraph_questions: int = 0
    total_comprehensive_questions: int = 0

    def as_columns(self) -> dict[str, int]:
        return {
            "total_passages": self.total_passages,
            "total_vocabulary_terms": self.total_vocabulary_terms,
            "total_vocabulary_questions": self.total_vocabulary_questions,
            "total_paragraph_questions": self.total_paragraph_questions,
            "total_comprehensive_questions": self.total_comprehensive_questions,
        }


@dataclass
class ContentGraph:
    """A content set header plus its five normalized child collections."""

    content_set: ContentSetRecord
    passages: list[PassageRecord] = field(default_factory=list)
    vocabulary_terms: list[VocabularyTermRecord] = field(default_factory=list)
    vocabulary_questions: list[VocabularyQuestionRecord] = field(default_factory=list)
    paragraph_questions: list[ParagraphQuestionRecord] = field(default_factory=list)
    comprehensive_questions: list[ComprehensiveQuestionRecord] = field(default_factory=list)

    def counts(self) -> AggregateCounts:
        """Aggregate counts derived from the collections themselves."""
        return AggregateCounts(
            total_passages=sum(len(p.filled_paragraphs) for p in self.passages),
            total_vocabulary_terms=len(self.vocabulary_terms),
            total_vocabulary_questions=len(self.vocabulary_questions),
            total_paragraph_questions=len(self.paragraph_questions),
            total_comprehensive_questions=len(self.comprehensive_questions),
        )

    def passage(self, passage_number: int) -> PassageRecord | None:
        for passage in self.passages:
            if passage.passage_number == passage_number:
                return passage
        return None

    def intermediate(self) -> ContentGraph:
        """Header, passages and terms only; with no questions stored, no term is flagged."""
        return replace(
            self,
            vocabulary_terms=[replace(term, has_question_generated=False) for term in self.vocabulary_terms],
            vocabulary_questions=[],
            paragraph_questions=[],
            comprehensive_questions=[],
        )
