"""
Content graph builder - converts the editable model into normalized records.

The builder is pure: it never touches storage. It produces the content set
header and five collections (passages, vocabulary terms and the three question
kinds), with every cross-record link expressed by value:

- vocabulary terms carry the ordinal of their passage (rewritten to the
  passage id by the persister)
- vocabulary questions point at terms by normalized text
- paragraph questions point at paragraphs by ordinal
- comprehensive questions share a synthesized set key per question type
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from loguru import logger
from pydantic import ValidationError

from config import get_settings
from content_sets.exceptions import InputMissingError, MalformedInputError

from .authoring import (
    DEFAULT_GRADE,
    AuthoredComprehensiveQuestion,
    AuthoredParagraphQuestion,
    AuthoredVocabularyQuestion,
    EditableModel,
    missing_sections,
)
from .footnotes import parse_footnote
from .models import (
    ComprehensiveQuestionRecord,
    ContentGraph,
    ContentSetRecord,
    ParagraphQuestionRecord,
    PassageRecord,
    VocabularyQuestionRecord,
    VocabularyTermRecord,
)
from .references import ParagraphReference, TermReference
from .taxonomy import (
    DEFAULT_COMPREHENSIVE_TYPE,
    DEFAULT_VOCABULARY_SUBTYPE,
    PARAGRAPH_PLACEHOLDER_OPTIONS,
    PARAGRAPH_SLOTS,
    ComprehensiveType,
    Difficulty,
    ParagraphQuestionType,
    QuestionFormat,
    VocabularySubtype,
    comprehensive_type_code,
    vocabulary_format_for,
)


def _blank_to_none(text: str | None) -> str | None:
    if text is None or not str(text).strip():
        return None
    return text


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class ContentGraphBuilder:
    """
    Build a ContentGraph from a raw editable model.

    Accepts either a plain dict (as submitted by an editor) or an already
    validated EditableModel.
    """

    def __init__(
        self,
        default_user_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize builder.

        Args:
            default_user_id: Owner id used when the payload carries none
            clock: Seconds since the epoch; used for comprehensive set keys
        """
        self.default_user_id = default_user_id or get_settings().default_user_id
        self._clock = clock

    def build(self, raw: dict[str, Any] | EditableModel) -> ContentGraph:
        """Build the normalized graph. Raises InputMissingError before any work."""
        model = self._load(raw)
        editable = model.editable_passage
        authored_input = model.input

        passages: list[PassageRecord] = []
        terms: list[VocabularyTermRecord] = []
        question_refs = [TermReference.of(q.term) for q in model.vocabulary_questions]

        for passage_number, passage in enumerate(editable.folded(), start=1):
            if len(passage.paragraphs) > PARAGRAPH_SLOTS:
                logger.warning(
                    f"Passage {passage_number}: dropping {len(passage.paragraphs) - PARAGRAPH_SLOTS} "
                    f"paragraph(s) beyond {PARAGRAPH_SLOTS} slots"
                )
            passages.append(
                PassageRecord(
                    passage_number=passage_number,
                    title=passage.title,
                    paragraphs=[_blank_to_none(p) for p in passage.paragraphs[:PARAGRAPH_SLOTS]],
                )
            )
            for footnote in passage.footnote:
                if not footnote or not footnote.strip():
                    continue
                parsed = parse_footnote(footnote)
                terms.append(
                    VocabularyTermRecord(
                        term=parsed.term,
                        definition=parsed.definition,
                        example_sentence=parsed.example_sentence or None,
                        passage_number=passage_number,
                        has_question_generated=any(ref.matches(parsed.term) for ref in question_refs),
                    )
                )

        header = ContentSetRecord(
            user_id=model.user_id or self.default_user_id,
            division=authored_input.division,
            grade=authored_input.grade or DEFAULT_GRADE,
            grade_number=authored_input.grade_number,
            subject=authored_input.subject,
            area=authored_input.area,
            session_number=authored_input.session_number,
            main_topic=authored_input.main_topic or "",
            sub_topic=authored_input.sub_topic or "",
            keywords=authored_input.keywords or "",
            passage_length=authored_input.passage_length,
            text_type=authored_input.text_type,
            title=editable.set_title,
            introduction_question=editable.introduction_question,
        )

        first_passage = passages[0] if passages else None
        graph = ContentGraph(
            content_set=header,
            passages=passages,
            vocabulary_terms=terms,
            vocabulary_questions=[
                self._vocabulary_question(number, q)
                for number, q in enumerate(model.vocabulary_questions, start=1)
            ],
            paragraph_questions=[
                self._paragraph_question(number, q, first_passage)
                for number, q in enumerate(model.paragraph_questions, start=1)
            ],
            comprehensive_questions=self._comprehensive_questions(model.comprehensive_questions),
        )

        counts = graph.counts()
        logger.debug(
            f"Built graph '{header.title}': {len(passages)} passage(s), "
            f"{counts.total_passages} paragraph(s), {counts.total_vocabulary_terms} term(s), "
            f"{counts.total_vocabulary_questions}/{counts.total_paragraph_questions}/"
            f"{counts.total_comprehensive_questions} vocabulary/paragraph/comprehensive question(s)"
        )
        return graph

    # ========================================
    # Input
    # ========================================

    @staticmethod
    def _load(raw: dict[str, Any] | EditableModel) -> EditableModel:
        if isinstance(raw, EditableModel):
            missing = [
                name
                for name, value in (("input", raw.input), ("editablePassage", raw.editable_passage))
                if value is None
            ]
            model = raw
        else:
            missing = missing_sections(raw)
            model = None
        if missing:
            logger.warning(f"Required data missing: {missing}")
            raise InputMissingError(missing)
        if model is None:
            try:
                model = EditableModel.model_validate(raw)
            except ValidationError as e:
                raise MalformedInputError(f"Editable model has an invalid shape: {e}") from e
        return model

    # ========================================
    # Questions
    # ========================================

    @staticmethod
    def _vocabulary_question(number: int, q: AuthoredVocabularyQuestion) -> VocabularyQuestionRecord:
        detailed = q.detailed_question_type or DEFAULT_VOCABULARY_SUBTYPE.value
        subtype = VocabularySubtype.parse(detailed)
        if subtype is VocabularySubtype.UNKNOWN and detailed in {f.value for f in QuestionFormat}:
            # Older payloads carry the storage format itself
            question_format = QuestionFormat(detailed)
        else:
            question_format = vocabulary_format_for(subtype)

        if q.difficulty in {d.value for d in Difficulty}:
            difficulty = Difficulty(q.difficulty)
        else:
            difficulty = Difficulty.SUPPLEMENTARY if q.is_supplementary else Difficulty.BASIC

        subjective = question_format is QuestionFormat.SUBJECTIVE
        return VocabularyQuestionRecord(
            question_number=number,
            term=q.term.strip(),
            question_type=question_format,
            detailed_question_type=detailed,
            difficulty=difficulty,
            question_text=q.question,
            options=q.merged_options() or [],
            correct_answer=q.answer,
            answer_initials=q.answer_initials if subjective else None,
            explanation=q.explanation,
        )

    @staticmethod
    def _paragraph_question(
        number: int, q: AuthoredParagraphQuestion, passage: PassageRecord | None
    ) -> ParagraphQuestionRecord:
        question_type = ParagraphQuestionType.parse(q.question_type)
        paragraph_number = _clamp(q.paragraph_number or 1, 1, PARAGRAPH_SLOTS)

        if question_type.has_options:
            options = q.merged_options() or list(PARAGRAPH_PLACEHOLDER_OPTIONS)
            answer_initials = None
        else:
            options = []
            answer_initials = q.answer_initials

        word_segments = None
        correct_answer = q.answer
        if question_type is ParagraphQuestionType.WORD_ORDER:
            word_segments = list(q.word_segments or [])
            if not correct_answer.strip() and word_segments:
                correct_answer = " ".join(word_segments)

        return ParagraphQuestionRecord(
            question_number=number,
            paragraph_number=paragraph_number,
            question_type=question_type.value,
            paragraph_text=q.paragraph_text or ParagraphReference(paragraph_number).resolve(passage),
            question_text=q.question,
            options=options,
            correct_answer=correct_answer,
            answer_initials=answer_initials,
            explanation=q.explanation,
            word_segments=word_segments,
        )

    def _comprehensive_questions(
        self, questions: list[AuthoredComprehensiveQuestion]
    ) -> list[ComprehensiveQuestionRecord]:
        """Stamp every question with the set key minted by the first basic instance of its type."""
        set_keys: dict[str, str] = {}
        for q in questions:
            question_type = q.question_type or DEFAULT_COMPREHENSIVE_TYPE.value
            if not q.is_supplementary and question_type not in set_keys:
                if ComprehensiveType.parse(question_type) is ComprehensiveType.UNKNOWN:
                    logger.debug(f"Unknown comprehensive type '{question_type}', using default code")
                set_keys[question_type] = (
                    f"comp_{comprehensive_type_code(question_type)}_{self._timestamp()}_{question_type}"
                )

        records = []
        for index, q in enumerate(questions):
            question_type = q.question_type or DEFAULT_COMPREHENSIVE_TYPE.value
            set_key = set_keys.get(question_type) or f"comp_unknown_{self._timestamp()}_{index}"
            records.append(
                ComprehensiveQuestionRecord(
                    question_number=index + 1,
                    question_type=question_type,
                    question_format=QuestionFormat.OBJECTIVE,
                    difficulty=Difficulty.SUPPLEMENTARY if q.is_supplementary else Difficulty.BASIC,
                    question_text=q.question,
                    options=q.merged_options() or [],
                    correct_answer=q.answer,
                    answer_initials=q.answer_initials,
                    explanation=q.explanation,
                    is_supplementary=q.is_supplementary,
                    original_question_id=set_key,
                    question_set_number=q.question_set_number or 1,
                )
            )
        return records

    def _timestamp(self) -> int:
        return int(self._clock() * 1000)
