"""
Table models for the normalized content graph.

One content set owns five child collections:

- passages: ordered passage blocks, ten paragraph slots each
- vocabulary_terms: parsed footnotes, each linked to one passage by id
- vocabulary_questions: linked to a term by normalized text only
- paragraph_questions: linked to a paragraph by ordinal only
- comprehensive_questions: grouped by a synthetic set key (original_question_id)

Question-to-term and question-to-paragraph links are soft: they are values,
not foreign keys, and nothing enforces that they resolve.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def new_id() -> str:
    """Opaque globally-unique identifier for any row."""
    return str(uuid4())


# ========================================
# CONTENT SET
# ========================================


class ContentSet(Base):
    """Top-level aggregate for one generated learning-material unit."""

    __tablename__ = "content_sets"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str | None] = mapped_column(Text)

    # Curriculum metadata
    division: Mapped[str | None] = mapped_column(Text)
    grade: Mapped[str | None] = mapped_column(Text)
    grade_number: Mapped[str | None] = mapped_column(Text)
    subject: Mapped[str | None] = mapped_column(Text)
    area: Mapped[str | None] = mapped_column(Text)
    session_number: Mapped[str | None] = mapped_column(Text)
    main_topic: Mapped[str | None] = mapped_column(Text)
    sub_topic: Mapped[str | None] = mapped_column(Text)
    keywords: Mapped[str | None] = mapped_column(Text)
    passage_length: Mapped[str | None] = mapped_column(Text)
    text_type: Mapped[str | None] = mapped_column(Text)

    title: Mapped[str] = mapped_column(Text, default="")
    introduction_question: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default="검수 전", index=True)

    # Aggregate counts (always derived from written collections)
    total_passages: Mapped[int] = mapped_column(Integer, default=0)
    total_vocabulary_terms: Mapped[int] = mapped_column(Integer, default=0)
    total_vocabulary_questions: Mapped[int] = mapped_column(Integer, default=0)
    total_paragraph_questions: Mapped[int] = mapped_column(Integer, default=0)
    total_comprehensive_questions: Mapped[int] = mapped_column(Integer, default=0)

    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())


# ========================================
# CHILD COLLECTIONS
# ========================================


class Passage(Base):
    """One ordered block of paragraph text within a content set."""

    __tablename__ = "passages"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    content_set_id: Mapped[str] = mapped_column(
        ForeignKey("content_sets.id", ondelete="CASCADE"), index=True
    )
    passage_number: Mapped[int] = mapped_column(Integer, default=1)
    title: Mapped[str | None] = mapped_column(Text)
    paragraph_1: Mapped[str | None] = mapped_column(Text)
    paragraph_2: Mapped[str | None] = mapped_column(Text)
    paragraph_3: Mapped[str | None] = mapped_column(Text)
    paragraph_4: Mapped[str | None] = mapped_column(Text)
    paragraph_5: Mapped[str | None] = mapped_column(Text)
    paragraph_6: Mapped[str | None] = mapped_column(Text)
    paragraph_7: Mapped[str | None] = mapped_column(Text)
    paragraph_8: Mapped[str | None] = mapped_column(Text)
    paragraph_9: Mapped[str | None] = mapped_column(Text)
    paragraph_10: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(default=func.now())


class VocabularyTerm(Base):
    """A footnote term; passage_id is a plain column so stale ids survive duplication."""

    __tablename__ = "vocabulary_terms"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    content_set_id: Mapped[str] = mapped_column(
        ForeignKey("content_sets.id", ondelete="CASCADE"), index=True
    )
    passage_id: Mapped[str | None] = mapped_column(Text, index=True)
    term: Mapped[str] = mapped_column(Text, default="")
    definition: Mapped[str] = mapped_column(Text, default="")
    example_sentence: Mapped[str | None] = mapped_column(Text)
    has_question_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(default=func.now())


class VocabularyQuestion(Base):
    """Vocabulary question; `term` is a soft reference by normalized text."""

    __tablename__ = "vocabulary_questions"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    content_set_id: Mapped[str] = mapped_column(
        ForeignKey("content_sets.id", ondelete="CASCADE"), index=True
    )
    question_number: Mapped[int] = mapped_column(Integer, default=1)
    term: Mapped[str] = mapped_column(Text, default="")
    question_type: Mapped[str] = mapped_column(Text, default="객관식")  # 객관식 | 주관식
    detailed_question_type: Mapped[str | None] = mapped_column(Text)
    difficulty: Mapped[str] = mapped_column(Text, default="일반")  # 일반 | 보완
    question_text: Mapped[str] = mapped_column(Text, default="")
    option_1: Mapped[str | None] = mapped_column(Text)
    option_2: Mapped[str | None] = mapped_column(Text)
    option_3: Mapped[str | None] = mapped_column(Text)
    option_4: Mapped[str | None] = mapped_column(Text)
    option_5: Mapped[str | None] = mapped_column(Text)
    correct_answer: Mapped[str] = mapped_column(Text, default="")
    answer_initials: Mapped[str | None] = mapped_column(Text)
    explanation: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(default=func.now())


class ParagraphQuestion(Base):
    """Paragraph question; `paragraph_number` is a soft reference by ordinal."""

    __tablename__ = "paragraph_questions"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    content_set_id: Mapped[str] = mapped_column(
        ForeignKey("content_sets.id", ondelete="CASCADE"), index=True
    )
    question_number: Mapped[int] = mapped_column(Integer, default=1)
    question_type: Mapped[str] = mapped_column(Text, default="빈칸 채우기")
    paragraph_number: Mapped[int] = mapped_column(Integer, default=1)
    paragraph_text: Mapped[str | None] = mapped_column(Text)
    question_text: Mapped[str] = mapped_column(Text, default="")
    option_1: Mapped[str | None] = mapped_column(Text)
    option_2: Mapped[str | None] = mapped_column(Text)
    option_3: Mapped[str | None] = mapped_column(Text)
    option_4: Mapped[str | None] = mapped_column(Text)
    option_5: Mapped[str | None] = mapped_column(Text)
    correct_answer: Mapped[str] = mapped_column(Text, default="")
    answer_initials: Mapped[str | None] = mapped_column(Text)
    explanation: Mapped[str] = mapped_column(Text, default="")
    word_segments: Mapped[list[str] | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(default=func.now())


class ComprehensiveQuestion(Base):
    """
    Comprehensive question.

    original_question_id is the set key tying one basic instance to its
    supplementary instances of the same question type.
    """

    __tablename__ = "comprehensive_questions"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    content_set_id: Mapped[str] = mapped_column(
        ForeignKey("content_sets.id", ondelete="CASCADE"), index=True
    )
    question_number: Mapped[int] = mapped_column(Integer, default=1)
    question_type: Mapped[str] = mapped_column(Text, default="단답형")
    question_format: Mapped[str] = mapped_column(Text, default="객관식")
    difficulty: Mapped[str] = mapped_column(Text, default="일반")
    question_text: Mapped[str] = mapped_column(Text, default="")
    option_1: Mapped[str | None] = mapped_column(Text)
    option_2: Mapped[str | None] = mapped_column(Text)
    option_3: Mapped[str | None] = mapped_column(Text)
    option_4: Mapped[str | None] = mapped_column(Text)
    option_5: Mapped[str | None] = mapped_column(Text)
    correct_answer: Mapped[str] = mapped_column(Text, default="")
    answer_initials: Mapped[str | None] = mapped_column(Text)
    explanation: Mapped[str] = mapped_column(Text, default="")
    is_supplementary: Mapped[bool] = mapped_column(Boolean, default=False)
    original_question_id: Mapped[str | None] = mapped_column(Text, index=True)
    question_set_number: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(default=func.now())


# Table name -> model, in write order (parents first)
TABLES: dict[str, type[Base]] = {
    ContentSet.__tablename__: ContentSet,
    Passage.__tablename__: Passage,
    VocabularyTerm.__tablename__: VocabularyTerm,
    VocabularyQuestion.__tablename__: VocabularyQuestion,
    ParagraphQuestion.__tablename__: ParagraphQuestion,
    ComprehensiveQuestion.__tablename__: ComprehensiveQuestion,
}

CHILD_TABLES: tuple[str, ...] = (
    Passage.__tablename__,
    VocabularyTerm.__tablename__,
    VocabularyQuestion.__tablename__,
    ParagraphQuestion.__tablename__,
    ComprehensiveQuestion.__tablename__,
)
