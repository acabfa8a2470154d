"""
Schema of the author-facing editable model.

Editors, generators and older saved payloads spell the same field several ways
(maintopic / mainTopic, answer / correctAnswer, option_1 / options[0], ...).
The models below absorb every spelling once so the builder only sees one shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Top-level sections that must be present (and non-empty) before anything is built
REQUIRED_SECTIONS: dict[str, tuple[str, ...]] = {
    "input": ("input",),
    "editablePassage": ("editablePassage", "editable_passage"),
}

DEFAULT_GRADE = "3학년"


def missing_sections(raw: dict[str, Any]) -> list[str]:
    """Names of required sections that are absent or empty in a raw payload."""
    return [
        name
        for name, spellings in REQUIRED_SECTIONS.items()
        if not any(raw.get(spelling) for spelling in spellings)
    ]


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _Authored(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ========================================
# Metadata and passages
# ========================================


class AuthoredInput(_Authored):
    """Curriculum metadata chosen when the set was generated."""

    division: str | None = None
    grade: str | None = None
    grade_number: str | None = Field(None, validation_alias=_aliases("grade_number", "gradeNumber"))
    subject: str | None = None
    area: str | None = None
    session_number: str | None = Field(
        None, validation_alias=_aliases("session_number", "sessionNumber")
    )
    main_topic: str | None = Field(
        None, validation_alias=_aliases("maintopic", "mainTopic", "main_topic")
    )
    sub_topic: str | None = Field(None, validation_alias=_aliases("subtopic", "subTopic", "sub_topic"))
    keywords: str | None = Field(None, validation_alias=_aliases("keyword", "keywords"))
    passage_length: str | None = Field(
        None, validation_alias=_aliases("length", "passage_length", "passageLength")
    )
    text_type: str | None = Field(None, validation_alias=_aliases("textType", "text_type"))

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return _text_or_none(value)


class AuthoredPassage(_Authored):
    title: str | None = None
    paragraphs: list[str | None] = Field(default_factory=list)
    footnote: list[str] = Field(default_factory=list, validation_alias=_aliases("footnote", "footnotes"))

    @field_validator("paragraphs", "footnote", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class EditablePassage(AuthoredPassage):
    """Either one flat passage or a list of passages, plus an optional lead-in question."""

    passages: list[AuthoredPassage] = Field(default_factory=list)
    introduction_question: str | None = Field(
        None, validation_alias=_aliases("introduction_question", "introductionQuestion")
    )

    @field_validator("passages", mode="before")
    @classmethod
    def _no_passages(cls, value: Any) -> Any:
        return [] if value is None else value

    def folded(self) -> list[AuthoredPassage]:
        """Passages in order; the flat shape becomes a single passage."""
        if self.passages:
            return [
                AuthoredPassage(
                    title=p.title or self.title or "",
                    paragraphs=p.paragraphs,
                    footnote=p.footnote,
                )
                for p in self.passages
            ]
        return [AuthoredPassage(title=self.title, paragraphs=self.paragraphs, footnote=self.footnote)]

    @property
    def set_title(self) -> str:
        if self.passages:
            return self.passages[0].title or self.title or ""
        return self.title or ""


# ========================================
# Questions
# ========================================


class _AuthoredQuestion(_Authored):
    """Fields shared by every question kind."""

    question: str = Field("", validation_alias=_aliases("question", "question_text", "questionText"))
    options: list[str | None] | None = None
    option_1: str | None = Field(None, validation_alias=_aliases("option_1", "option1"))
    option_2: str | None = Field(None, validation_alias=_aliases("option_2", "option2"))
    option_3: str | None = Field(None, validation_alias=_aliases("option_3", "option3"))
    option_4: str | None = Field(None, validation_alias=_aliases("option_4", "option4"))
    option_5: str | None = Field(None, validation_alias=_aliases("option_5", "option5"))
    answer: str = Field(
        "", validation_alias=_aliases("answer", "correctAnswer", "correct_answer")
    )
    answer_initials: str | None = Field(
        None, validation_alias=_aliases("answerInitials", "answer_initials")
    )
    explanation: str = ""

    @field_validator("question", "answer", "explanation", mode="before")
    @classmethod
    def _none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def merged_options(self) -> list[str | None] | None:
        """Discrete option fields win over the options array when any is present."""
        discrete = [self.option_1, self.option_2, self.option_3, self.option_4, self.option_5]
        if any(option is not None for option in discrete):
            return discrete
        return list(self.options) if self.options is not None else None


class AuthoredVocabularyQuestion(_AuthoredQuestion):
    term: str = ""
    detailed_question_type: str | None = Field(
        None,
        validation_alias=_aliases(
            "detailedQuestionType", "detailed_question_type", "questionType", "question_type"
        ),
    )
    difficulty: str | None = None
    is_supplementary: bool = Field(
        False, validation_alias=_aliases("isSupplementary", "is_supplementary")
    )


class AuthoredParagraphQuestion(_AuthoredQuestion):
    question_type: str | None = Field(
        None, validation_alias=_aliases("questionType", "question_type", "type")
    )
    paragraph_number: int | None = Field(
        None, validation_alias=_aliases("paragraphNumber", "paragraph_number")
    )
    paragraph_text: str | None = Field(
        None, validation_alias=_aliases("paragraphText", "paragraph_text")
    )
    word_segments: list[str] | None = Field(
        None, validation_alias=_aliases("wordSegments", "word_segments")
    )


class AuthoredComprehensiveQuestion(_AuthoredQuestion):
    question_type: str | None = Field(
        None, validation_alias=_aliases("type", "questionType", "question_type")
    )
    is_supplementary: bool = Field(
        False, validation_alias=_aliases("isSupplementary", "is_supplementary")
    )
    question_set_number: int | None = Field(
        None, validation_alias=_aliases("questionSetNumber", "question_set_number")
    )


# ========================================
# Whole payload
# ========================================


class EditableModel(_Authored):
    """The complete payload an editor submits for saving."""

    input: AuthoredInput | None = None
    editable_passage: EditablePassage | None = Field(
        None, validation_alias=_aliases("editablePassage", "editable_passage")
    )
    vocabulary_questions: list[AuthoredVocabularyQuestion] = Field(
        default_factory=list,
        validation_alias=_aliases("vocabularyQuestions", "vocabulary_questions"),
    )
    paragraph_questions: list[AuthoredParagraphQuestion] = Field(
        default_factory=list,
        validation_alias=_aliases("paragraphQuestions", "paragraph_questions"),
    )
    comprehensive_questions: list[AuthoredComprehensiveQuestion] = Field(
        default_factory=list,
        validation_alias=_aliases("comprehensiveQuestions", "comprehensive_questions"),
    )
    user_id: str | None = Field(None, validation_alias=_aliases("userId", "user_id"))

    @field_validator(
        "vocabulary_questions", "paragraph_questions", "comprehensive_questions", mode="before"
    )
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value
