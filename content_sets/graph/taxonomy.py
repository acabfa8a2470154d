"""
Fixed vocabularies of the content graph and the tables that collapse them.

Every mapping is an explicit enum-to-value dict that includes an UNKNOWN arm,
so adding a member without mapping it is caught by the taxonomy tests rather
than silently falling through.

Stored values are the Korean labels used by authors and by existing data.
"""

from __future__ import annotations

from enum import Enum

from content_sets.exceptions import InvalidStatusError


def _squash(text: str) -> str:
    """Whitespace-insensitive key for label matching ('5지선다 객관식' == '5지 선다 객관식')."""
    return "".join(text.split())


# =============================================================================
# Shared question attributes
# =============================================================================


class QuestionFormat(str, Enum):
    """Storage-level question format."""

    OBJECTIVE = "객관식"
    SUBJECTIVE = "주관식"


class Difficulty(str, Enum):
    """Basic (primary) vs. supplementary (remedial) instance of a question."""

    BASIC = "일반"
    SUPPLEMENTARY = "보완"


# =============================================================================
# Vocabulary questions: 6 authoring subtypes -> 2 storage formats
# =============================================================================


class VocabularySubtype(str, Enum):
    FIVE_CHOICE = "5지 선다 객관식"
    TWO_CHOICE = "2개중 선택형"
    THREE_CHOICE = "3개중 선택형"
    WORD_SELECTION = "낱말 골라 쓰기"
    INITIALS_SHORT_ANSWER = "단답형 초성 문제"
    SHORT_ANSWER = "단답형"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str | None) -> VocabularySubtype:
        if not text:
            return cls.UNKNOWN
        key = _squash(text)
        for member in cls:
            if _squash(member.value) == key:
                return member
        return cls.UNKNOWN


DEFAULT_VOCABULARY_SUBTYPE = VocabularySubtype.FIVE_CHOICE

VOCABULARY_FORMAT: dict[VocabularySubtype, QuestionFormat] = {
    VocabularySubtype.FIVE_CHOICE: QuestionFormat.OBJECTIVE,
    VocabularySubtype.TWO_CHOICE: QuestionFormat.OBJECTIVE,
    VocabularySubtype.THREE_CHOICE: QuestionFormat.OBJECTIVE,
    VocabularySubtype.WORD_SELECTION: QuestionFormat.OBJECTIVE,
    VocabularySubtype.INITIALS_SHORT_ANSWER: QuestionFormat.SUBJECTIVE,
    VocabularySubtype.SHORT_ANSWER: QuestionFormat.SUBJECTIVE,
    VocabularySubtype.UNKNOWN: QuestionFormat.OBJECTIVE,
}


def vocabulary_format_for(subtype: VocabularySubtype) -> QuestionFormat:
    return VOCABULARY_FORMAT[subtype]


# =============================================================================
# Paragraph questions: 5 variants with different field shapes
# =============================================================================


class ParagraphQuestionType(str, Enum):
    FILL_IN_THE_BLANK = "빈칸 채우기"
    SHORT_ANSWER = "주관식 단답형"
    WORD_ORDER = "어절 순서 맞추기"
    TRUE_FALSE = "OX문제"
    MULTIPLE_CHOICE = "객관식 일반형"

    @classmethod
    def parse(cls, text: str | None) -> ParagraphQuestionType:
        """Unknown or absent types coerce to the default variant."""
        if text:
            key = _squash(text)
            for member in cls:
                if _squash(member.value) == key:
                    return member
        return DEFAULT_PARAGRAPH_TYPE

    @property
    def has_options(self) -> bool:
        return PARAGRAPH_FORMAT[self] is QuestionFormat.OBJECTIVE


DEFAULT_PARAGRAPH_TYPE = ParagraphQuestionType.FILL_IN_THE_BLANK

PARAGRAPH_FORMAT: dict[ParagraphQuestionType, QuestionFormat] = {
    ParagraphQuestionType.FILL_IN_THE_BLANK: QuestionFormat.OBJECTIVE,
    ParagraphQuestionType.SHORT_ANSWER: QuestionFormat.SUBJECTIVE,
    ParagraphQuestionType.WORD_ORDER: QuestionFormat.SUBJECTIVE,
    ParagraphQuestionType.TRUE_FALSE: QuestionFormat.OBJECTIVE,
    ParagraphQuestionType.MULTIPLE_CHOICE: QuestionFormat.OBJECTIVE,
}

PARAGRAPH_SLOTS = 10
PARAGRAPH_PLACEHOLDER_OPTIONS: tuple[str, ...] = ("선택지 1", "선택지 2", "선택지 3", "선택지 4")


# =============================================================================
# Comprehensive questions: type -> set-key type code
# =============================================================================


class ComprehensiveType(str, Enum):
    INFO_CHECK = "정보 확인"
    MAIN_IDEA = "주제 파악"
    DATA_INTERPRETATION = "자료해석"
    INFERENCE = "추론"
    SHORT_ANSWER = "단답형"
    PARAGRAPH_ORDER = "문단별 순서 맞추기"
    SUMMARY = "핵심 내용 요약"
    KEYWORD = "핵심어/핵심문장 찾기"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str | None) -> ComprehensiveType:
        if not text:
            return cls.UNKNOWN
        key = _squash(text)
        for member in cls:
            if _squash(member.value) == key:
                return member
        return cls.UNKNOWN


DEFAULT_COMPREHENSIVE_TYPE = ComprehensiveType.SHORT_ANSWER

COMPREHENSIVE_TYPE_CODES: dict[ComprehensiveType, str] = {
    ComprehensiveType.INFO_CHECK: "info",
    ComprehensiveType.MAIN_IDEA: "theme",
    ComprehensiveType.DATA_INTERPRETATION: "data",
    ComprehensiveType.INFERENCE: "inference",
    ComprehensiveType.SHORT_ANSWER: "short",
    ComprehensiveType.PARAGRAPH_ORDER: "order",
    ComprehensiveType.SUMMARY: "summary",
    ComprehensiveType.KEYWORD: "keyword",
    ComprehensiveType.UNKNOWN: "comp",
}


def comprehensive_type_code(question_type: str) -> str:
    return COMPREHENSIVE_TYPE_CODES[ComprehensiveType.parse(question_type)]


# =============================================================================
# Review status
# =============================================================================


class ContentStatus(str, Enum):
    """Review progress of a content set, in order; DUPLICATED is out of band."""

    PRE_REVIEW = "검수 전"
    FIRST_REVIEW = "1차검수"
    SECOND_REVIEW = "2차검수"
    THIRD_REVIEW = "3차검수"
    FOURTH_REVIEW = "4차검수"
    REVIEW_COMPLETE = "검수완료"
    APPROVED = "승인완료"
    DUPLICATED = "복제"

    @property
    def slug(self) -> str:
        return STATUS_SLUGS[self]

    @classmethod
    def parse(cls, value: ContentStatus | str) -> ContentStatus:
        """Accept a member, its Korean value, its slug ('review-complete') or its name."""
        if isinstance(value, ContentStatus):
            return value
        text = str(value).strip()
        for member in cls:
            if text in (member.value, member.slug) or text.upper().replace("-", "_") == member.name:
                return member
        raise InvalidStatusError(f"Unknown status: {value!r}")


STATUS_SLUGS: dict[ContentStatus, str] = {
    ContentStatus.PRE_REVIEW: "pre-review",
    ContentStatus.FIRST_REVIEW: "1st-review",
    ContentStatus.SECOND_REVIEW: "2nd-review",
    ContentStatus.THIRD_REVIEW: "3rd-review",
    ContentStatus.FOURTH_REVIEW: "4th-review",
    ContentStatus.REVIEW_COMPLETE: "review-complete",
    ContentStatus.APPROVED: "approved",
    ContentStatus.DUPLICATED: "duplicated",
}

REVIEW_ORDER: tuple[ContentStatus, ...] = (
    ContentStatus.PRE_REVIEW,
    ContentStatus.FIRST_REVIEW,
    ContentStatus.SECOND_REVIEW,
    ContentStatus.THIRD_REVIEW,
    ContentStatus.FOURTH_REVIEW,
    ContentStatus.REVIEW_COMPLETE,
    ContentStatus.APPROVED,
)
