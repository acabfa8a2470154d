"""
Content graph engine: build, validate, persist, duplicate and gate status changes.
"""

from .builder import ContentGraphBuilder
from .duplicator import DuplicationResult, GraphDuplicator
from .flags import FlagAuditResult, FlagChange, QuestionFlagAuditor
from .footnotes import ParsedFootnote, footnote_from_term, footnotes_from_terms, parse_footnote, parse_footnotes
from .models import (
    AggregateCounts,
    ComprehensiveQuestionRecord,
    ContentGraph,
    ContentSetRecord,
    ParagraphQuestionRecord,
    PassageRecord,
    VocabularyQuestionRecord,
    VocabularyTermRecord,
)
from .persister import GraphPersister
from .references import ParagraphReference, TermReference, normalize_term
from .status import BatchStatusResult, DeletionResult, StatusChangeResult, StatusLifecycle
from .taxonomy import (
    ComprehensiveType,
    ContentStatus,
    Difficulty,
    ParagraphQuestionType,
    QuestionFormat,
    VocabularySubtype,
)
from .updater import GraphUpdater
from .validator import InvariantValidator, ValidationReport

__all__ = [
    # Pipeline
    "ContentGraphBuilder",
    "InvariantValidator",
    "ValidationReport",
    "GraphPersister",
    "GraphDuplicator",
    "DuplicationResult",
    "GraphUpdater",
    "StatusLifecycle",
    "StatusChangeResult",
    "BatchStatusResult",
    "DeletionResult",
    "QuestionFlagAuditor",
    "FlagAuditResult",
    "FlagChange",
    # Footnotes
    "ParsedFootnote",
    "parse_footnote",
    "parse_footnotes",
    "footnote_from_term",
    "footnotes_from_terms",
    # Records
    "ContentGraph",
    "ContentSetRecord",
    "PassageRecord",
    "VocabularyTermRecord",
    "VocabularyQuestionRecord",
    "ParagraphQuestionRecord",
    "ComprehensiveQuestionRecord",
    "AggregateCounts",
    # References
    "TermReference",
    "ParagraphReference",
    "normalize_term",
    # Taxonomy
    "ContentStatus",
    "QuestionFormat",
    "Difficulty",
    "VocabularySubtype",
    "ParagraphQuestionType",
    "ComprehensiveType",
]
