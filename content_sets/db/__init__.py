"""
Database layer: table models, engine/session handling, and the table-oriented store.
"""

from .base import Base
from .database import create_db_engine, get_engine, get_session_factory, init_db, session_scope
from .models import (
    CHILD_TABLES,
    TABLES,
    ComprehensiveQuestion,
    ContentSet,
    ParagraphQuestion,
    Passage,
    VocabularyQuestion,
    VocabularyTerm,
    new_id,
)
from .store import ContentStore, row_to_dict

__all__ = [
    "Base",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
    # Models
    "ContentSet",
    "Passage",
    "VocabularyTerm",
    "VocabularyQuestion",
    "ParagraphQuestion",
    "ComprehensiveQuestion",
    "TABLES",
    "CHILD_TABLES",
    "new_id",
    # Store
    "ContentStore",
    "row_to_dict",
]
