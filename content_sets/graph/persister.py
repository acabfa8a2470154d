"""
Graph persister - writes a built graph and derives its aggregate counts.

Write order is fixed: the content set row (its id is generated by the store),
passages, vocabulary terms, then the three question collections. Terms are
re-pointed from their provisional passage ordinal to the generated passage id.
Aggregate counts are computed from the rows the store actually returned.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from config import get_settings
from content_sets.db import ContentStore
from content_sets.exceptions import PersistenceError

from .models import AggregateCounts, ContentGraph
from .taxonomy import PARAGRAPH_SLOTS


def filled_paragraph_count(passage_row: dict[str, Any]) -> int:
    count = 0
    for slot in range(1, PARAGRAPH_SLOTS + 1):
        text = passage_row.get(f"paragraph_{slot}")
        if text and str(text).strip():
            count += 1
    return count


def counts_from_rows(
    passages: list[dict[str, Any]],
    vocabulary_terms: list[dict[str, Any]],
    vocabulary_questions: list[dict[str, Any]],
    paragraph_questions: list[dict[str, Any]],
    comprehensive_questions: list[dict[str, Any]],
) -> AggregateCounts:
    """Aggregate counts of stored child rows."""
    return AggregateCounts(
        total_passages=sum(filled_paragraph_count(row) for row in passages),
        total_vocabulary_terms=len(vocabulary_terms),
        total_vocabulary_questions=len(vocabulary_questions),
        total_paragraph_questions=len(paragraph_questions),
        total_comprehensive_questions=len(comprehensive_questions),
    )


class GraphPersister:
    """Write a ContentGraph through the store."""

    def __init__(self, store: ContentStore | None = None, in_transaction: bool | None = None):
        """
        Initialize persister.

        Args:
            store: Persistence client (defaults to the configured database)
            in_transaction: Write the whole graph atomically; defaults to the
                persist_in_transaction setting. When False, rows written before
                a failing step stay in place.
        """
        self.store = store or ContentStore()
        if in_transaction is None:
            in_transaction = get_settings().persist_in_transaction
        self.in_transaction = in_transaction

    def persist(self, graph: ContentGraph) -> str:
        """Write the graph and return the new content set id."""
        if self.in_transaction:
            with self.store.transaction() as store:
                return self._write(store, graph)
        return self._write(self.store, graph)

    def _write(self, store: ContentStore, graph: ContentGraph) -> str:
        header = store.insert("content_sets", [graph.content_set.to_row()])[0]
        content_set_id = header["id"]

        try:
            counts = write_children(store, content_set_id, graph)
            store.update("content_sets", counts.as_columns(), id=content_set_id)
        except PersistenceError as e:
            logger.error(f"Saving content set {content_set_id} failed at {e.table}: {e.reason}")
            raise

        logger.info(
            f"Saved content set {content_set_id} ('{graph.content_set.title}'): "
            f"{counts.total_passages} paragraph(s), {counts.total_vocabulary_terms} term(s), "
            f"{counts.total_vocabulary_questions + counts.total_paragraph_questions + counts.total_comprehensive_questions} "
            f"question(s)"
        )
        return content_set_id


def write_children(store: ContentStore, content_set_id: str, graph: ContentGraph) -> AggregateCounts:
    """Insert the five child collections under one content set; returns counts of what was written."""
    passages = store.insert("passages", [p.to_row(content_set_id) for p in graph.passages])
    passage_ids = {row["passage_number"]: row["id"] for row in passages}

    terms = store.insert(
        "vocabulary_terms",
        [
            term.to_row(content_set_id, passage_ids.get(term.passage_number))
            for term in graph.vocabulary_terms
        ],
    )
    vocabulary_questions = store.insert(
        "vocabulary_questions",
        [q.to_row(content_set_id) for q in graph.vocabulary_questions],
    )
    paragraph_questions = store.insert(
        "paragraph_questions",
        [q.to_row(content_set_id) for q in graph.paragraph_questions],
    )
    comprehensive_questions = store.insert(
        "comprehensive_questions",
        [q.to_row(content_set_id) for q in graph.comprehensive_questions],
    )
    return counts_from_rows(
        passages, terms, vocabulary_questions, paragraph_questions, comprehensive_questions
    )
