"""
Graph updater - replaces the content of an already stored content set.

Header fields and all five child collections are replaced by a freshly built
graph in one transaction; the owner and review status are left as they were.
"""

from __future__ import annotations

from loguru import logger

from config import get_settings
from content_sets.db import CHILD_TABLES, ContentStore
from content_sets.exceptions import ConcurrencyConflictError, ContentSetNotFoundError

from .models import ContentGraph
from .persister import write_children

# Header columns an edit never overwrites
_PRESERVED_COLUMNS = ("status", "user_id")


class GraphUpdater:
    """Replace a stored graph's content, honoring the conflict policy."""

    def __init__(self, store: ContentStore | None = None, conflict_policy: str | None = None):
        self.store = store or ContentStore()
        self.conflict_policy = conflict_policy or get_settings().conflict_policy

    def update(
        self,
        content_set_id: str,
        graph: ContentGraph,
        expected_version: int | None = None,
    ) -> int:
        """
        Replace the content of one content set.

        Returns:
            The new version of the content set

        Raises:
            ContentSetNotFoundError: No such content set
            ConcurrencyConflictError: Version mismatch under optimistic_version
            PersistenceError: The store rejected a write (nothing is kept)
        """
        current = self.store.select_one("content_sets", id=content_set_id)
        if current is None:
            raise ContentSetNotFoundError(content_set_id)

        filters: dict[str, object] = {"id": content_set_id}
        base = current["version"]
        if self.conflict_policy == "optimistic_version":
            if expected_version != current["version"]:
                raise ConcurrencyConflictError(content_set_id, expected_version, current["version"])
            filters["version"] = expected_version
            base = expected_version

        header = {
            key: value
            for key, value in graph.content_set.to_row().items()
            if key not in _PRESERVED_COLUMNS
        }
        header["version"] = base + 1

        with self.store.transaction() as store:
            if not store.update("content_sets", header, **filters):
                raise ConcurrencyConflictError(content_set_id, expected_version, None)
            for table in reversed(CHILD_TABLES):
                store.delete(table, content_set_id=content_set_id)
            counts = write_children(store, content_set_id, graph)
            store.update("content_sets", counts.as_columns(), id=content_set_id)

        logger.info(
            f"Updated content set {content_set_id} to version {base + 1}: "
            f"{counts.total_passages} paragraph(s), {counts.total_vocabulary_terms} term(s)"
        )
        return base + 1
