"""
Persistence client for the content graph.

Exposes per-collection create/read/update/delete with equality filters, the
only interface the graph components use to reach storage. Rows travel as plain
dicts keyed by column name.

Outside a transaction every call commits on its own, so a failure in one call
never undoes an earlier one. Inside `transaction()` all calls share one session
and commit (or roll back) together.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from copy import copy
from typing import Any

from loguru import logger
from sqlalchemy import delete as sql_delete
from sqlalchemy import inspect, select
from sqlalchemy import update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from content_sets.exceptions import PersistenceError

from .base import Base
from .database import session_scope
from .models import TABLES

_ORDERING_COLUMNS = ("passage_number", "question_number", "created_at")


def row_to_dict(obj: Base) -> dict[str, Any]:
    """Convert an ORM instance into a plain column dict."""
    return {attr.key: getattr(obj, attr.key) for attr in inspect(type(obj)).column_attrs}


class ContentStore:
    """Table-oriented store over SQLAlchemy sessions."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        session: Session | None = None,
    ):
        """
        Initialize the store.

        Args:
            session_factory: Factory for per-call sessions (defaults to the configured database)
            session: Bound session; when given, calls flush into it and never commit
        """
        self._factory = session_factory
        self._session = session

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    # ========================================
    # Session handling
    # ========================================

    @contextmanager
    def _scope(self) -> Iterator[Session]:
        if self._session is not None:
            yield self._session
            self._session.flush()
        else:
            with session_scope(self._factory) as session:
                yield session

    @contextmanager
    def transaction(self) -> Iterator[ContentStore]:
        """Yield a store whose calls all commit or roll back together."""
        if self._session is not None:
            yield self
            return
        with session_scope(self._factory) as session:
            bound = copy(self)
            bound._session = session
            yield bound

    @staticmethod
    def _model(table: str) -> type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    @staticmethod
    def _ordering(model: type[Base]):
        for column in _ORDERING_COLUMNS:
            if hasattr(model, column):
                return getattr(model, column)
        return None

    # ========================================
    # CRUD
    # ========================================

    def insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows; missing ids are generated. Returns the stored rows."""
        model = self._model(table)
        if not rows:
            return []
        try:
            with self._scope() as session:
                objects = [model(**row) for row in rows]
                session.add_all(objects)
                session.flush()
                stored = [row_to_dict(obj) for obj in objects]
        except SQLAlchemyError as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise PersistenceError(table, str(e)) from e
        logger.debug(f"Inserted {len(stored)} row(s) into {table}")
        return stored

    def select(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        """Select rows matching all equality filters."""
        model = self._model(table)
        stmt = select(model).filter_by(**filters)
        ordering = self._ordering(model)
        if ordering is not None:
            stmt = stmt.order_by(ordering)
        try:
            with self._scope() as session:
                return [row_to_dict(obj) for obj in session.scalars(stmt)]
        except SQLAlchemyError as e:
            logger.error(f"Select from {table} failed: {e}")
            raise PersistenceError(table, str(e)) from e

    def select_one(self, table: str, **filters: Any) -> dict[str, Any] | None:
        rows = self.select(table, **filters)
        return rows[0] if rows else None

    def update(self, table: str, values: dict[str, Any], **filters: Any) -> list[dict[str, Any]]:
        """
        Update every row matching the filters. Returns the updated rows.

        The filters go into the UPDATE itself, so a filter on version acts as a
        compare-and-set: a row changed since it was read is not touched.
        """
        model = self._model(table)
        stmt = (
            sql_update(model)
            .filter_by(**filters)
            .values(**values)
            .returning(model)
            .execution_options(synchronize_session="fetch")
        )
        try:
            with self._scope() as session:
                updated = [row_to_dict(obj) for obj in session.scalars(stmt).all()]
        except SQLAlchemyError as e:
            logger.error(f"Update of {table} failed: {e}")
            raise PersistenceError(table, str(e)) from e
        return updated

    def delete(self, table: str, **filters: Any) -> int:
        """Delete every row matching the filters. Returns the number of rows removed."""
        model = self._model(table)
        if not filters:
            raise ValueError("Refusing to delete without filters")
        try:
            with self._scope() as session:
                result = session.execute(sql_delete(model).filter_by(**filters))
                removed = result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Delete from {table} failed: {e}")
            raise PersistenceError(table, str(e)) from e
        return removed
