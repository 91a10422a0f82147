"""Query-builder facade over a SQLAlchemy session."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select, Table, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.database import Base
from folio.models import post as _post_models  # noqa: F401 - populates metadata
from folio.observability.metrics import STORE_ERRORS, STORE_QUERY_LATENCY
from folio.observability.tracing import tracer
from folio.store.errors import StoreError
from folio.store.predicates import (
    Contains,
    Eq,
    In,
    Neq,
    NotIn,
    Or,
    Overlaps,
    Predicate,
    Range,
    compile_predicate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_columns(columns: Sequence[str] | str) -> list[str]:
    if isinstance(columns, str):
        if columns.strip() == "*":
            return []
        return [name.strip() for name in columns.split(",") if name.strip()]
    return list(columns)


class _FilterMixin:
    """Chainable filter methods shared by selects and deletes."""

    _predicates: list[Predicate]

    def where(self, predicate: Predicate):
        self._predicates.append(predicate)
        return self

    def eq(self, column: str, value: Any):
        return self.where(Eq(column, value))

    def neq(self, column: str, value: Any):
        return self.where(Neq(column, value))

    def contains(self, column: str, value: str):
        return self.where(Contains(column, value))

    def overlaps(self, column: str, values: Sequence[str]):
        return self.where(Overlaps(column, tuple(values)))

    def in_(self, column: str, values: Sequence[Any]):
        return self.where(In(column, tuple(values)))

    def not_in(self, column: str, values: Sequence[Any]):
        return self.where(NotIn(column, tuple(values)))

    def gte(self, column: str, value: Any):
        return self.where(Range(column, lower=value))

    def lte(self, column: str, value: Any):
        return self.where(Range(column, upper=value))

    def or_(self, *predicates: Predicate):
        return self.where(Or(tuple(predicates)))


class StoreQuery(_FilterMixin):
    """A lazily executed SELECT.

    Filters are ANDed together; ``or_`` groups alternatives into one filter.
    """

    def __init__(self, store: Store, table: Table, columns: Sequence[str] | str) -> None:
        self._store = store
        self._table = table
        self._columns = _parse_columns(columns)
        self._predicates = []
        self._order: list[tuple[str, bool]] = []
        self._offset: int | None = None
        self._limit: int | None = None

    def order(self, column: str, *, ascending: bool = True) -> StoreQuery:
        self._order.append((column, ascending))
        return self

    def range(self, from_index: int, to_index: int) -> StoreQuery:
        """Restrict to rows ``from_index``..``to_index`` inclusive (0-based)."""
        self._offset = max(from_index, 0)
        self._limit = max(to_index - from_index + 1, 0)
        return self

    def limit(self, count: int) -> StoreQuery:
        self._limit = max(count, 0)
        return self

    def _where_clauses(self):
        return [compile_predicate(p, self._table) for p in self._predicates]

    def statement(self) -> Select:
        if self._columns:
            stmt = select(*(self._table.c[name] for name in self._columns))
        else:
            stmt = select(self._table)
        clauses = self._where_clauses()
        if clauses:
            stmt = stmt.where(*clauses)
        for column, ascending in self._order:
            col = self._table.c[column]
            stmt = stmt.order_by(col.asc() if ascending else col.desc())
        if self._offset:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    def execute(self) -> list[dict[str, Any]]:
        stmt = self.statement()
        rows = self._store.run(
            "select",
            self._table.name,
            lambda: self._store.session.execute(stmt).mappings().all(),
        )
        return [dict(row) for row in rows]

    def first(self) -> dict[str, Any] | None:
        rows = self.limit(1).execute()
        return rows[0] if rows else None

    def count(self) -> int:
        """Exact row count for the filters, ignoring order and range."""
        stmt = select(func.count()).select_from(self._table)
        clauses = self._where_clauses()
        if clauses:
            stmt = stmt.where(*clauses)
        return self._store.run(
            "count",
            self._table.name,
            lambda: int(self._store.session.execute(stmt).scalar_one()),
        )


class StoreDelete(_FilterMixin):
    """A DELETE, committed as one statement on ``execute``."""

    def __init__(self, store: Store, table: Table) -> None:
        self._store = store
        self._table = table
        self._predicates = []

    def execute(self) -> int:
        if not self._predicates:
            raise ValueError("Refusing to delete without a filter")
        stmt = delete(self._table).where(
            *(compile_predicate(p, self._table) for p in self._predicates)
        )

        def _run() -> int:
            result = self._store.session.execute(stmt)
            self._store.session.commit()
            return result.rowcount or 0

        return self._store.run("delete", self._table.name, _run)


class Store:
    """Relational store reached through a small query-builder API.

    One instance wraps one request-scoped session. Every statement goes
    through ``run`` which times it, traces it and converts SQLAlchemy
    failures into ``StoreError``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise ValueError(f"Unknown table {name!r}") from None

    def select(self, table: str, columns: Sequence[str] | str = "*") -> StoreQuery:
        return StoreQuery(self, self.table(table), columns)

    def delete(self, table: str) -> StoreDelete:
        return StoreDelete(self, self.table(table))

    def upsert(self, table: str, values: dict[str, Any], *, on_conflict: str) -> None:
        """Insert ``values`` or update the row that conflicts on ``on_conflict``."""
        target = self.table(table)
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise NotImplementedError(f"Upsert is not supported on {dialect}")

        stmt = insert(target).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[on_conflict],
            set_={key: stmt.excluded[key] for key in values if key != on_conflict},
        )

        def _run() -> None:
            self.session.execute(stmt)
            self.session.commit()

        self.run("upsert", table, _run)

    def run(self, operation: str, table: str, fn: Callable[[], T]) -> T:
        start = time.perf_counter()
        with tracer.start_as_current_span(f"store.{operation}") as span:
            span.set_attribute("db.sql.table", table)
            try:
                return fn()
            except SQLAlchemyError as exc:
                self.session.rollback()
                error = StoreError.from_exception(exc, operation=operation, table=table)
                STORE_ERRORS.labels(operation, table, error.code or "unknown").inc()
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                if error.missing_relation:
                    logger.debug(
                        "Store relation missing for %s on %s", operation, table
                    )
                else:
                    logger.error(
                        "Store %s on %s failed",
                        operation,
                        table,
                        extra={
                            "operation": operation,
                            "table": table,
                            "code": error.code,
                            "duration_ms": duration_ms,
                        },
                    )
                raise error from exc
            finally:
                STORE_QUERY_LATENCY.labels(operation, table).observe(
                    time.perf_counter() - start
                )
