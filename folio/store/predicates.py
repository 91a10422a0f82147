"""Filter predicates and their translation to SQLAlchemy expressions.

Predicates are plain frozen dataclasses so query intent can be built,
compared and inspected in tests without a database. ``compile_predicate``
is the only place that turns them into SQL; values are always bound
parameters and LIKE wildcards in user input are escaped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy import Table, and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from folio.utils.text import TAG_DELIMITER


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class Neq:
    column: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""

    column: str
    value: str


@dataclass(frozen=True)
class In:
    column: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class NotIn:
    column: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class Range:
    """Inclusive bounds; either side may be open."""

    column: str
    lower: Any = None
    upper: Any = None


@dataclass(frozen=True)
class Overlaps:
    """Row has at least one of ``values`` in a ``|a|b|`` delimited column."""

    column: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class Or:
    predicates: tuple[Predicate, ...]


Predicate = Union[Eq, Neq, Contains, In, NotIn, Range, Overlaps, Or]


def _column(table: Table, name: str):
    try:
        return table.c[name]
    except KeyError:
        raise ValueError(f"Unknown column {name!r} on {table.name}") from None


def compile_predicate(predicate: Predicate, table: Table) -> ColumnElement[bool]:
    """Translate a predicate into a SQLAlchemy boolean clause for ``table``."""
    if isinstance(predicate, Or):
        if not predicate.predicates:
            return false()
        return or_(*(compile_predicate(p, table) for p in predicate.predicates))

    column = _column(table, predicate.column)

    if isinstance(predicate, Eq):
        return column == predicate.value
    if isinstance(predicate, Neq):
        return column != predicate.value
    if isinstance(predicate, Contains):
        return column.icontains(predicate.value, autoescape=True)
    if isinstance(predicate, In):
        return column.in_(predicate.values)
    if isinstance(predicate, NotIn):
        return column.not_in(predicate.values)
    if isinstance(predicate, Range):
        clauses = []
        if predicate.lower is not None:
            clauses.append(column >= predicate.lower)
        if predicate.upper is not None:
            clauses.append(column <= predicate.upper)
        return and_(*clauses) if clauses else true()
    if isinstance(predicate, Overlaps):
        if not predicate.values:
            return false()
        return or_(
            *(
                column.contains(f"{TAG_DELIMITER}{value}{TAG_DELIMITER}", autoescape=True)
                for value in predicate.values
            )
        )
    raise TypeError(f"Unsupported predicate: {predicate!r}")
