"""Store: query builder, predicates and errors."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from folio.database import get_db
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
)
from folio.store.query import Store, StoreDelete, StoreQuery


def get_store(db: Session = Depends(get_db)) -> Iterator[Store]:
    """Yield a Store bound to the request's session."""
    yield Store(db)


__all__ = [
    "Contains",
    "Eq",
    "In",
    "Neq",
    "NotIn",
    "Or",
    "Overlaps",
    "Predicate",
    "Range",
    "Store",
    "StoreDelete",
    "StoreError",
    "StoreQuery",
    "get_store",
]
