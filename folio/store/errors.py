"""Store error type and SQLSTATE classification."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
MISSING_RELATION_CODES = frozenset({UNDEFINED_TABLE, UNDEFINED_COLUMN})

# SQLite reports no SQLSTATE; map its messages onto the PostgreSQL codes
_SQLITE_MESSAGES = (
    ("no such table", UNDEFINED_TABLE),
    ("no such column", UNDEFINED_COLUMN),
)


def error_code(exc: BaseException) -> str | None:
    """Best-effort SQLSTATE for a SQLAlchemy/DBAPI error."""
    orig = getattr(exc, "orig", None)
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    message = str(orig if orig is not None else exc).lower()
    for needle, code in _SQLITE_MESSAGES:
        if needle in message:
            return code
    return None


class StoreError(Exception):
    """A Store query failed.

    ``code`` is the SQLSTATE when known. ``missing_relation`` tells an
    unprovisioned table/column apart from ordinary failures.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        operation: str = "",
        table: str = "",
    ) -> None:
        super().__init__(message)
        self.code = code
        self.operation = operation
        self.table = table

    @property
    def missing_relation(self) -> bool:
        return self.code in MISSING_RELATION_CODES

    @classmethod
    def from_exception(
        cls, exc: SQLAlchemyError, *, operation: str, table: str
    ) -> StoreError:
        return cls(
            f"{operation} on {table} failed: {exc.__class__.__name__}",
            code=error_code(exc),
            operation=operation,
            table=table,
        )
