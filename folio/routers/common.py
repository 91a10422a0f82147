"""Helpers shared by the JSON API routers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import status
from pydantic import ValidationError

from folio.observability.logging import ApiContext
from folio.schemas.api import ApiError
from folio.store import StoreError


def validation_message(exc: ValidationError) -> str:
    """First validation issue as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "Invalid input."
    issue = errors[0]
    path = ".".join(str(part) for part in issue.get("loc", ()))
    return f"{path}: {issue['msg']}" if path else issue["msg"]


@contextmanager
def store_failure(context: ApiContext, code: str, message: str) -> Iterator[None]:
    """Turn a StoreError into a logged 500 with a generic message."""
    try:
        yield
    except StoreError as exc:
        context.log_error(code, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
        raise ApiError(code, message, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
