"""JSON envelope shared by every API route."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel

DEFAULT_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "INVALID_REQUEST",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
    status.HTTP_503_SERVICE_UNAVAILABLE: "UNAVAILABLE",
}


class ApiErrorPayload(BaseModel):
    code: str
    message: str


class ApiError(HTTPException):
    """HTTPException carrying a machine-readable error code."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code


def api_success(data: Any) -> dict[str, Any]:
    return {"ok": True, "data": data}


def api_error(code: str, message: str) -> dict[str, Any]:
    return {"ok": False, "error": ApiErrorPayload(code=code, message=message).model_dump()}


def error_code_for(exc: HTTPException) -> str:
    code = getattr(exc, "code", None)
    if code:
        return code
    return DEFAULT_ERROR_CODES.get(exc.status_code, "ERROR")
