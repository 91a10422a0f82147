"""Pydantic schemas for the search endpoints."""

from __future__ import annotations

import re
from datetime import date
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from folio.config import settings
from folio.schemas.post import PostOut
from folio.utils.text import normalize_search_query, normalize_tags

MAX_RAW_QUERY_LENGTH = 256
MAX_PAGE = 1000

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SearchSort(str, Enum):
    """Result ordering."""

    RELEVANCE = "relevance"
    LATEST = "latest"


class SearchQuery(BaseModel):
    """Validated search request.

    ``q`` is normalized and ``tags`` are normalized and de-duplicated during
    validation, so services can rely on both being clean.
    """

    model_config = ConfigDict(populate_by_name=True)

    q: str = Field(default="", max_length=MAX_RAW_QUERY_LENGTH)
    tags: list[str] = Field(default_factory=list)
    date_from: date | None = Field(default=None, alias="from")
    date_to: date | None = Field(default=None, alias="to")
    sort: SearchSort = SearchSort.RELEVANCE
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    page_size: int = Field(
        default=settings.search_default_page_size,
        ge=1,
        le=settings.search_max_page_size,
        alias="pageSize",
    )

    @field_validator("q", mode="after")
    @classmethod
    def _normalize_q(cls, value: str) -> str:
        return normalize_search_query(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [part for item in value for part in str(item).split(",")]

    @field_validator("tags", mode="after")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _require_iso_date(cls, value: object) -> object:
        if value is None or value == "":
            return None
        if isinstance(value, str) and not _ISO_DATE_RE.match(value):
            raise ValueError("must be a YYYY-MM-DD date")
        return value

    @model_validator(mode="after")
    def _check_range(self) -> SearchQuery:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("from must be on or before to")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.q and not self.tags


class SearchPostResult(PostOut):
    """A single search hit."""


class SearchPostsResponse(BaseModel):
    """Paginated search results."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[SearchPostResult]
    total: int
    page: int
    page_size: int
    has_next_page: bool

    @classmethod
    def empty(cls, page: int, page_size: int) -> SearchPostsResponse:
        return cls(items=[], total=0, page=page, page_size=page_size, has_next_page=False)
