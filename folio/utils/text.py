"""Query, tag and slug normalization shared by the search and series services."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

from slugify import slugify

MAX_SEARCH_QUERY_LENGTH = 64
MAX_SERIES_SLUG_LENGTH = 80
MAX_SERIES_TITLE_LENGTH = 120
TAG_DELIMITER = "|"

# Letters, digits, whitespace and # . _ - survive; \w covers the underscore
_QUERY_DISALLOWED_RE = re.compile(r"[^\w\s#.\-]")
_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_PUNCT_RE = re.compile(r"[^\w\s-]")


def _clean_search_text(text: str) -> str:
    normalized = unicodedata.normalize("NFKC", text or "")
    normalized = _QUERY_DISALLOWED_RE.sub(" ", normalized)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def normalize_search_query(text: str) -> str:
    """Normalize a raw search string.

    NFKC-normalizes, replaces anything that is not a letter, digit,
    whitespace, ``#``, ``.``, ``_`` or ``-`` with a space, collapses
    whitespace, trims and caps the result at 64 characters.
    """
    return _clean_search_text(text)[:MAX_SEARCH_QUERY_LENGTH]


def normalize_search_text(text: str) -> str:
    """Lowercased :func:`normalize_search_query` without the length cap, for post bodies."""
    return _clean_search_text(text).lower()


def normalize_tag(text: str) -> str:
    """Normalize a tag: query normalization, leading ``#`` dropped, lowercased."""
    normalized = normalize_search_query(text)
    if normalized.startswith("#"):
        normalized = normalized[1:]
    return normalized.lower()


def normalize_tags(values: Iterable[str]) -> list[str]:
    """Normalize, drop empties and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        tag = normalize_tag(value)
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def build_tags_searchable(tags: Iterable[str] | None) -> str:
    """Render tags as ``|a|b|`` so one LIKE can test exact membership."""
    normalized = normalize_tags(tags or [])
    if not normalized:
        return ""
    return TAG_DELIMITER + TAG_DELIMITER.join(normalized) + TAG_DELIMITER


def build_series_slug(title: str) -> str:
    """Derive the series grouping key from a title (or an explicit slug)."""
    text = unicodedata.normalize("NFKC", title or "").strip()
    text = _SLUG_PUNCT_RE.sub("", text)
    return slugify(text, max_length=MAX_SERIES_SLUG_LENGTH)
