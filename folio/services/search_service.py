"""Post search, suggestions and popular tags."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime, time

from fastapi import Depends

from folio.config import settings
from folio.schemas.search import (
    SearchPostResult,
    SearchPostsResponse,
    SearchQuery,
    SearchSort,
)
from folio.store import Contains, Or, Store, StoreQuery, get_store
from folio.utils.text import (
    normalize_search_query,
    normalize_search_text,
    normalize_tag,
    normalize_tags,
)

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
RESULT_COLUMNS = (
    "id",
    "slug",
    "title",
    "excerpt",
    "content",
    "category",
    "tags",
    "created_at",
    "updated_at",
)
SUGGESTION_CANDIDATES = 10
FUZZY_DISTANCE_LIMIT = 2
CONTENT_TOKEN_WINDOW = 200


def _tokenize(text: str) -> list[str]:
    return normalize_search_text(text).split()


def edit_distance(left: str, right: str) -> int:
    """Levenshtein distance (insert, delete, substitute all cost 1)."""
    if len(left) < len(right):
        left, right = right, left
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (left_char != right_char),
                )
            )
        previous = current
    return previous[-1]


def _has_near_match(token: str, candidates: list[str]) -> bool:
    """Substring hit or a spelling within two edits, for tokens >= 3 chars."""
    if len(token) < 3:
        return False
    for candidate in candidates:
        if token in candidate:
            return True
        if abs(len(token) - len(candidate)) > FUZZY_DISTANCE_LIMIT:
            continue
        if edit_distance(token, candidate) <= FUZZY_DISTANCE_LIMIT:
            return True
    return False


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def recency_boost(created_at: datetime, now: datetime) -> float:
    """Up to 8 points for brand-new posts, decaying to 0 after a year."""
    age_days = (now - _as_utc(created_at)).total_seconds() / 86400
    return max(0.0, 8 - age_days / 45)


def score_post(post: dict, query: str, now: datetime) -> float:
    """Score a post against a normalized free-text query.

    Whole-query hits in title/content weigh most, then per-token hits in
    title, tags and content, each falling back to a near-match bonus.
    """
    normalized_query = query.lower()
    tokens = normalized_query.split()
    if not tokens:
        return 0.0

    title = normalize_search_text(post.get("title") or "")
    content = " ".join(_tokenize(post.get("content") or ""))
    tags = [normalize_tag(tag) for tag in post.get("tags") or []]
    title_tokens = title.split()
    content_tokens = content.split()[:CONTENT_TOKEN_WINDOW]

    score = 0.0
    if normalized_query in title:
        score += 36
    if normalized_query in content:
        score += 14

    for token in tokens:
        if token in title:
            score += 26
        elif _has_near_match(token, title_tokens):
            score += 16

        if token in content:
            score += 10
        elif _has_near_match(token, content_tokens):
            score += 6

        if any(token in tag for tag in tags):
            score += 18
        elif _has_near_match(token, tags):
            score += 11

    return score + recency_boost(post["created_at"], now)


class SearchService:
    """Search over posts through the Store."""

    def __init__(self, store: Store, *, candidate_limit: int | None = None) -> None:
        self.store = store
        self.candidate_limit = candidate_limit or settings.search_candidate_limit

    def _filtered(self, term: str, tags: list[str], query: SearchQuery) -> StoreQuery:
        builder = self.store.select(POSTS_TABLE, RESULT_COLUMNS)
        if term:
            builder = builder.or_(
                Contains("title", term),
                Contains("content", term),
                Contains("tags_searchable", term),
            )
        if tags:
            builder = builder.overlaps("tags_searchable", tags)
        if query.date_from:
            builder = builder.gte(
                "created_at", datetime.combine(query.date_from, time.min, tzinfo=UTC)
            )
        if query.date_to:
            builder = builder.lte(
                "created_at", datetime.combine(query.date_to, time.max, tzinfo=UTC)
            )
        return builder

    def search_posts(
        self, query: SearchQuery, *, now: datetime | None = None
    ) -> SearchPostsResponse:
        page, page_size = query.page, query.page_size
        if query.is_empty:
            return SearchPostsResponse.empty(page, page_size)

        term = query.q
        tags = list(query.tags)
        if term.startswith("#") and len(term) > 1:
            tags = normalize_tags([*tags, term])
            term = ""
        if not term and not tags:
            return SearchPostsResponse.empty(page, page_size)

        total = self._filtered(term, tags, query).count()
        offset = (page - 1) * page_size

        rank = (
            query.sort == SearchSort.RELEVANCE
            and term
            and 0 < total <= self.candidate_limit
        )
        if rank:
            candidates = (
                self._filtered(term, tags, query)
                .order("created_at", ascending=False)
                .order("id", ascending=False)
                .execute()
            )
            now = now or datetime.now(UTC)
            scored = [(score_post(row, term, now), row) for row in candidates]
            # Stable sort keeps created_at DESC among equal scores
            scored.sort(key=lambda pair: pair[0], reverse=True)
            rows = [row for _, row in scored[offset : offset + page_size]]
        elif total > offset:
            rows = (
                self._filtered(term, tags, query)
                .order("created_at", ascending=False)
                .order("id", ascending=False)
                .range(offset, offset + page_size - 1)
                .execute()
            )
        else:
            rows = []

        return SearchPostsResponse(
            items=[SearchPostResult.model_validate(row) for row in rows],
            total=total,
            page=page,
            page_size=page_size,
            has_next_page=page * page_size < total,
        )

    def get_search_suggestions(self, raw_query: str, limit: int = 6) -> list[str]:
        query = normalize_search_query(raw_query)
        if len(query) < 2:
            return []

        rows = (
            self.store.select(POSTS_TABLE, ("title", "tags"))
            .or_(Contains("title", query), Contains("tags_searchable", query))
            .limit(SUGGESTION_CANDIDATES)
            .execute()
        )
        lowered = query.lower()
        tag_suggestions = [
            f"#{tag}"
            for row in rows
            for tag in row.get("tags") or []
            if lowered in tag.lower()
        ]
        title_suggestions = [row["title"] for row in rows]
        return list(dict.fromkeys(tag_suggestions + title_suggestions))[:limit]

    def get_popular_tags(self, limit: int = 8) -> list[str]:
        rows = self.store.select(POSTS_TABLE, ("tags",)).execute()
        counts = Counter(tag for row in rows for tag in row.get("tags") or [])
        return [tag for tag, _ in counts.most_common(limit)]


def get_search_service(store: Store = Depends(get_store)) -> SearchService:
    return SearchService(store)
