"""Series membership and previous/next navigation."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends

from folio.schemas.series import SeriesContext, SeriesMembershipOut, SeriesNeighbor
from folio.store import Store, StoreError, get_store
from folio.utils.text import MAX_SERIES_TITLE_LENGTH, build_series_slug

logger = logging.getLogger(__name__)

SERIES_TABLE = "post_series_items"
POSTS_TABLE = "posts"
MEMBERSHIP_COLUMNS = ("post_id", "series_slug", "series_title", "position")
UNTITLED = "Untitled"


def series_sort_key(row: dict, posts_by_id: dict[str, dict]) -> tuple:
    """Total order for series rows.

    Rows with a position come first, by position. Then creation time and
    title of the linked post, then ``post_id`` so equal rows still order
    deterministically.
    """
    post = posts_by_id.get(row["post_id"], {})
    position = row.get("position")
    return (
        position is None,
        position if position is not None else 0,
        post.get("created_at") or datetime.min,
        post.get("title") or "",
        row["post_id"],
    )


def _neighbor(row: dict | None, posts_by_id: dict[str, dict]) -> SeriesNeighbor | None:
    if row is None:
        return None
    post = posts_by_id.get(row["post_id"], {})
    return SeriesNeighbor(
        post_id=row["post_id"],
        title=post.get("title") or UNTITLED,
        position=row.get("position"),
    )


class SeriesService:
    """Reads and writes ``post_series_items`` through the Store.

    A deployment without the series table behaves as if no post belongs
    to a series: reads return ``None`` and writes do nothing.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    def get_series_membership(self, post_id: str) -> SeriesMembershipOut | None:
        try:
            row = (
                self.store.select(SERIES_TABLE, MEMBERSHIP_COLUMNS)
                .eq("post_id", post_id)
                .first()
            )
        except StoreError as exc:
            if exc.missing_relation:
                return None
            raise
        return SeriesMembershipOut.model_validate(row) if row else None

    def get_series_context(self, post_id: str) -> SeriesContext | None:
        membership = self.get_series_membership(post_id)
        if membership is None:
            return None

        try:
            rows = (
                self.store.select(SERIES_TABLE, MEMBERSHIP_COLUMNS)
                .eq("series_slug", membership.series_slug)
                .execute()
            )
        except StoreError as exc:
            if exc.missing_relation:
                return None
            raise
        if not rows:
            return None

        posts = (
            self.store.select(POSTS_TABLE, ("id", "title", "created_at"))
            .in_("id", [row["post_id"] for row in rows])
            .execute()
        )
        posts_by_id = {post["id"]: post for post in posts}

        # Rows pointing at deleted posts never count or become neighbors
        live_rows = [row for row in rows if row["post_id"] in posts_by_id]
        ordered = sorted(live_rows, key=lambda row: series_sort_key(row, posts_by_id))

        index = next(
            (i for i, row in enumerate(ordered) if row["post_id"] == post_id), None
        )
        if index is None:
            return None

        previous_row = ordered[index - 1] if index > 0 else None
        next_row = ordered[index + 1] if index < len(ordered) - 1 else None
        return SeriesContext(
            slug=membership.series_slug,
            title=membership.series_title,
            total=len(ordered),
            index=index + 1,
            previous=_neighbor(previous_row, posts_by_id),
            next=_neighbor(next_row, posts_by_id),
        )

    def upsert_series_membership(
        self,
        post_id: str,
        series_title: str,
        series_slug: str | None = None,
        position: int | None = None,
    ) -> SeriesMembershipOut | None:
        """Attach ``post_id`` to a series, replacing any previous membership.

        Returns the stored membership, or ``None`` when nothing was written
        (blank title or slug, or no series table).
        """
        title = (series_title or "").strip()[:MAX_SERIES_TITLE_LENGTH]
        if not title:
            return None
        slug = build_series_slug(series_slug or title)
        if not slug:
            return None

        membership = SeriesMembershipOut(
            post_id=post_id, series_slug=slug, series_title=title, position=position
        )
        try:
            self.store.upsert(
                SERIES_TABLE, membership.model_dump(), on_conflict="post_id"
            )
        except StoreError as exc:
            if exc.missing_relation:
                return None
            raise
        return membership

    def delete_series_membership(self, post_id: str) -> None:
        try:
            self.store.delete(SERIES_TABLE).eq("post_id", post_id).execute()
        except StoreError as exc:
            if not exc.missing_relation:
                raise

    def save_series_for_post(
        self,
        post_id: str,
        series_title: str | None,
        series_slug: str | None = None,
        position: int | None = None,
    ) -> SeriesMembershipOut | None:
        """Apply the series fields of a saved post: blank title leaves the series."""
        if not (series_title or "").strip():
            self.delete_series_membership(post_id)
            return None
        return self.upsert_series_membership(post_id, series_title, series_slug, position)


def get_series_service(store: Store = Depends(get_store)) -> SeriesService:
    return SeriesService(store)
