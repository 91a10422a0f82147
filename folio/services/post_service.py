"""Post lookups: by identifier, picker options and related posts."""

from __future__ import annotations

import logging

from fastapi import Depends

from folio.schemas.post import PostOption, PostOut
from folio.services.series_service import SeriesService
from folio.store import Store, get_store
from folio.utils.text import normalize_search_query, normalize_tags

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
POST_COLUMNS = (
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
MAX_OPTIONS = 100


class PostService:
    """Read-side post queries, plus post deletion with its series cleanup."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def get_post(self, identifier: str) -> PostOut | None:
        """Resolve a post by slug, falling back to its id."""
        row = (
            self.store.select(POSTS_TABLE, POST_COLUMNS)
            .eq("slug", identifier)
            .first()
        )
        if row is None:
            row = self.store.select(POSTS_TABLE, POST_COLUMNS).eq("id", identifier).first()
        return PostOut.model_validate(row) if row else None

    def list_post_options(self, q: str = "", limit: int = 30) -> list[PostOption]:
        query = normalize_search_query(q)
        builder = (
            self.store.select(POSTS_TABLE, ("id", "slug", "title", "created_at"))
            .order("created_at", ascending=False)
            .limit(max(1, min(limit, MAX_OPTIONS)))
        )
        if query:
            builder = builder.contains("title", query)
        return [PostOption.model_validate(row) for row in builder.execute()]

    def get_related_posts(
        self,
        post_id: str,
        tags: list[str] | None,
        category: str,
        limit: int = 3,
    ) -> list[PostOut]:
        """Posts sharing a tag, topped up with the newest posts of the same category."""
        related: list[dict] = []
        tags = normalize_tags(tags or [])
        if tags:
            related = (
                self.store.select(POSTS_TABLE, POST_COLUMNS)
                .neq("id", post_id)
                .overlaps("tags_searchable", tags)
                .order("created_at", ascending=False)
                .limit(limit)
                .execute()
            )

        if len(related) < limit:
            excluded = [post_id, *(row["id"] for row in related)]
            related += (
                self.store.select(POSTS_TABLE, POST_COLUMNS)
                .eq("category", category)
                .not_in("id", excluded)
                .order("created_at", ascending=False)
                .limit(limit - len(related))
                .execute()
            )

        return [PostOut.model_validate(row) for row in related]

    def delete_post(self, post_id: str) -> bool:
        """Delete a post and its series membership. Returns False if nothing matched."""
        SeriesService(self.store).delete_series_membership(post_id)
        deleted = self.store.delete(POSTS_TABLE).eq("id", post_id).execute()
        if deleted:
            logger.info("Deleted post %s", post_id)
        return bool(deleted)


def get_post_service(store: Store = Depends(get_store)) -> PostService:
    return PostService(store)
