"""Post and series membership models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, validates

from folio.database import Base
from folio.utils.text import build_tags_searchable


def _new_post_id() -> str:
    return str(uuid.uuid4())


class Post(Base):
    """Blog post.

    ``tags_searchable`` is derived from ``tags`` on every assignment and is
    what the search queries match against.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_post_id)
    slug: Mapped[str | None] = mapped_column(
        String(200), unique=True, index=True, nullable=True
    )
    title: Mapped[str] = mapped_column(String(200))
    excerpt: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(50), index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags_searchable: Mapped[str] = mapped_column(Text, default="", server_default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @validates("tags")
    def _sync_tags_searchable(self, key: str, value: list[str] | None) -> list[str]:
        tags = list(value or [])
        self.tags_searchable = build_tags_searchable(tags)
        return tags


class SeriesMembership(Base):
    """A post's membership in a series (at most one per post)."""

    __tablename__ = "post_series_items"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    series_slug: Mapped[str] = mapped_column(String(80), index=True)
    series_title: Mapped[str] = mapped_column(String(120))
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
