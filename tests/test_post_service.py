"""Tests for folio/services/post_service.py."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from folio.schemas.post import Category
from folio.services.post_service import PostService


@pytest.fixture
def posts(store) -> PostService:
    return PostService(store)


class TestGetPost:
    def test_by_slug(self, posts, make_post):
        post = make_post("Hello", slug="hello")
        found = posts.get_post("hello")
        assert found.id == post.id
        assert found.identifier == "hello"

    def test_by_id(self, posts, make_post):
        post = make_post("No slug")
        found = posts.get_post(post.id)
        assert found.title == "No slug"
        assert found.identifier == post.id

    def test_missing(self, posts):
        assert posts.get_post("nope") is None

    def test_content_is_returned_raw(self, posts, make_post):
        make_post("Markdown", slug="md", content="# Heading\n\n*bold*")
        assert posts.get_post("md").content == "# Heading\n\n*bold*"


class TestPostOptions:
    def test_newest_first(self, posts, make_post):
        make_post("Older", created_at=datetime(2023, 1, 1, tzinfo=UTC))
        make_post("Newer", created_at=datetime(2024, 1, 1, tzinfo=UTC))
        assert [option.title for option in posts.list_post_options()] == ["Newer", "Older"]

    def test_title_filter(self, posts, make_post):
        make_post("Rust Ownership")
        make_post("Go Channels")
        options = posts.list_post_options(q="rust")
        assert [option.title for option in options] == ["Rust Ownership"]

    def test_limit_is_clamped(self, posts, make_post):
        for i in range(3):
            make_post(f"Post {i}")
        assert len(posts.list_post_options(limit=2)) == 2
        assert len(posts.list_post_options(limit=0)) == 1


class TestRelatedPosts:
    def test_shared_tags_then_category(self, posts, make_post):
        current = make_post("Current", tags=["rust"], category=Category.DEVELOPMENT)
        tagged = make_post(
            "Tagged",
            tags=["Rust"],
            category=Category.RESEARCH,
            created_at=datetime(2023, 1, 1, tzinfo=UTC),
        )
        same_category = make_post(
            "Same category",
            category=Category.DEVELOPMENT,
            created_at=datetime(2024, 6, 1, tzinfo=UTC),
        )
        make_post("Unrelated", category=Category.CRYPTO)

        related = posts.get_related_posts(
            current.id, current.tags, Category.DEVELOPMENT.value, limit=3
        )

        assert [post.id for post in related] == [tagged.id, same_category.id]

    def test_never_includes_current_post(self, posts, make_post):
        current = make_post("Current", tags=["rust"])
        related = posts.get_related_posts(current.id, ["rust"], Category.DEVELOPMENT.value)
        assert related == []

    def test_respects_limit(self, posts, make_post):
        current = make_post("Current", tags=["rust"])
        for i in range(4):
            make_post(f"Other {i}", tags=["rust"])
        related = posts.get_related_posts(current.id, ["rust"], Category.DEVELOPMENT.value, limit=2)
        assert len(related) == 2

    def test_without_tags_uses_category(self, posts, make_post):
        current = make_post("Current", category=Category.CRYPTO)
        other = make_post("Other", category=Category.CRYPTO)
        related = posts.get_related_posts(current.id, None, Category.CRYPTO.value)
        assert [post.id for post in related] == [other.id]


class TestDeletePost:
    def test_removes_post_and_membership(self, posts, store, make_post, add_membership):
        post = make_post("Doomed")
        add_membership(post.id, position=1)

        assert posts.delete_post(post.id) is True
        assert posts.get_post(post.id) is None
        assert store.select("post_series_items").eq("post_id", post.id).first() is None

    def test_missing_post(self, posts):
        assert posts.delete_post("nope") is False
