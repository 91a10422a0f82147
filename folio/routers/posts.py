"""Post API: picker options, post lookup, series context and related posts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from folio.observability.logging import ApiContext
from folio.routers.common import store_failure
from folio.schemas.api import ApiError, api_success
from folio.security import POSTS_RATE_LIMIT, limiter
from folio.services.post_service import PostService, get_post_service
from folio.services.series_service import SeriesService, get_series_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _not_found(identifier: str) -> ApiError:
    return ApiError(
        "POST_NOT_FOUND",
        f"Post not found: {identifier}",
        status.HTTP_404_NOT_FOUND,
    )


@router.get("", name="post_options")
@limiter.limit(POSTS_RATE_LIMIT)
def post_options(
    request: Request,
    q: str = Query("", max_length=256),
    limit: int = Query(30, ge=1, le=100),
    posts: PostService = Depends(get_post_service),
):
    """Newest posts as ``{id, slug, title, created_at}``, optionally title-filtered."""
    context = ApiContext(request)
    with store_failure(context, "POST_OPTIONS_FAILED", "Could not load posts."):
        options = posts.list_post_options(q=q, limit=limit)
    context.log_success()
    return api_success([option.model_dump(mode="json") for option in options])


@router.get("/{identifier}", name="post_detail")
@limiter.limit(POSTS_RATE_LIMIT)
def post_detail(
    request: Request,
    identifier: str,
    posts: PostService = Depends(get_post_service),
    series: SeriesService = Depends(get_series_service),
):
    """A post by slug or id, with its series context."""
    context = ApiContext(request)
    with store_failure(context, "POST_FAILED", "Could not load the post."):
        post = posts.get_post(identifier)
        if post is None:
            raise _not_found(identifier)
        series_context = series.get_series_context(post.id)

    context.log_success()
    return api_success(
        {
            "post": post.model_dump(mode="json"),
            "series": (
                series_context.model_dump(by_alias=True, mode="json")
                if series_context
                else None
            ),
        }
    )


@router.get("/{post_id}/series", name="post_series")
@limiter.limit(POSTS_RATE_LIMIT)
def post_series(
    request: Request,
    post_id: str,
    series: SeriesService = Depends(get_series_service),
):
    """Series context for a post, or ``null`` when it is not in a series."""
    context = ApiContext(request)
    with store_failure(context, "SERIES_FAILED", "Could not load the series."):
        series_context = series.get_series_context(post_id)
    context.log_success()
    if series_context is None:
        return api_success(None)
    return api_success(series_context.model_dump(by_alias=True, mode="json"))


@router.get("/{identifier}/related", name="post_related")
@limiter.limit(POSTS_RATE_LIMIT)
def post_related(
    request: Request,
    identifier: str,
    limit: int = Query(3, ge=1, le=12),
    posts: PostService = Depends(get_post_service),
):
    """Posts sharing a tag with this one, topped up from its category."""
    context = ApiContext(request)
    with store_failure(context, "RELATED_FAILED", "Could not load related posts."):
        post = posts.get_post(identifier)
        if post is None:
            raise _not_found(identifier)
        related = posts.get_related_posts(
            post.id, post.tags, post.category.value, limit=limit
        )
    context.log_success()
    return api_success([item.model_dump(mode="json") for item in related])
