"""Search API: results, suggestions and popular tags."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from folio.observability.logging import ApiContext
from folio.routers.common import store_failure, validation_message
from folio.schemas.api import ApiError, api_success
from folio.schemas.search import SearchQuery
from folio.security import SEARCH_RATE_LIMIT, limiter
from folio.services.search_service import SearchService, get_search_service

router = APIRouter(prefix="/api", tags=["search"])

SEARCH_MODES = ("search", "suggestions", "popular-tags")
SEARCH_PARAMS = ("q", "from", "to", "sort", "page", "pageSize")


def parse_search_query(request: Request) -> SearchQuery:
    """Validate the query string into a SearchQuery or raise a 400."""
    params = request.query_params
    raw: dict[str, object] = {
        key: params[key] for key in SEARCH_PARAMS if params.get(key) is not None
    }
    raw["tags"] = params.getlist("tags")
    try:
        return SearchQuery.model_validate(raw)
    except ValidationError as exc:
        raise ApiError("INVALID_QUERY", validation_message(exc)) from exc


@router.get("/search", name="search")
@limiter.limit(SEARCH_RATE_LIMIT)
def search(
    request: Request,
    mode: str = Query("search"),
    limit: int = Query(8, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
):
    """Search posts (``mode=search``), suggest terms or list popular tags."""
    context = ApiContext(request)
    if mode not in SEARCH_MODES:
        raise ApiError("BAD_MODE", f"Unsupported search mode: {mode}")

    query = parse_search_query(request) if mode == "search" else None

    with store_failure(context, "SEARCH_FAILED", "Search failed. Please try again."):
        if mode == "popular-tags":
            data = service.get_popular_tags(limit)
        elif mode == "suggestions":
            data = service.get_search_suggestions(request.query_params.get("q", ""))
        else:
            data = service.search_posts(query).model_dump(by_alias=True, mode="json")

    context.log_success()
    return api_success(data)
