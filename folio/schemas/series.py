"""Pydantic schemas for series navigation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SeriesMembershipOut(BaseModel):
    """One ``post_series_items`` row."""

    model_config = ConfigDict(from_attributes=True)

    post_id: str
    series_slug: str
    series_title: str
    position: int | None = None


class SeriesNeighbor(BaseModel):
    """Reference to the previous/next post of a series."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    post_id: str
    title: str
    position: int | None = None


class SeriesContext(BaseModel):
    """Where a post sits in its series. ``index`` is 1-based."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slug: str
    title: str
    total: int
    index: int
    previous: SeriesNeighbor | None = None
    next: SeriesNeighbor | None = None
