"""Pydantic schemas for posts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Post category."""

    MATHEMATICS = "Mathematics"
    DEVELOPMENT = "Development"
    DEVOPS = "DevOps"
    COMPUTER_SCIENCE = "Computer Science"
    CRYPTO = "Crypto"
    RESEARCH = "Research"
    GENERAL = "General"
    DRAFT = "Draft"


class PostOut(BaseModel):
    """Post as returned by the API (raw content, never rendered)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str | None = None
    title: str
    excerpt: str = ""
    content: str = ""
    category: Category
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value: list[str] | None) -> list[str]:
        return value or []

    @property
    def identifier(self) -> str:
        """Public identifier: the slug when set, else the id."""
        return self.slug or self.id


class PostOption(BaseModel):
    """Lightweight post reference for pickers."""

    id: str
    slug: str | None = None
    title: str
    created_at: datetime
