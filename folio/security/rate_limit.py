"""Shared slowapi limiter keyed on the client address."""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from folio.config import settings

SEARCH_RATE_LIMIT = "60/minute"
POSTS_RATE_LIMIT = "120/minute"

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
