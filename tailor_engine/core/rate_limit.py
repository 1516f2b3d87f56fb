from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from tailor_engine.core.config import settings

limiter = Limiter(key_func=get_remote_address)


def rate_limit(limit: str | None = None):
    """Limit a route per client address.

    Analysis routes pass ``settings.analyze_rate_limit``; without a limit the
    shared ``settings.rate_limit`` applies.
    """
    if not settings.rate_limit_enabled:
        return _unlimited
    return limiter.limit(limit or settings.rate_limit)


def _unlimited(func):
    return func
