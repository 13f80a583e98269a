"""
Optional per-user rate limiting for chat endpoints.

Uses Redis when CHAT_RATE_LIMIT_PER_USER is set.
If not set or Redis unavailable, no limit is applied.
"""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)


def check_chat_rate_limit(
    user_id: str,
    redis_client: Optional[object],
    limit: Optional[int],
    window_seconds: int = 900,
) -> bool:
    """
    Check if ``user_id`` is within ``limit`` requests per ``window_seconds``.
    Returns True if allowed, False if rate limited.
    If redis_client or limit is None, always returns True.
    """
    if redis_client is None or limit is None or limit <= 0:
        return True
    key = f"chat:ratelimit:{user_id}"
    try:
        count = redis_client.incr(key)
        if count == 1:
            # window starts with the first request; retries do not extend it
            redis_client.expire(key, window_seconds)
        return count <= limit
    except Exception as e:
        logger.warning("Rate limit check failed, allowing request: %s", e)
        return True
