from __future__ import annotations

import os

import redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def get_redis_url() -> str:
    """`ADVENTURE_REDIS_URL`, then the conventional `REDIS_URL`, then localhost."""

    return os.environ.get("ADVENTURE_REDIS_URL") or os.environ.get("REDIS_URL") or DEFAULT_REDIS_URL


def create_redis() -> redis.Redis:
    # Session records are JSON text; decode to str on the way out.
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)
