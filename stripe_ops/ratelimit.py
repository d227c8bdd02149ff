from __future__ import annotations

import hashlib

import redis
from fastapi import HTTPException, Request

from stripe_ops.config import settings
from stripe_ops.logging_config import get_logger
from stripe_ops.redis_client import redis_client

logger = get_logger(__name__)

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

# forwarded headers are applied by uvicorn only for trusted proxies (see main.serve)
def client_ip(request: Request) -> str:
    return (request.client.host if request.client else "unknown").strip()

# fixed-window limiter using redis INCR + EXPIRE
def rate_limit(name: str, limit_per_window: int, window_seconds: int):
    async def _dep(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = client_ip(request)
        key = f"rl:{name}:{_hash(ip)}"

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()
        except redis.RedisError as e:
            # fail-open if redis is down
            logger.warning("rate limiter unavailable", limiter=name, error=str(e))
            return

        if int(count) > int(limit_per_window):
            logger.warning("rate limit exceeded", limiter=name, ip_hash=_hash(ip), count=int(count))
            raise HTTPException(status_code=429, detail="rate_limited")

    return _dep
