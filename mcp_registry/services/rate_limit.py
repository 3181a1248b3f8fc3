from __future__ import annotations
import time
from dataclasses import dataclass

import redis.asyncio as redis
from fastapi import Request

@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_seconds: int

class TokenRateLimiter:
    """Fixed-window counter in Redis, shared by every API worker."""

    def __init__(self, redis_url: str):
        self.r = redis.from_url(redis_url, decode_responses=True)

    async def allow(self, *, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = int(time.time())
        window = now // window_seconds
        rkey = f"rl:{key}:{window}"

        # INCR with expiry
        val = await self.r.incr(rkey)
        if val == 1:
            await self.r.expire(rkey, window_seconds)

        remaining = max(0, limit - val)
        reset = window_seconds - (now % window_seconds)
        return RateLimitResult(allowed=val <= limit, remaining=remaining, reset_seconds=reset)


def get_rate_limiter(request: Request) -> TokenRateLimiter:
    # Created once at startup (reuses the Redis pool)
    return request.app.state.rate_limiter


def client_ip(request: Request) -> str:
    """
    Prefer headers set by our own proxy; X-Forwarded-For is client-controlled
    and only used as a fallback for local setups.
    """
    trusted = request.headers.get("x-real-ip") or request.headers.get("cf-connecting-ip")
    if trusted:
        return trusted
    forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.client.host if request.client else "unknown"
