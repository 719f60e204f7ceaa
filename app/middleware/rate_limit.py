"""Fixed-window request rate limiting, used as a FastAPI dependency."""

import math
import time
from typing import Callable, Optional, Protocol

import jwt
from fastapi import HTTPException, Request, Response, status

from app.config.redis import get_redis_client
from app.settings import settings
from app.utils.jwt_manager import decode_access_token


class WindowStore(Protocol):
    async def hit(self, key: str, window: int) -> tuple[int, int]:
        """Counts one request for `key`; returns (count, seconds until reset)."""
        ...


class MemoryWindowStore:
    """
    Per-process counters. Used when no REDIS_URL is configured.

    Once `max_keys` keys are tracked, adding a new key first drops every
    window that has already expired.
    """

    def __init__(self, max_keys: int = 10_000) -> None:
        self.max_keys = max_keys
        # key -> (window end on the monotonic clock, count)
        self._hits: dict[str, tuple[float, int]] = {}

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (ends_at, _) in self._hits.items() if ends_at <= now]
        for key in expired:
            del self._hits[key]

    async def hit(self, key: str, window: int) -> tuple[int, int]:
        now = time.monotonic()
        if key not in self._hits and len(self._hits) >= self.max_keys:
            self._sweep(now)

        ends_at, count = self._hits.get(key, (now, 0))
        if now >= ends_at:
            ends_at, count = now + window, 0
        count += 1
        self._hits[key] = (ends_at, count)
        return count, max(0, math.ceil(ends_at - now))

    def reset(self) -> None:
        self._hits.clear()


class RedisWindowStore:
    """Counters shared by every worker through Redis INCR + EXPIRE."""

    def __init__(self, client) -> None:
        self._client = client

    async def hit(self, key: str, window: int) -> tuple[int, int]:
        count = await self._client.incr(key)
        if count == 1:
            await self._client.expire(key, window)
        ttl = await self._client.ttl(key)
        if ttl < 0:
            # key lost its expiry (e.g. crash between INCR and EXPIRE)
            await self._client.expire(key, window)
            ttl = window
        return count, ttl


_store: Optional[WindowStore] = None


def get_window_store() -> WindowStore:
    global _store
    if _store is None:
        if settings.REDIS_URL is not None:
            _store = RedisWindowStore(get_redis_client())
        else:
            _store = MemoryWindowStore()
    return _store


def set_window_store(store: Optional[WindowStore]) -> None:
    global _store
    _store = store


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def ip_key(request: Request) -> str:
    return f"ip:{client_ip(request)}"


def user_or_ip_key(request: Request) -> str:
    """
    Keys by the user id of a valid bearer token, falling back to the client IP.
    """
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = decode_access_token(token)
            return f"uid:{payload['sub']}"
        except jwt.InvalidTokenError:
            pass
    return ip_key(request)


class RateLimiter:
    """
    Dependency enforcing `limit` requests per `window` seconds for each key.
    Adds draft-7 RateLimit headers to responses and raises 429 when exceeded.
    """

    def __init__(
        self,
        name: str,
        limit: Callable[[], int],
        window: Callable[[], int],
        message: str,
        key_func: Callable[[Request], str] = ip_key,
    ) -> None:
        self.name = name
        self._limit = limit
        self._window = window
        self.message = message
        self.key_func = key_func

    async def __call__(self, request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = self._limit()
        window = self._window()
        key = f"ratelimit:{self.name}:{self.key_func(request)}"
        count, reset = await get_window_store().hit(key, window)

        headers = {
            "RateLimit-Policy": f"{limit};w={window}",
            "RateLimit": f"limit={limit}, remaining={max(0, limit - count)}, reset={reset}",
        }
        if count > limit:
            headers["Retry-After"] = str(reset)
            raise HTTPException(
                status.HTTP_429_TOO_MANY_REQUESTS, self.message, headers=headers
            )
        response.headers.update(headers)


global_limiter = RateLimiter(
    name="global",
    limit=lambda: settings.GLOBAL_RATE_LIMIT,
    window=lambda: settings.GLOBAL_RATE_WINDOW_SECONDS,
    message="Muitas requisições. Tente novamente em instantes.",
)

auth_limiter = RateLimiter(
    name="auth",
    limit=lambda: settings.AUTH_RATE_LIMIT,
    window=lambda: settings.AUTH_RATE_WINDOW_SECONDS,
    message="Muitas tentativas de autenticação. Aguarde alguns minutos.",
)

user_limiter = RateLimiter(
    name="user",
    limit=lambda: settings.USER_RATE_LIMIT,
    window=lambda: settings.USER_RATE_WINDOW_SECONDS,
    message="Você fez muitas requisições. Reduza o ritmo.",
    key_func=user_or_ip_key,
)
