import time
import asyncio
import logging
from collections import deque
from typing import Callable, Iterable
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import jwt, JWTError
from schoolsafe.utils.security import ALGORITHM

logger = logging.getLogger(__name__)

class RateLimitMiddleware:
    """Sliding-window limiter for the credential endpoints.

    Each guarded path keeps its own window per caller, so a burst of failed
    logins does not also lock the caller out of registration.
    """

    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        key_func: Callable[[Request], str],
        include_path_prefixes: Iterable[str] = ("/api/auth/login",),
    ):
        self.app = app
        self.window = window_seconds
        self.max_calls = max_calls
        self.key_func = key_func
        self.include_paths = tuple(include_path_prefixes)

        self._hits: dict[tuple[str, str], deque[float]] = {}
        self._lock = asyncio.Lock()

    def _guarded_prefix(self, scope) -> str | None:
        if scope.get("method") != "POST":
            return None
        path = scope.get("path", "")
        return next((p for p in self.include_paths if path.startswith(p)), None)

    async def _retry_after(self, bucket: tuple[str, str]) -> int | None:
        """Record a hit; returns seconds to wait when the window is already full."""
        now = time.time()
        async with self._lock:
            hits = self._hits.setdefault(bucket, deque())
            while hits and hits[0] < now - self.window:
                hits.popleft()
            if len(hits) >= self.max_calls:
                return max(1, int(hits[0] + self.window - now))
            hits.append(now)
        return None

    async def __call__(self, scope, receive, send):
        prefix = self._guarded_prefix(scope) if scope["type"] == "http" else None
        if prefix is None:
            return await self.app(scope, receive, send)

        caller = self.key_func(Request(scope, receive=receive))
        retry_after = await self._retry_after((caller, prefix))
        if retry_after is None:
            return await self.app(scope, receive, send)

        logger.warning("rate limit hit for %s on %s", caller, prefix)
        resp = JSONResponse(
            status_code=429,
            content={"success": False, "message": "Too many requests, please try again later"},
            headers={"Retry-After": str(retry_after)},
        )
        return await resp(scope, receive, send)


def make_key_func(secret_key: str) -> Callable[[Request], str]:
    def _key(req: Request) -> str:
        auth = req.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            try:
                sub = jwt.decode(auth.split(" ", 1)[1].strip(), secret_key, algorithms=[ALGORITHM]).get("sub")
            except JWTError:
                sub = None
            if sub:
                return f"user:{sub}"
        return f"ip:{req.client.host if req.client else 'unknown'}"
    return _key
