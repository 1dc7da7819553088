"""Simple in-memory rate limiter for upload and analysis endpoints."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Sequence

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from atsboost.config import settings


@dataclass
class _RateLimitState:
    window_start: float
    count: int = 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a fixed-window per-IP rate limit to the configured path prefixes."""

    def __init__(
        self,
        app,
        path_prefixes: Sequence[str] | None = None,
        limit: int | None = None,
        window: int | None = None,
        enabled: bool | None = None,
    ) -> None:
        super().__init__(app)
        self._path_prefixes = tuple(path_prefixes or settings.rate_limit_paths)
        self._states: Dict[str, _RateLimitState] = {}
        self._limit = limit if limit is not None else settings.rate_limit_requests
        self._window = window if window is not None else settings.rate_limit_period
        self._enabled = settings.rate_limit_enabled if enabled is None else enabled

    def _prune(self, now: float) -> None:
        expired = [host for host, state in self._states.items() if now - state.window_start >= self._window]
        for host in expired:
            del self._states[host]

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        if not request.url.path.startswith(self._path_prefixes):
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"
        now = time.time()
        self._prune(now)
        state = self._states.get(client_host)

        if state is None or now - state.window_start >= self._window:
            state = _RateLimitState(window_start=now, count=0)
            self._states[client_host] = state

        state.count += 1

        if state.count > self._limit:
            retry_after = max(1, int(self._window - (now - state.window_start)))
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "message": "Rate limit exceeded, please try again later",
                    "limit": self._limit,
                    "period_seconds": self._window,
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
