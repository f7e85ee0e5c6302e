from collections import defaultdict
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


CALENDAR_PATH_PREFIX = "/calendar/"


class CalendarRateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window, in-memory rate limiter for GET /calendar/... requests."""

    def __init__(
        self, app, requests_per_window: int = 30, window_seconds: int = 60
    ) -> None:
        super().__init__(app)
        self.max_requests = max(1, requests_per_window)
        self.window_seconds = max(1, window_seconds)
        # Request timestamps per client key, oldest first.
        self._client_buckets: dict[str, deque[float]] = defaultdict(deque)
        self._lock = RLock()
        self._next_sweep = 0.0

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method != "GET" or not request.url.path.startswith(
            CALENDAR_PATH_PREFIX
        ):
            return await call_next(request)

        retry_after = self._register_request(self._client_key(request), monotonic())
        if retry_after is not None:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too Many Requests"},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    def _register_request(self, client_key: str, now: float) -> int | None:
        """Count a request, or return the Retry-After seconds when over the limit."""

        with self._lock:
            cutoff = now - self.window_seconds
            if now >= self._next_sweep:
                self._drop_idle_clients(cutoff)
                self._next_sweep = now + self.window_seconds

            bucket = self._client_buckets[client_key]
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) >= self.max_requests:
                return max(1, int(self.window_seconds - (now - bucket[0])))

            bucket.append(now)
            return None

    def _drop_idle_clients(self, cutoff: float) -> None:
        # Keys with no request inside the window; caller holds the lock.
        idle_keys = [
            key
            for key, bucket in self._client_buckets.items()
            if not bucket or bucket[-1] <= cutoff
        ]
        for key in idle_keys:
            del self._client_buckets[key]

    @staticmethod
    def _client_key(request: Request) -> str:
        # First hop of X-Forwarded-For when behind a proxy.
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip() or "unknown"

        if request.client and request.client.host:
            return request.client.host

        return "unknown"
