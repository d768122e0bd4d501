import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.types import ASGIApp, Receive, Scope, Send

# ---------------------------------------------------------------------------
# Per-request context variable
# ---------------------------------------------------------------------------

query_count_var: ContextVar[int] = ContextVar("query_count", default=0)


def install_query_counter(engine) -> None:
    """
    Register a ``before_cursor_execute`` event listener on *engine* that
    increments the per-request ``query_count_var`` for every SQL statement.

    Called by ``catalog.database.create_engine`` for every engine it builds.
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


# ---------------------------------------------------------------------------
# Request counters
# ---------------------------------------------------------------------------

class RequestStats:
    """In-process request counters surfaced by the ``/metrics`` route."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._total = 0
        self._elapsed_ms = 0.0
        self._status_counts: dict[str, int] = {}

    def record(self, status: int, duration_ms: float) -> None:
        self._total += 1
        self._elapsed_ms += duration_ms
        key = str(status)
        self._status_counts[key] = self._status_counts.get(key, 0) + 1

    @property
    def snapshot(self) -> dict:
        server_faults = sum(
            count for status, count in self._status_counts.items() if status.startswith("5")
        )
        return {
            "total_requests": self._total,
            "server_faults": server_faults,
            "status_counts": dict(self._status_counts),
            "avg_response_time_ms": round(self._elapsed_ms / self._total, 2) if self._total else 0.0,
        }


# Module-level singleton shared across all requests.
request_stats = RequestStats()


# ---------------------------------------------------------------------------
# Middleware (pure ASGI, so ContextVar updates stay visible)
# ---------------------------------------------------------------------------

class TimingMiddleware:
    """
    Pure ASGI middleware that adds two diagnostic response headers:

    - ``X-Response-Time-Ms``: wall-clock time until the response starts.
    - ``X-Query-Count``: SQL statements executed during the request, counted
      via the engine event registered by ``install_query_counter``.  Always
      0 for the in-memory backend.

    Every HTTP response is also recorded in ``request_stats``.
    """

    def __init__(self, app: ASGIApp, stats: RequestStats = request_stats) -> None:
        self.app = app
        self.stats = stats

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Reset the per-request counter.
        query_count_var.set(0)
        start = time.perf_counter()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                headers.append((b"x-query-count", str(query_count_var.get()).encode()))
                message["headers"] = headers
                self.stats.record(message["status"], duration_ms)
            await send(message)

        await self.app(scope, receive, send_wrapper)
