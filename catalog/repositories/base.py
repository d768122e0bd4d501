"""
Repository protocol and forwarding wrappers.

Design notes
------------
- ``Repository`` is a structural protocol: any object with coroutine
  methods ``list()`` and ``get(service_id)`` that raise only
  ``Missing`` / ``ServerError`` qualifies, whether or not it inherits
  from anything here.
- The wrappers hold a repository under a particular ownership discipline
  and satisfy the protocol by delegating every call unchanged.  They add
  no semantics of their own; results and raised exceptions are exactly
  those of the innermost repository.  ``TracedRepository`` additionally
  logs each call.
- Ownership only matters for ``close()``: a reference never closes what
  it holds, a box closes it, and a shared handle closes it when the last
  handle is closed.
"""
from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

from catalog.schemas import Service

logger = logging.getLogger(__name__)


@runtime_checkable
class Repository(Protocol):
    """Read-only access to the service catalog."""

    async def list(self) -> list[Service]:
        """Return every service.  Raises ``ServerError`` if the backend is unreachable."""
        ...

    async def get(self, service_id: int) -> Service:
        """
        Return the service identified by *service_id*.

        Raises ``Missing`` when no such record exists and ``ServerError``
        on any other backend failure.
        """
        ...


async def close_repository(repository: object) -> None:
    """Release *repository*'s resources if it has any to release."""
    close = getattr(repository, "close", None)
    if close is not None:
        await close()


# ---------------------------------------------------------------------------
# Forwarding wrappers
# ---------------------------------------------------------------------------

class _ForwardingRepository:
    def __init__(self, inner: Repository) -> None:
        self._inner = inner

    @property
    def inner(self) -> Repository:
        return self._inner

    async def list(self) -> list[Service]:
        return await self._inner.list()

    async def get(self, service_id: int) -> Service:
        return await self._inner.get(service_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._inner!r})"


class RepositoryRef(_ForwardingRepository):
    """A borrowed reference.  Closing it leaves the referenced repository open."""

    async def close(self) -> None:
        return None


class BoxedRepository(_ForwardingRepository):
    """Exclusively owns the held repository and closes it on ``close()``."""

    def __init__(self, inner: Repository) -> None:
        super().__init__(inner)
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await close_repository(self._inner)

    async def __aenter__(self) -> BoxedRepository:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class _ShareCount:
    __slots__ = ("handles",)

    def __init__(self) -> None:
        self.handles = 1


class SharedRepository(_ForwardingRepository):
    """
    A shared handle to a repository.

    ``share()`` returns another handle to the same underlying repository.
    Each handle is closed independently; the underlying repository is
    closed once every handle has been closed.
    """

    def __init__(self, inner: Repository, _count: _ShareCount | None = None) -> None:
        super().__init__(inner)
        self._count = _count or _ShareCount()
        self._closed = False

    @property
    def handle_count(self) -> int:
        return self._count.handles

    def share(self) -> SharedRepository:
        self._count.handles += 1
        return SharedRepository(self._inner, self._count)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._count.handles -= 1
        if self._count.handles == 0:
            logger.debug("Last handle closed, releasing %r", self._inner)
            await close_repository(self._inner)


class TracedRepository(_ForwardingRepository):
    """Logs every call with its outcome and duration, then returns the inner result unchanged."""

    async def list(self) -> list[Service]:
        start = time.perf_counter()
        try:
            services = await self._inner.list()
        except Exception as exc:
            self._log("list()", start, type(exc).__name__)
            raise
        self._log("list()", start, f"{len(services)} service(s)")
        return services

    async def get(self, service_id: int) -> Service:
        start = time.perf_counter()
        try:
            service = await self._inner.get(service_id)
        except Exception as exc:
            self._log(f"get({service_id})", start, type(exc).__name__)
            raise
        self._log(f"get({service_id})", start, "ok")
        return service

    async def close(self) -> None:
        await close_repository(self._inner)

    def _log(self, call: str, start: float, outcome: str) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s.%s -> %s in %.2fms", _backend_name(self._inner), call, outcome, elapsed_ms)


def _backend_name(repository: object) -> str:
    while isinstance(repository, _ForwardingRepository):
        repository = repository.inner
    return type(repository).__name__
