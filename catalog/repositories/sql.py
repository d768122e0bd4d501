"""
SQL repository: services read through an async SQLAlchemy engine.

Design notes
------------
- The engine owns the connection pool.  Building the repository (or the
  engine, via ``from_url``) opens no connection; an unreachable database
  only shows up when ``list`` or ``get`` runs, as ``ServerError``.
- Every failure raised while talking to the database or decoding a row is
  chained into ``ServerError``.  ``get`` raises ``Missing`` only after the
  query has completed and returned no row, on a separate path from the
  failure handling, so "not found" and "could not ask" never collapse into
  the same error.
- Sessions are opened with ``async with`` so their pooled connection is
  returned on every exit path, including task cancellation
  (``asyncio.CancelledError`` is not an ``Exception`` and is never
  translated).
- Rows are validated into ``Service``; a row breaking the record
  invariants (empty name, negative counts) is a decode failure.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from catalog.database import create_engine
from catalog.errors import Missing, ServerError
from catalog.models import ServiceRecord
from catalog.schemas import MAX_SERVICE_ID, Service

logger = logging.getLogger(__name__)


class SqlRepository:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessions = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> SqlRepository:
        """Build a repository with its own engine for *url* (no connection is made)."""
        return cls(create_engine(url, **engine_kwargs))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def list(self) -> list[Service]:
        # ORDER BY id keeps the order consistent between calls; callers
        # must not rely on it.
        q = select(ServiceRecord).order_by(ServiceRecord.id)
        try:
            async with self._sessions() as session:
                result = await session.execute(q)
                return [_decode(record) for record in result.scalars().all()]
        except Exception as exc:
            logger.error("Listing services failed: %s", exc, exc_info=True)
            raise ServerError("could not list services") from exc

    async def get(self, service_id: int) -> Service:
        # No stored row can carry an id outside the column range; binding one
        # would fail in the driver rather than return no row.
        if not 0 <= service_id <= MAX_SERVICE_ID:
            logger.debug("Service id=%s is outside the storable range", service_id)
            raise Missing(service_id)

        q = select(ServiceRecord).where(ServiceRecord.id == service_id)
        try:
            async with self._sessions() as session:
                result = await session.execute(q)
                record = result.scalar_one_or_none()
                service = None if record is None else _decode(record)
        except Exception as exc:
            logger.error("Fetching service id=%s failed: %s", service_id, exc, exc_info=True)
            raise ServerError(f"could not fetch service id={service_id}") from exc

        if service is None:
            logger.debug("No service with id=%s", service_id)
            raise Missing(service_id)
        return service

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self._engine.dispose()

    def __repr__(self) -> str:
        return f"SqlRepository({self._engine.url.render_as_string(hide_password=True)!r})"


def _decode(record: ServiceRecord) -> Service:
    return Service.model_validate(record)
