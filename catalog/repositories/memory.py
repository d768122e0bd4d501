"""
In-memory repository: a fixed set of services held in process.

Records are copied into a tuple at construction and never change, so the
repository is safe to share between concurrent requests without locking.
Lookups are a linear scan; the catalog is expected to be small.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from catalog.errors import Missing
from catalog.schemas import Service

logger = logging.getLogger(__name__)

# Catalog served when no persistent store is configured.
DEFAULT_CATALOG: tuple[Service, ...] = (
    Service(id=1, name="Locate Us", description="Awesomeness is HERE!", versions=3),
    Service(id=2, name="Contact Us", description="How can I find you?!", versions=2),
)


class InMemoryRepository:
    def __init__(self, services: Iterable[Service] = ()) -> None:
        self._services: tuple[Service, ...] = tuple(services)
        seen: set[int] = set()
        for service in self._services:
            if service.id in seen:
                raise ValueError(f"duplicate service id: {service.id}")
            seen.add(service.id)

    async def list(self) -> list[Service]:
        logger.debug("Listing %d in-memory service(s)", len(self._services))
        return list(self._services)

    async def get(self, service_id: int) -> Service:
        logger.debug("Looking up in-memory service id=%s", service_id)
        for service in self._services:
            if service.id == service_id:
                return service
        raise Missing(service_id)

    def __repr__(self) -> str:
        return f"InMemoryRepository({len(self._services)} services)"
