# Repositories package.
#
# A repository exposes exactly two coroutine methods over the service
# catalog, ``list()`` and ``get(service_id)``, and reports failures only
# through the ``catalog.errors`` taxonomy:
#
#   base   : the Repository protocol and forwarding wrappers
#             (RepositoryRef, BoxedRepository, SharedRepository,
#             TracedRepository)
#   memory : InMemoryRepository, fixed records held in process
#   sql    : SqlRepository, records read through an async SQLAlchemy engine
#
# Callers depend on ``Repository`` only, never on a concrete backend.
from catalog.repositories.base import (
    BoxedRepository,
    Repository,
    RepositoryRef,
    SharedRepository,
    TracedRepository,
    close_repository,
)
from catalog.repositories.memory import InMemoryRepository
from catalog.repositories.sql import SqlRepository

__all__ = [
    "BoxedRepository",
    "InMemoryRepository",
    "Repository",
    "RepositoryRef",
    "SharedRepository",
    "SqlRepository",
    "TracedRepository",
    "close_repository",
]
