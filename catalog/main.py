import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog import __version__
from catalog.cache import CachedRepository, cache
from catalog.config import settings
from catalog.logging_config import setup_logging
from catalog.middleware import TimingMiddleware
from catalog.repositories import (
    InMemoryRepository,
    Repository,
    RepositoryRef,
    SharedRepository,
    SqlRepository,
    TracedRepository,
)
from catalog.repositories.memory import DEFAULT_CATALOG
from catalog.routers import metrics, services
from catalog.schemas import HealthResponse

logger = logging.getLogger(__name__)

APP_VERSION = __version__

BACKENDS = ("memory", "sql")


def build_repository(backend: str | None = None) -> Repository:
    """
    Build the repository selected by *backend* (default
    ``settings.REPOSITORY_BACKEND``).  No I/O happens here; the SQL backend
    connects on its first query.
    """
    backend = (backend or settings.REPOSITORY_BACKEND).lower()
    if backend == "memory":
        return InMemoryRepository(DEFAULT_CATALOG)
    if backend == "sql":
        return SqlRepository.from_url(settings.DATABASE_URL)
    raise ValueError(f"unknown repository backend {backend!r}, expected one of {BACKENDS}")


def create_app(repository: Repository | None = None, backend: str | None = None) -> FastAPI:
    """
    Build the catalog application.

    A *repository* passed in is only borrowed: the application forwards to
    it but never closes it.  Otherwise one is built from settings (or
    *backend*), optionally fronted by the Redis cache, and closed on
    shutdown.
    """
    if repository is not None:
        backend_name = "custom"
        inner = RepositoryRef(repository)
    else:
        backend_name = (backend or settings.REPOSITORY_BACKEND).lower()
        inner = build_repository(backend_name)
        if settings.REDIS_URL:
            inner = CachedRepository(inner, cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if settings.REDIS_URL and repository is None:
            try:
                await cache.connect()
            except Exception as exc:
                logger.warning("Cache unavailable, serving without it: %s", exc)
        logger.info("Service catalog started with %s backend", backend_name)
        yield
        # Shutdown
        await app.state.repository.close()

    app = FastAPI(
        title="Service Catalog API",
        description="Read-only catalog of services backed by an in-memory or SQL repository",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.repository = SharedRepository(TracedRepository(inner))
    app.state.backend = backend_name

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(services.router)
    app.include_router(metrics.router)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", version=APP_VERSION, backend=app.state.backend)

    return app


setup_logging(settings.LOG_LEVEL)
app = create_app()
