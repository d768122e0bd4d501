from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from catalog.config import settings
from catalog.middleware import install_query_counter


class Base(DeclarativeBase):
    pass


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """
    Build the async engine (and its connection pool) for *url*.

    No connection is opened here; the pool connects on first checkout, so
    an unreachable database only surfaces when a query is issued.  The
    per-request SQL query counter is registered on every engine built
    through this helper.
    """
    kwargs.setdefault("echo", settings.DEBUG)
    kwargs.setdefault("pool_pre_ping", True)
    engine = create_async_engine(url or settings.DATABASE_URL, **kwargs)
    install_query_counter(engine)
    return engine
