"""Database seeder for the service catalog."""
import asyncio
import argparse
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import Base, create_engine
from catalog.models import ServiceRecord
from catalog.repositories.memory import DEFAULT_CATALOG


async def seed(url: str | None = None, extra: int = 0, reset: bool = False):
    engine = create_engine(url)
    print(f"Seeding {engine.url.render_as_string(hide_password=True)}: "
          f"{len(DEFAULT_CATALOG)} default + {extra} generated services")
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with sessions() as session:
        for service in DEFAULT_CATALOG:
            await session.merge(ServiceRecord(**service.model_dump()))

        next_id = max(s.id for s in DEFAULT_CATALOG) + 1
        for i in range(extra):
            service_id = next_id + i
            await session.merge(ServiceRecord(
                id=service_id,
                name=f"Service {service_id}",
                description=f"Generated service number {service_id}.",
                versions=service_id % 7 + 1,
            ))
        await session.commit()

    await engine.dispose()
    elapsed = time.perf_counter() - start
    print(f"Seeding complete in {elapsed:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the service catalog database")
    parser.add_argument("--url", default=None, help="Database URL (defaults to DATABASE_URL)")
    parser.add_argument("--extra", type=int, default=0, help="Generated services to add")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate the table first")
    args = parser.parse_args()
    asyncio.run(seed(args.url, args.extra, args.reset))


if __name__ == "__main__":
    main()
