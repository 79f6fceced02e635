"""Create the orders table and its secondary index."""

import asyncio

from sqlalchemy.ext.asyncio import create_async_engine

from warranty_renewal.config import settings
from warranty_renewal.models import Base


async def create_tables():
    """Create all tables that do not exist yet."""
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    for name in Base.metadata.tables:
        print(f"  + Table: {name}")
    print("\nSchema ready!")


if __name__ == "__main__":
    asyncio.run(create_tables())
