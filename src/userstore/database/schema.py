from sqlalchemy.ext.asyncio import AsyncEngine

from .base import Base
from userstore import models  # noqa: F401 - registers the tables on Base.metadata


async def create_schema(engine: AsyncEngine) -> None:
    """Create the tables that do not exist yet (tests and local bootstrap only)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
