import pathlib

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_engine(db_uri: str) -> AsyncEngine:
    return create_async_engine(db_uri, echo=False)


def create_sessionmaker(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine, class_=AsyncSession)


async def init_db(engine: AsyncEngine):
    # register the tables on Base.metadata before creating them
    from . import models  # noqa: F401

    url = engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        pathlib.Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
