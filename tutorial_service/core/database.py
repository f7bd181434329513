# DB connections

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.pool import NullPool
from tutorial_service.core.config import settings
from tutorial_service.models.base import Base
from tutorial_service.models import event, person  # noqa: F401  registers tables


def _engine_options(url: str) -> dict:
    # aiosqlite connections are bound to the loop that opened them
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {"pool_size": 20, "max_overflow": 0}


async_engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url)
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency for getting the session factory used by the managers"""
    return AsyncSessionLocal


async def init_models():
    """Create every mapped table that does not exist yet"""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models():
    """Drop every mapped table"""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def upsert(session: AsyncSession, model, values: dict):
    """
    Build an INSERT ... ON CONFLICT DO UPDATE for the session's dialect.

    Column stores treat every insert as an upsert; this reproduces that on
    PostgreSQL and SQLite.
    """
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite_insert(model).values(**values)
    else:
        raise ValueError(f"upsert is not supported for dialect '{dialect}'")

    key_columns = [column.name for column in model.__table__.primary_key.columns]
    payload = {
        name: stmt.excluded[name]
        for name in values
        if name not in key_columns
    }
    if not payload:
        return stmt.on_conflict_do_nothing(index_elements=key_columns)
    return stmt.on_conflict_do_update(index_elements=key_columns, set_=payload)
