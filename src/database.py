import ssl as _ssl
from collections.abc import AsyncGenerator
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.config import settings


def _asyncpg_url(url: str) -> tuple[str, dict]:
    """Convert a database URL for asyncpg compatibility.

    asyncpg does not accept ``sslmode`` as a query parameter; it expects
    ``ssl`` to be passed via ``connect_args``.  This helper strips
    ``sslmode`` from the URL and returns the cleaned URL plus any extra
    ``connect_args`` needed.
    """
    parts = urlsplit(url)
    qs = parse_qs(parts.query)
    connect_args: dict = {}

    if "sslmode" in qs:
        mode = qs.pop("sslmode")[0]
        if mode in ("require", "verify-ca", "verify-full"):
            connect_args["ssl"] = _ssl.create_default_context()
        new_query = urlencode(qs, doseq=True)
        url = urlunsplit(parts._replace(query=new_query))

    return url, connect_args


def build_engine(url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Create an async engine for *url*.

    Plain ``postgresql://`` / ``postgres://`` URLs are rewritten to the asyncpg
    driver.  Pool sizing only applies to PostgreSQL; other dialects (SQLite in
    the test suite) keep their default pool.
    """
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    if url.startswith("postgresql"):
        url, connect_args = _asyncpg_url(url)
        engine_kwargs.setdefault("pool_size", 5)
        engine_kwargs.setdefault("max_overflow", 10)
        engine_kwargs.setdefault("connect_args", connect_args)

    return create_async_engine(url, pool_pre_ping=True, **engine_kwargs)


def session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url)

AsyncSessionLocal: async_sessionmaker[AsyncSession] = session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session
