from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from habitkeeper.core.config import settings

# Schemes handed out by hosting providers, mapped to the asyncpg driver
ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def to_async_url(url: str) -> str:
    """Rewrite a plain Postgres URL to use the asyncpg driver.

    URLs that already name a driver (``sqlite+aiosqlite://`` in tests) pass
    through unchanged.
    """
    for scheme, async_scheme in ASYNC_SCHEMES.items():
        if url.startswith(scheme):
            return async_scheme + url[len(scheme):]
    return url


engine = create_async_engine(
    to_async_url(settings.database_url),
    echo=settings.database_echo,
    pool_pre_ping=True,
)

# Sessions keep loaded attributes after commit so endpoints can serialize them
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session, rolling back if the request fails."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
