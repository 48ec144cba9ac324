"""Database engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from partnerconnector.config.settings import settings


def async_database_url(url: str) -> str:
    """Use the asyncpg driver for plain postgresql:// URLs."""
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def create_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create async engine for the configured database."""
    return create_async_engine(
        async_database_url(url or settings.database_url),
        echo=settings.database_echo if echo is None else echo,
        pool_pre_ping=True,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
