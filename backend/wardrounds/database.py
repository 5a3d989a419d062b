from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from wardrounds.config import Settings

Base = declarative_base()


def build_engine(settings: Settings, **kwargs) -> AsyncEngine:
    """Create the async engine shared by request handlers and the notification worker."""
    if settings.sqlalchemy_url.startswith("mysql"):
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 10)
        kwargs.setdefault("pool_recycle", 180)
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(
        settings.sqlalchemy_url,
        echo=settings.environment == "development",
        **kwargs,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def get_db(request: Request):
    """FastAPI dependency yielding a session from the app's own session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
