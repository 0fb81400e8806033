from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from blog_platform.config import settings
from blog_platform.errors import StorageError
from blog_platform.middleware import install_query_counter

# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Register the per-request SQL query counter on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


_AFTER_COMMIT_KEY = "after_commit"


def after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """
    Schedule *callback* to run once the request transaction commits.

    Registering the same callback twice runs it once.  Nothing runs when
    the transaction rolls back.
    """
    callbacks = session.info.setdefault(_AFTER_COMMIT_KEY, [])
    if callback not in callbacks:
        callbacks.append(callback)


async def run_after_commit(session: AsyncSession) -> None:
    for callback in session.info.pop(_AFTER_COMMIT_KEY, []):
        await callback()


async def get_db():
    """
    One session and one transaction per request.

    Store failures are rolled back and re-raised as ``StorageError`` so
    the API surfaces them uniformly; domain errors pass through as is.
    Callbacks registered with :func:`after_commit` (cache invalidation)
    run only after a successful commit.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
            await run_after_commit(session)
        except SQLAlchemyError as exc:
            await session.rollback()
            raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
        except Exception:
            await session.rollback()
            raise
