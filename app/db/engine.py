# =============================================================================
# Database Engine & Session Management
# =============================================================================
#
# Async SQLAlchemy engine on top of asyncpg. FastAPI is async, so queries are
# awaited rather than run in a thread pool.
#
# SESSION LIFECYCLE:
# 1. FastAPI request arrives
# 2. `get_async_session` opens a session; `get_record_store` (app/api/deps.py)
#    wraps it in a SqlRecordStore
# 3. The record store issues its count/fetch queries through that session
# 4. Session is closed when the request completes
#
# The API is read-only: sessions never commit. On exception the (empty)
# transaction is rolled back and the error propagates to the caller.
# =============================================================================

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings

# ---------------------------------------------------------------------------
# Async Engine
# ---------------------------------------------------------------------------
# The engine manages a connection pool to PostgreSQL. No connection is opened
# until the first query, so importing this module never touches the network.
#
# - echo=settings.debug: log every SQL statement while debugging.
# - pool_size / max_overflow: persistent + burst connections per process.
# ---------------------------------------------------------------------------
async_engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# Session Factory
# ---------------------------------------------------------------------------
# expire_on_commit=False keeps loaded rows readable after the session ends;
# lazy refreshes are not possible outside the async context.
# ---------------------------------------------------------------------------
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)



async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Usage:
        async def get_record_store(session: AsyncSession = Depends(get_async_session)):
            ...

    The session is closed when the request completes. Nothing is committed;
    if an exception occurs, the transaction is rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
