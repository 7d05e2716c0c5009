# =============================================================================
# Database Package
# =============================================================================
# Provides the async SQLAlchemy engine, session dependency, and ORM models.
#
# Key exports:
#   - async_session_factory: AsyncSession factory
#   - get_async_session: FastAPI dependency yielding one session per request
#   - Base: SQLAlchemy declarative base for ORM models
#   - PersonalData: ORM model for the `personaldata` table
# =============================================================================
