# =============================================================================
# Database Models — SQLAlchemy ORM
# =============================================================================
#
# SCHEMA OVERVIEW:
#
# ┌──────────────────────────┐
# │  personaldata            │
# ├──────────────────────────┤
# │ id (PK, int)             │
# │ first_name (text)        │
# │ last_name (text)         │
# │ email (text)             │
# │ gender (text)            │
# │ ip_address (text)        │
# └──────────────────────────┘
#
# One flat table, no relationships. This service only reads from it; the
# schema is owned elsewhere (seed script aside) and never migrated here.
# =============================================================================

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class for all ORM models."""

    pass


class PersonalData(Base):
    """One personal record. Rows are immutable from this service's view."""

    __tablename__ = "personaldata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(64), nullable=False)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<PersonalData id={self.id} email={self.email!r}>"
