"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Two tables only:

- accounts: username + password hash, the identity a token points at
- tasks: owned by exactly one account; owner_id is part of every query

Column types stay portable (Integer ids, Text, Boolean) so the same models
run on PostgreSQL in production and SQLite in tests.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


USERNAME_MAX_LENGTH = 64
TITLE_MAX_LENGTH = 500


class Account(Base):
    """A registered user.

    Learn: The id is the only thing a token carries. It never changes and
    is never reused after deletion, so a token stays bound to the same
    account for its whole life. Nothing but deletion mutates a row.
    Deleting the account removes its tasks through ON DELETE CASCADE.
    """

    __tablename__ = "accounts"
    # SQLite otherwise hands a deleted max id to the next insert.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH), unique=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # Legacy cached token column. Never read by the auth gate.
    token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} username={self.username!r}>"


class Task(Base):
    """A to-do item owned by one account."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_owner", "owner_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )
