from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base holding the metadata for every table of the service."""


# PUBLIC_INTERFACE
class TaskModel(Base):
    """
    ORM mapping of the 'tasks' table.

    Fields:
    - id: Auto-assigned integer primary key
    - title: Non-empty title (trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag, false on creation
    - created_at: UTC creation timestamp, never changed afterwards
    - updated_at: UTC timestamp of the last write
    """

    __tablename__ = "tasks"
    # ids of deleted rows are never handed out again, as with a Postgres serial
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<TaskModel(id={self.id}, title={self.title!r}, completed={self.completed})>"


# PUBLIC_INTERFACE
class UserModel(Base):
    """
    ORM mapping of the 'users' table.

    No endpoint reads or writes users yet; the table is created together with
    'tasks' so the schema is in place for later use.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    settings: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id!r}, email={self.email!r})>"
