"""Todo model definitions."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from taskflow.database import Base

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 1000


class TodoStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"

    def toggled(self) -> "TodoStatus":
        if self is TodoStatus.PENDING:
            return TodoStatus.COMPLETED
        return TodoStatus.PENDING


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Todo(BaseModel):
    """A todo item; serialized with camelCase keys (userId, createdAt, updatedAt)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    status: TodoStatus = TodoStatus.PENDING
    user_id: str | None = None
    created_at: datetime
    updated_at: datetime


class TodoRecord(Base):
    """Relational row backing a Todo. The status is kept as a completed flag."""
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(MAX_TITLE_LENGTH), nullable=False)
    description = Column(String(MAX_DESCRIPTION_LENGTH))
    completed = Column(Boolean, nullable=False, default=False)
    user_id = Column(String(255), index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
