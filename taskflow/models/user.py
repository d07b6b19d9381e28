"""User model definitions."""

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String

from taskflow.database import Base

DEFAULT_ROLE = "USER"


class User(BaseModel):
    """Represents an application user as the services see it."""

    id: str | None = None
    username: str
    # Always a password hash, never the clear-text password.
    password: str = Field(repr=False)
    role: str = DEFAULT_ROLE


class UserRecord(Base):
    """Relational row backing a User."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE)
