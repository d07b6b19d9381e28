import logging
import uuid
from datetime import datetime, timedelta

from taskflow.core.errors import InvalidInputError, NotFoundError, UnauthorizedError
from taskflow.models.todo import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    Todo,
    TodoStatus,
    as_utc,
    utcnow,
)
from taskflow.repositories.base import TodoStore

logger = logging.getLogger(__name__)


def normalize_title(title: str | None) -> str:
    normalized = (title or "").strip()
    if not normalized:
        raise InvalidInputError("Title must not be blank.")
    if len(normalized) > MAX_TITLE_LENGTH:
        raise InvalidInputError(f"Title must be {MAX_TITLE_LENGTH} characters or fewer.")
    return normalized


def normalize_description(description: str | None) -> str | None:
    if description is None:
        return None
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidInputError(f"Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.")
    return description


def next_timestamp(previous: datetime) -> datetime:
    """Current time, nudged forward so it always lands after ``previous``."""
    now = utcnow()
    previous = as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class TodoService:
    """Todo CRUD where every call acts on behalf of an authenticated username."""

    def __init__(self, todo_store: TodoStore):
        self.todo_store = todo_store

    def create_todo(self, username: str, title: str, description: str | None = None) -> Todo:
        now = utcnow()
        todo = Todo(
            id=str(uuid.uuid4()),
            title=normalize_title(title),
            description=normalize_description(description),
            status=TodoStatus.PENDING,
            user_id=username,
            created_at=now,
            updated_at=now,
        )
        created = self.todo_store.save(todo)
        logger.info("User %s created todo %s.", username, created.id)
        return created

    def get_all_todos(self, username: str) -> list[Todo]:
        return [todo for todo in self.todo_store.find_all() if todo.user_id == username]

    def get_todo_by_id(self, username: str, todo_id: str) -> Todo:
        todo = self.todo_store.find_by_id(todo_id)
        if todo is None:
            raise NotFoundError("Todo not found.")
        if todo.user_id != username:
            logger.warning("User %s tried to access todo %s owned by someone else.", username, todo_id)
            raise UnauthorizedError("You do not have access to this todo.")
        return todo

    def update_todo(self, username: str, todo_id: str, title: str, description: str | None = None) -> Todo:
        todo = self.get_todo_by_id(username, todo_id)
        changes = {
            "title": normalize_title(title),
            "updated_at": next_timestamp(todo.updated_at),
        }
        if description is not None:
            changes["description"] = normalize_description(description)
        return self.todo_store.save(todo.model_copy(update=changes))

    def delete_todo(self, username: str, todo_id: str) -> None:
        self.get_todo_by_id(username, todo_id)
        self.todo_store.delete_by_id(todo_id)
        logger.info("User %s deleted todo %s.", username, todo_id)

    def toggle_todo(self, username: str, todo_id: str) -> Todo:
        todo = self.get_todo_by_id(username, todo_id)
        toggled = todo.model_copy(
            update={
                "status": todo.status.toggled(),
                "updated_at": next_timestamp(todo.updated_at),
            }
        )
        return self.todo_store.save(toggled)
