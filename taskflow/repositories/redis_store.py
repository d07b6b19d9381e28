"""Redis backed stores.

Documents are JSON strings. Users get a secondary username -> id key so lookups
by username never scan; todos are listed through a set holding every todo id.
The client must be created with ``decode_responses=True``.
"""

import logging
import uuid
from contextlib import contextmanager

from redis import Redis
from redis.exceptions import RedisError

from taskflow.core.errors import ConflictError, StorageUnavailableError
from taskflow.models.todo import Todo
from taskflow.models.user import User
from taskflow.repositories.base import TodoStore, UserStore

logger = logging.getLogger(__name__)


class _RedisStore:
    def __init__(self, client: Redis, key_prefix: str = "taskflow"):
        self.client = client
        self.key_prefix = key_prefix

    @contextmanager
    def guard(self):
        try:
            yield
        except RedisError as exc:
            logger.exception("Redis operation failed in %s.", type(self).__name__)
            raise StorageUnavailableError() from exc


class RedisUserStore(_RedisStore, UserStore):
    def _user_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:users:{user_id}"

    def _username_key(self, username: str) -> str:
        return f"{self.key_prefix}:users:username:{username}"

    def save(self, user: User) -> User:
        if not user.id:
            user = user.model_copy(update={"id": str(uuid.uuid4())})

        with self.guard():
            index_key = self._username_key(user.username)
            # SET NX makes the username claim atomic across concurrent registrations.
            if not self.client.set(index_key, user.id, nx=True):
                owner_id = self.client.get(index_key)
                if owner_id != user.id:
                    raise ConflictError(f"Username {user.username} already exists.")
            self.client.set(self._user_key(user.id), user.model_dump_json())
        return user

    def find_by_id(self, user_id: str) -> User | None:
        with self.guard():
            raw = self.client.get(self._user_key(user_id))
        if raw is None:
            return None
        return User.model_validate_json(raw)

    def find_by_username(self, username: str) -> User | None:
        with self.guard():
            user_id = self.client.get(self._username_key(username))
        if user_id is None:
            return None
        user = self.find_by_id(user_id)
        if user is None or user.username != username:
            return None
        return user

    def delete_by_id(self, user_id: str) -> None:
        user = self.find_by_id(user_id)
        if user is None:
            return
        with self.guard():
            pipe = self.client.pipeline()
            pipe.delete(self._user_key(user_id))
            pipe.delete(self._username_key(user.username))
            pipe.execute()


class RedisTodoStore(_RedisStore, TodoStore):
    @property
    def _index_key(self) -> str:
        return f"{self.key_prefix}:todos"

    def _todo_key(self, todo_id: str) -> str:
        return f"{self.key_prefix}:todos:{todo_id}"

    def save(self, todo: Todo) -> Todo:
        key = self._todo_key(todo.id)
        with self.guard():
            existing = self.client.get(key)
            if existing is not None:
                stored = Todo.model_validate_json(existing)
                todo = todo.model_copy(update={"created_at": stored.created_at})

            pipe = self.client.pipeline()
            pipe.set(key, todo.model_dump_json())
            pipe.sadd(self._index_key, todo.id)
            pipe.execute()
        return todo

    def find_by_id(self, todo_id: str) -> Todo | None:
        with self.guard():
            raw = self.client.get(self._todo_key(todo_id))
        if raw is None:
            return None
        return Todo.model_validate_json(raw)

    def find_all(self) -> list[Todo]:
        with self.guard():
            todo_ids = sorted(self.client.smembers(self._index_key))
            if not todo_ids:
                return []
            documents = self.client.mget([self._todo_key(todo_id) for todo_id in todo_ids])

        todos = [Todo.model_validate_json(raw) for raw in documents if raw is not None]
        return sorted(todos, key=lambda todo: (todo.created_at, todo.id))

    def delete_by_id(self, todo_id: str) -> None:
        with self.guard():
            pipe = self.client.pipeline()
            pipe.delete(self._todo_key(todo_id))
            pipe.srem(self._index_key, todo_id)
            pipe.execute()
