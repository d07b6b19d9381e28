"""Storage contracts shared by the relational and key-value backends."""

from abc import ABC, abstractmethod

from taskflow.models.todo import Todo
from taskflow.models.user import User


class UserStore(ABC):
    @abstractmethod
    def save(self, user: User) -> User:
        """Persist a user and return it as stored (with its final id).

        Raises ConflictError when another user already holds the username.
        """

    @abstractmethod
    def find_by_id(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    def find_by_username(self, username: str) -> User | None:
        pass

    @abstractmethod
    def delete_by_id(self, user_id: str) -> None:
        pass


class TodoStore(ABC):
    @abstractmethod
    def save(self, todo: Todo) -> Todo:
        """Insert the todo, or update it if a record with its id exists.

        Updates keep the stored createdAt. The returned todo carries the id the
        backend keeps it under, which may differ from the one passed in.
        """

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Todo | None:
        pass

    @abstractmethod
    def find_all(self) -> list[Todo]:
        """Every todo of every user, oldest first."""

    @abstractmethod
    def delete_by_id(self, todo_id: str) -> None:
        """Remove the todo; missing ids are ignored."""
