"""SQLAlchemy backed stores.

Rows use numeric primary keys; the string ids handed to callers are those keys
rendered as text. An id that is not a number simply matches nothing.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskflow.core.errors import ConflictError, StorageUnavailableError
from taskflow.models.todo import Todo, TodoRecord, TodoStatus, as_utc, utcnow
from taskflow.models.user import User, UserRecord
from taskflow.repositories.base import TodoStore, UserStore

logger = logging.getLogger(__name__)


def parse_record_id(value: str | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class _SqlStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def session(self):
        db: Session = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Database operation failed in %s.', type(self).__name__)
            raise StorageUnavailableError() from exc
        finally:
            db.close()

    @staticmethod
    def get_record(db: Session, model, value: str | None):
        record_id = parse_record_id(value)
        if record_id is None:
            return None
        return db.get(model, record_id)


class SqlUserStore(_SqlStore, UserStore):
    def save(self, user: User) -> User:
        with self.session() as db:
            record = self.get_record(db, UserRecord, user.id)
            if record is None:
                record = UserRecord(username=user.username)
                db.add(record)
            record.password = user.password
            record.role = user.role

            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise ConflictError(f'Username {user.username} already exists.') from exc

            db.refresh(record)
            return _to_user(record)

    def find_by_id(self, user_id: str) -> User | None:
        with self.session() as db:
            record = self.get_record(db, UserRecord, user_id)
            return _to_user(record) if record else None

    def find_by_username(self, username: str) -> User | None:
        with self.session() as db:
            record = db.query(UserRecord).filter(UserRecord.username == username).first()
            return _to_user(record) if record else None

    def delete_by_id(self, user_id: str) -> None:
        with self.session() as db:
            record = self.get_record(db, UserRecord, user_id)
            if record is None:
                return
            db.delete(record)
            db.commit()


class SqlTodoStore(_SqlStore, TodoStore):
    def save(self, todo: Todo) -> Todo:
        with self.session() as db:
            record = self.get_record(db, TodoRecord, todo.id)
            if record is None:
                record = TodoRecord(
                    user_id=todo.user_id,
                    # Columns drop the offset on some engines, so store UTC wall time.
                    created_at=as_utc(todo.created_at),
                    updated_at=as_utc(todo.updated_at),
                )
                db.add(record)
            else:
                # Never move updatedAt backwards relative to what the caller stamped.
                record.updated_at = max(as_utc(todo.updated_at), utcnow())

            record.title = todo.title
            record.description = todo.description
            record.completed = todo.status is TodoStatus.COMPLETED

            db.commit()
            db.refresh(record)
            return _to_todo(record)

    def find_by_id(self, todo_id: str) -> Todo | None:
        with self.session() as db:
            record = self.get_record(db, TodoRecord, todo_id)
            return _to_todo(record) if record else None

    def find_all(self) -> list[Todo]:
        with self.session() as db:
            records = db.query(TodoRecord).order_by(TodoRecord.created_at, TodoRecord.id).all()
            return [_to_todo(record) for record in records]

    def delete_by_id(self, todo_id: str) -> None:
        with self.session() as db:
            record = self.get_record(db, TodoRecord, todo_id)
            if record is None:
                return
            db.delete(record)
            db.commit()


def _to_user(record: UserRecord) -> User:
    return User(
        id=str(record.id),
        username=record.username,
        password=record.password,
        role=record.role,
    )


def _to_todo(record: TodoRecord) -> Todo:
    return Todo(
        id=str(record.id),
        title=record.title,
        description=record.description,
        status=TodoStatus.COMPLETED if record.completed else TodoStatus.PENDING,
        user_id=record.user_id,
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
    )
