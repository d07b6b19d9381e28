import logging
from dataclasses import dataclass
from typing import Callable

from redis import Redis

from taskflow.core import config
from taskflow.database import build_session_factory, get_engine, init_db, ping_database
from taskflow.repositories.base import TodoStore, UserStore
from taskflow.repositories.redis_store import RedisTodoStore, RedisUserStore
from taskflow.repositories.sql_store import SqlTodoStore, SqlUserStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    backend: str
    users: UserStore
    todos: TodoStore
    health_check: Callable[[], dict]


def create_sql_stores(engine=None, create_tables: bool = True) -> Stores:
    engine = engine or get_engine()
    if create_tables:
        init_db(engine)
    session_factory = build_session_factory(engine)
    return Stores(
        backend="sql",
        users=SqlUserStore(session_factory),
        todos=SqlTodoStore(session_factory),
        health_check=lambda: ping_database(engine),
    )


def create_redis_stores(client: Redis | None = None, key_prefix: str | None = None) -> Stores:
    client = client or Redis.from_url(config.REDIS_URL, decode_responses=True)
    key_prefix = key_prefix or config.REDIS_KEY_PREFIX

    def health_check() -> dict:
        client.ping()
        info = client.info("server")
        connection_kwargs = client.connection_pool.connection_kwargs
        return {
            "database": "redis",
            "version": info.get("redis_version", ""),
            "url": f"{connection_kwargs.get('host', '')}:{connection_kwargs.get('port', '')}",
        }

    return Stores(
        backend="redis",
        users=RedisUserStore(client, key_prefix),
        todos=RedisTodoStore(client, key_prefix),
        health_check=health_check,
    )


def create_stores(backend: str | None = None) -> Stores:
    backend = (backend or config.STORAGE_BACKEND).strip().lower()
    logger.info("Using %s storage backend.", backend)
    if backend == "sql":
        return create_sql_stores()
    if backend == "redis":
        return create_redis_stores()
    raise ValueError(f"Unsupported storage backend: {backend}")
