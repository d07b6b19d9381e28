from threading import Lock

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from taskflow.core import config


Base = declarative_base()

_engine_lock = Lock()
_engine: Engine | None = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def get_engine() -> Engine:
    global _engine

    if _engine is not None:
        return _engine

    with _engine_lock:
        if _engine is None:
            _engine = build_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

    return _engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    # Models register their tables on Base at import time.
    from taskflow.models import todo, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def ping_database(engine: Engine) -> dict:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        return {
            "database": engine.dialect.name,
            "version": ".".join(str(part) for part in (engine.dialect.server_version_info or ())),
            "url": engine.url.render_as_string(hide_password=True),
        }
