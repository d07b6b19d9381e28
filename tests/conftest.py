import os

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')

from taskflow.auth.jwt_handler import JwtHandler  # noqa: E402
from taskflow.auth.passwords import build_password_context  # noqa: E402
from taskflow.auth.rate_limiter import RateLimiterService  # noqa: E402
from taskflow.core.container import build_container  # noqa: E402
from taskflow.database import Base  # noqa: E402
from taskflow.repositories.factory import create_redis_stores, create_sql_stores  # noqa: E402
from taskflow.services.auth_service import AuthService  # noqa: E402
from taskflow.services.todo_service import TodoService  # noqa: E402


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sql_stores():
    # One shared connection so request threads see the same in-memory database.
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    stores = create_sql_stores(engine)
    try:
        yield stores
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def redis_stores():
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield create_redis_stores(client, key_prefix='test')
    finally:
        client.flushall()


@pytest.fixture(params=['sql', 'redis'])
def stores(request):
    return request.getfixturevalue(f'{request.param}_stores')


@pytest.fixture
def jwt_handler() -> JwtHandler:
    return JwtHandler(secret_key='test-secret', algorithm='HS256', expires_minutes=60)


@pytest.fixture(scope='session')
def pwd_context():
    return build_password_context(rounds=4)


@pytest.fixture
def auth_service(stores, jwt_handler, pwd_context) -> AuthService:
    return AuthService(stores.users, jwt_handler, pwd_context)


@pytest.fixture
def todo_service(stores) -> TodoService:
    return TodoService(stores.todos)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(stores, jwt_handler, pwd_context, fake_clock):
    return build_container(
        stores=stores,
        jwt_handler=jwt_handler,
        pwd_context=pwd_context,
        rate_limiter=RateLimiterService(
            auth_requests_per_minute=5,
            refresh_requests_per_minute=10,
            clock=fake_clock,
        ),
    )
