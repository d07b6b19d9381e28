from dataclasses import dataclass

from passlib.context import CryptContext

from taskflow.auth.jwt_handler import JwtHandler
from taskflow.auth.passwords import build_password_context
from taskflow.auth.rate_limiter import RateLimiterService
from taskflow.repositories.factory import Stores, create_stores
from taskflow.services.auth_service import AuthService
from taskflow.services.todo_service import TodoService


@dataclass
class Container:
    """Long-lived collaborators shared by every request of one process."""

    stores: Stores
    jwt_handler: JwtHandler
    rate_limiter: RateLimiterService
    auth_service: AuthService
    todo_service: TodoService


def build_container(
    stores: Stores | None = None,
    jwt_handler: JwtHandler | None = None,
    pwd_context: CryptContext | None = None,
    rate_limiter: RateLimiterService | None = None,
) -> Container:
    stores = stores or create_stores()
    jwt_handler = jwt_handler or JwtHandler()
    pwd_context = pwd_context or build_password_context()
    return Container(
        stores=stores,
        jwt_handler=jwt_handler,
        rate_limiter=rate_limiter or RateLimiterService(),
        auth_service=AuthService(stores.users, jwt_handler, pwd_context),
        todo_service=TodoService(stores.todos),
    )
