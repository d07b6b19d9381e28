from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskflow.auth.jwt_handler import JwtHandler
from taskflow.auth.rate_limiter import RateLimiterService
from taskflow.core.container import Container
from taskflow.core.errors import AuthenticationRequiredError
from taskflow.repositories.factory import Stores
from taskflow.services.auth_service import AuthService
from taskflow.services.todo_service import TodoService

security = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_auth_service(container: Container = Depends(get_container)) -> AuthService:
    return container.auth_service


def get_todo_service(container: Container = Depends(get_container)) -> TodoService:
    return container.todo_service


def get_rate_limiter(container: Container = Depends(get_container)) -> RateLimiterService:
    return container.rate_limiter


def get_jwt_handler(container: Container = Depends(get_container)) -> JwtHandler:
    return container.jwt_handler


def get_stores(container: Container = Depends(get_container)) -> Stores:
    return container.stores


def get_current_username(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    jwt_handler: JwtHandler = Depends(get_jwt_handler),
) -> str:
    if credentials is None:
        raise AuthenticationRequiredError()

    token = credentials.credentials
    username = jwt_handler.extract_username(token)
    if username is None or not jwt_handler.is_token_valid(token, username):
        raise AuthenticationRequiredError("Invalid or expired token.")
    return username
