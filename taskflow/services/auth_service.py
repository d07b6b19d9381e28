import logging
import uuid

from passlib.context import CryptContext

from taskflow.auth.jwt_handler import JwtHandler
from taskflow.auth.passwords import hash_password, validate_password_policy, verify_password
from taskflow.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
)
from taskflow.models.user import DEFAULT_ROLE, User
from taskflow.repositories.base import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and token refresh on top of a UserStore."""

    def __init__(self, user_store: UserStore, jwt_handler: JwtHandler, pwd_context: CryptContext):
        self.user_store = user_store
        self.jwt_handler = jwt_handler
        self.pwd_context = pwd_context

    def register(self, username: str, password: str) -> str:
        username = (username or "").strip()
        if not username:
            raise InvalidInputError("Username is required.")

        if self.user_store.find_by_username(username) is not None:
            logger.info("Registration rejected, username %s is taken.", username)
            raise ConflictError(f"Username {username} already exists.")

        validate_password_policy(password or "")

        user = User(
            id=str(uuid.uuid4()),
            username=username,
            password=hash_password(self.pwd_context, password),
            role=DEFAULT_ROLE,
        )
        self.user_store.save(user)
        logger.info("Registered user %s.", username)

        return self.jwt_handler.generate_token(username)

    def login(self, username: str, password: str) -> str:
        user = self.user_store.find_by_username((username or "").strip())
        if user is None:
            raise NotFoundError("User not found.")

        if not verify_password(self.pwd_context, password or "", user.password):
            logger.warning("Failed login for user %s.", user.username)
            raise InvalidCredentialsError()

        logger.info("User %s logged in.", user.username)
        return self.jwt_handler.generate_token(user.username)

    def refresh_token(self, old_token: str) -> str:
        username = self.jwt_handler.extract_username(old_token)
        if username is None:
            raise InvalidTokenError()

        if not self.jwt_handler.is_token_valid(old_token, username):
            raise InvalidTokenError("Token has expired.")

        if self.user_store.find_by_username(username) is None:
            logger.warning("Refresh rejected, user %s no longer exists.", username)
            raise InvalidTokenError("User no longer exists.")

        return self.jwt_handler.generate_token(username)
