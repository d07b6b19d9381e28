import pytest

from taskflow.auth.jwt_handler import JwtHandler
from taskflow.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
)
from taskflow.models.user import User
from taskflow.services.auth_service import AuthService


def test_register_returns_token_for_new_user(auth_service: AuthService, jwt_handler: JwtHandler) -> None:
    token = auth_service.register('alice', 'Secret12')

    assert jwt_handler.extract_username(token) == 'alice'
    assert jwt_handler.is_token_valid(token, 'alice') is True


def test_register_stores_hashed_password_and_default_role(auth_service: AuthService, stores) -> None:
    auth_service.register('alice', 'Secret12')

    user = stores.users.find_by_username('alice')

    assert user.password != 'Secret12'
    assert user.password.startswith('$2')
    assert user.role == 'USER'
    assert user.id


def test_register_same_username_twice_conflicts(auth_service: AuthService) -> None:
    auth_service.register('alice', 'Secret12')

    with pytest.raises(ConflictError):
        auth_service.register('alice', 'Another99')


@pytest.mark.parametrize('password', ['short', 'alllettersnoDigits'])
def test_register_rejects_passwords_failing_policy(auth_service: AuthService, stores, password: str) -> None:
    with pytest.raises(InvalidInputError):
        auth_service.register('alice', password)

    assert stores.users.find_by_username('alice') is None


def test_register_rejects_blank_username(auth_service: AuthService) -> None:
    with pytest.raises(InvalidInputError):
        auth_service.register('   ', 'Valid1Pass')


def test_register_accepts_valid_password(auth_service: AuthService) -> None:
    assert auth_service.register('alice', 'Valid1Pass')


def test_login_after_register_returns_token_for_user(auth_service: AuthService, jwt_handler: JwtHandler) -> None:
    auth_service.register('alice', 'Secret12')

    token = auth_service.login('alice', 'Secret12')

    assert jwt_handler.extract_username(token) == 'alice'


def test_login_unknown_user_is_not_found(auth_service: AuthService) -> None:
    with pytest.raises(NotFoundError):
        auth_service.login('ghost', 'Secret12')


@pytest.mark.parametrize('password', ['Wrong123', 'secret12', '', 'Secret12 '])
def test_login_with_wrong_password_is_invalid_credentials(auth_service: AuthService, password: str) -> None:
    auth_service.register('alice', 'Secret12')

    with pytest.raises(InvalidCredentialsError):
        auth_service.login('alice', password)


def test_login_with_unreadable_stored_hash_is_invalid_credentials(auth_service: AuthService, stores) -> None:
    stores.users.save(User(username='legacy', password='plain-text'))

    with pytest.raises(InvalidCredentialsError):
        auth_service.login('legacy', 'plain-text')


def test_refresh_returns_new_token_for_same_subject(auth_service: AuthService, jwt_handler: JwtHandler) -> None:
    token = auth_service.register('alice', 'Secret12')

    refreshed = auth_service.refresh_token(token)

    assert jwt_handler.extract_username(refreshed) == 'alice'


@pytest.mark.parametrize('token', ['', 'garbage', 'a.b.c'])
def test_refresh_rejects_malformed_tokens(auth_service: AuthService, token: str) -> None:
    with pytest.raises(InvalidTokenError):
        auth_service.refresh_token(token)


def test_refresh_rejects_expired_token(auth_service: AuthService) -> None:
    auth_service.register('alice', 'Secret12')
    expired = JwtHandler(secret_key='test-secret', algorithm='HS256', expires_minutes=-5).generate_token('alice')

    with pytest.raises(InvalidTokenError):
        auth_service.refresh_token(expired)


def test_refresh_rejects_token_of_deleted_user(auth_service: AuthService, stores) -> None:
    token = auth_service.register('alice', 'Secret12')
    stores.users.delete_by_id(stores.users.find_by_username('alice').id)

    with pytest.raises(InvalidTokenError):
        auth_service.refresh_token(token)
