import logging

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from taskflow.auth.dependencies import get_auth_service, get_rate_limiter
from taskflow.auth.rate_limiter import RateLimiterService, TokenBucket, get_client_ip
from taskflow.core.errors import InvalidInputError, RateLimitedError
from taskflow.services.auth_service import AuthService

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

BEARER_PREFIX = 'Bearer '


class AuthRequest(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    token: str


def enforce_rate_limit(bucket: TokenBucket, client_ip: str, action: str) -> None:
    if not bucket.try_consume():
        logger.warning('Rate limit exceeded for %s from %s.', action, client_ip)
        raise RateLimitedError()


@router.post('/register', response_model=AuthResponse)
def register(
    data: AuthRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    rate_limiter: RateLimiterService = Depends(get_rate_limiter),
):
    client_ip = get_client_ip(request)
    enforce_rate_limit(rate_limiter.resolve_bucket(client_ip), client_ip, 'register')

    token = auth_service.register(data.username, data.password)
    return AuthResponse(token=token)


@router.post('/login', response_model=AuthResponse)
def login(
    data: AuthRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    rate_limiter: RateLimiterService = Depends(get_rate_limiter),
):
    client_ip = get_client_ip(request)
    enforce_rate_limit(rate_limiter.resolve_bucket(client_ip), client_ip, 'login')

    token = auth_service.login(data.username, data.password)
    return AuthResponse(token=token)


@router.post('/refresh', response_model=AuthResponse)
def refresh(
    request: Request,
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
    rate_limiter: RateLimiterService = Depends(get_rate_limiter),
):
    client_ip = get_client_ip(request)
    enforce_rate_limit(rate_limiter.resolve_refresh_bucket(client_ip), client_ip, 'refresh')

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise InvalidInputError('Authorization header must be "Bearer <token>".')

    token = auth_service.refresh_token(authorization[len(BEARER_PREFIX):].strip())
    return AuthResponse(token=token)
