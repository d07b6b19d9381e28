from datetime import datetime, timedelta, timezone

import jwt

from taskflow.core import config


class JwtHandler:
    """Issues and checks the bearer tokens handed out at register/login/refresh."""

    def __init__(
        self,
        secret_key: str = config.JWT_SECRET_KEY,
        algorithm: str = config.JWT_ALGORITHM,
        expires_minutes: int = config.JWT_EXPIRES_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def generate_token(self, username: str) -> str:
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + timedelta(minutes=self.expires_minutes)
        payload = {"sub": username, "iat": issued_at, "exp": expire}
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str, verify_exp: bool = True) -> dict:
        return jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            options={"require": ["sub", "exp"], "verify_exp": verify_exp},
        )

    def is_token_valid(self, token: str, expected_username: str) -> bool:
        try:
            payload = self.decode_token(token)
        except jwt.InvalidTokenError:
            return False
        return payload.get("sub") == expected_username

    def extract_username(self, token: str) -> str | None:
        """Subject of a correctly signed token, expired or not; None otherwise."""
        try:
            payload = self.decode_token(token, verify_exp=False)
        except jwt.InvalidTokenError:
            return None
        subject = payload.get("sub")
        return subject if isinstance(subject, str) and subject else None
