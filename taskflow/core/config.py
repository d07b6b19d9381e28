import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SUPPORTED_STORAGE_BACKENDS = ("sql", "redis")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql").strip().lower()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskflow.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "taskflow")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

RATE_LIMIT_AUTH_REQUESTS_PER_MINUTE = int(os.getenv("RATE_LIMIT_AUTH_REQUESTS_PER_MINUTE", "5"))
RATE_LIMIT_REFRESH_REQUESTS_PER_MINUTE = int(os.getenv("RATE_LIMIT_REFRESH_REQUESTS_PER_MINUTE", "10"))

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:3000"])
CORS_ALLOW_CREDENTIALS = _get_bool(os.getenv("CORS_ALLOW_CREDENTIALS"), default=True)

SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if STORAGE_BACKEND not in SUPPORTED_STORAGE_BACKENDS:
        raise RuntimeError(
            f"STORAGE_BACKEND must be one of {', '.join(SUPPORTED_STORAGE_BACKENDS)}; got {STORAGE_BACKEND!r}."
        )
