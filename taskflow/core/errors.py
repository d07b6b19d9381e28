"""Failure kinds raised by the services and stores.

Each error carries the HTTP status the API boundary answers with, so the
routers never translate messages by hand.
"""

from fastapi import status


class TaskflowError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected error."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ConflictError(TaskflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Username already exists."


class InvalidInputError(TaskflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."


class NotFoundError(TaskflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."


class InvalidCredentialsError(TaskflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid password."


class InvalidTokenError(TaskflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid or expired token."


class UnauthorizedError(TaskflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have access to this resource."


class RateLimitedError(TaskflowError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests. Try again later."


class AuthenticationRequiredError(TaskflowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated."


class StorageUnavailableError(TaskflowError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage unavailable. Verify DATABASE_URL or REDIS_URL."
