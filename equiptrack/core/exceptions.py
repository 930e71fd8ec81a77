# equiptrack/core/exceptions.py

from fastapi import status


class ServiceError(Exception):
    """Base error raised by the service layer, carries a user-facing message."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFound(ServiceError):
    """Raised when an entity id has no record."""

    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStock(ServiceError):
    """Raised when the requested quantity exceeds the relevant available figure."""


class InvalidState(ServiceError):
    """Raised when an entity is not in an eligible source state."""


class AlreadyProcessed(InvalidState):
    """Raised when a request has already left the pending state."""


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(ServiceError):
    """Raised on uniqueness violations (contact, invitation code, department name)."""

    status_code = status.HTTP_409_CONFLICT


class AuthenticationFailed(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
