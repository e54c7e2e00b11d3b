"""
Error types raised by the services.

Every class carries the HTTP status it is reported with, so routers let
them propagate and the handler registered in ``eventhub.main`` renders
them as ``{"detail": ..., "code": ...}``.
"""

from fastapi import status


class EventHubError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "SERVER_ERROR"
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.error_code}


class NotFoundError(EventHubError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Not found"


class ForbiddenError(EventHubError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_message = "Not authorized"


class InvalidInputError(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_INPUT"
    default_message = "All fields required"


class AlreadyRegisteredError(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ALREADY_REGISTERED"
    default_message = "You are already registered for this event"


class CapacityExceededError(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "CAPACITY_EXCEEDED"
    default_message = "Event is at full capacity"


class AuthenticationError(EventHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class StoreUnavailableError(EventHubError):
    """The database or the lock server failed; nothing was changed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "STORE_UNAVAILABLE"
    default_message = "Service temporarily unavailable, please try again"
