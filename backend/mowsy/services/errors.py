"""Service-layer exceptions.

Services raise these instead of HTTPException so they stay usable outside a
request. A single handler in ``mowsy.main`` renders them as ``{"detail": ...}``
with the status code carried by the exception class.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class StateConflict(ServiceError):
    """Illegal transition, overlapping rental or duplicate application."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(ServiceError):
    """A third-party collaborator (payments, storage, geocoding) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
