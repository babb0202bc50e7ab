"""
Service Errors

Exceptions raised by the service layer. Routers translate them into HTTP
responses; nothing here is retried.
"""

from fastapi import status


class ZapShiftError(Exception):
    """Base class for service layer errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamError(ZapShiftError):
    """The payment provider, identity provider or document store failed or rejected a call."""

    status_code = status.HTTP_502_BAD_GATEWAY


class NotFoundError(ZapShiftError):
    """A referenced parcel, payment, user or rider does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthError(ZapShiftError):
    """Missing or invalid identity token, or an authenticated subject that is not allowed."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "unauthorized access", forbidden: bool = False):
        super().__init__(message)
        if forbidden:
            self.status_code = status.HTTP_403_FORBIDDEN
