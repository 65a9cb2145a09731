"""
Bridge error types.

Every failure inside the request pipeline is raised as a BridgeError subclass
and rendered by the application's exception handler as
``{"message": ...}`` with the matching status code.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .models import ErrorResponse


AUTH_FAILED_MESSAGE = "Authentication failed: Provided credential is not allowed."
NO_RESPONSE_MESSAGE = "No response received from upstream API or network error."
INTERNAL_ERROR_MESSAGE = "Internal error processing request to upstream API."


class BridgeError(Exception):
    """Base exception for errors answered by the bridge itself"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str = None, status_code: int = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthorizationError(BridgeError):
    """Credential is not in the allow-list; the request is never forwarded"""

    status_code = status.HTTP_403_FORBIDDEN
    message = AUTH_FAILED_MESSAGE


class UpstreamUnavailableError(BridgeError):
    """No response was obtained from the upstream (connect, DNS, timeout)"""

    message = NO_RESPONSE_MESSAGE


class InternalBridgeError(BridgeError):
    """The outgoing request could not be built or issued"""

    message = INTERNAL_ERROR_MESSAGE


def error_response(exc: BridgeError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
    )


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    """Render a BridgeError raised anywhere in the pipeline."""
    return error_response(exc)
