"""
Response relay back to the calling client.

Turns the outcome of the upstream call into the single response sent to the
client: either the upstream's own answer, or a JSON error produced here.
"""

import logging

import httpx
from starlette.responses import Response

from ..errors import (
    BridgeError,
    InternalBridgeError,
    UpstreamUnavailableError,
    error_response,
)
from ..models import UpstreamResponse
from .headers import build_client_response_headers

logger = logging.getLogger(__name__)


def build_outgoing_response(upstream: UpstreamResponse) -> Response:
    """
    Copy status, filtered headers and body of the upstream response.

    Starlette computes Content-Length from the relayed body.
    """
    response = Response(content=upstream.content, status_code=upstream.status_code)
    for name, value in build_client_response_headers(upstream.headers):
        response.headers.append(name, value)
    return response


def build_failure_response(exc: Exception) -> Response:
    """
    Translate a failed upstream call into a response.

    - httpx.HTTPStatusError: the upstream did answer, relay that answer
    - httpx.TransportError: nothing came back, 500 with the network message
    - BridgeError: rendered as is
    - anything else: 500 with the internal error message
    """
    if isinstance(exc, httpx.HTTPStatusError):
        upstream = exc.response
        try:
            content = upstream.content
        except httpx.ResponseNotRead:
            content = b""
        logger.error(
            f"Error calling Branch.io API: {exc}",
            extra={"status_code": upstream.status_code}
        )
        return build_outgoing_response(
            UpstreamResponse(
                status_code=upstream.status_code,
                headers=list(upstream.headers.multi_items()),
                content=content,
            )
        )

    if isinstance(exc, httpx.TransportError):
        logger.error(
            f"No response received from Branch.io: {type(exc).__name__}: {exc}",
            extra={"exception_type": type(exc).__name__}
        )
        return error_response(UpstreamUnavailableError())

    if isinstance(exc, BridgeError):
        return error_response(exc)

    logger.error(
        f"Error setting up request to Branch.io: {exc}",
        exc_info=exc,
        extra={"exception_type": type(exc).__name__}
    )
    return error_response(InternalBridgeError())
