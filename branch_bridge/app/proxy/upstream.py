"""
Upstream Selection and Forwarding
=================================

Chooses the Branch API host for a request and issues the forwarded call.

Hosts:
------
- iOS clients:          https://api3.branch.io/
- everything else:      https://api2.branch.io/

The forwarded call carries the inbound method, raw body and query string
unchanged. Upstream status codes are never treated as errors here; only a
failure to get any response at all surfaces as an exception.
"""

import logging
from typing import Optional

import httpx
from starlette.requests import Request

from ..models import OutgoingRequest, UpstreamResponse, UpstreamTarget
from .headers import build_upstream_headers

logger = logging.getLogger(__name__)


BRANCH_API_BASE_URL_IOS = "https://api3.branch.io/"
BRANCH_API_BASE_URL_ANDROID = "https://api2.branch.io/"

IOS_PLATFORM = "ios"


# ============================================================================
# Selection
# ============================================================================

def select_base_url(platform: Optional[str]) -> str:
    """
    Map the client's declared platform to a Branch API base URL.

    Comparison against "ios" is case-insensitive. Any other value, including
    None, selects the Android host.
    """
    if isinstance(platform, str) and platform.lower() == IOS_PLATFORM:
        return BRANCH_API_BASE_URL_IOS
    return BRANCH_API_BASE_URL_ANDROID


def build_target(path: str, platform: Optional[str]) -> UpstreamTarget:
    """
    Pair the selected base URL with the inbound path.

    The base URL ends with "/" so only the path's own leading slash is
    removed: "/v1/url" becomes "v1/url".
    """
    return UpstreamTarget(
        base_url=select_base_url(platform),
        path=path[1:] if path.startswith("/") else path,
    )


# ============================================================================
# Request Construction
# ============================================================================

def build_outgoing_request(
    request: Request,
    content: bytes,
    target: UpstreamTarget,
) -> OutgoingRequest:
    """
    Describe the upstream call for an inbound request.

    Args:
        request: Inbound request (method, headers, query)
        content: Raw inbound body, already read
        target: Selected upstream target

    Returns:
        OutgoingRequest with sanitized headers
    """
    return OutgoingRequest(
        method=request.method,
        url=target.url,
        headers=build_upstream_headers(request.headers.items()),
        params=list(request.query_params.multi_items()),
        content=content,
    )


def create_upstream_client(
    timeout_seconds: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the shared client used for every upstream call.

    httpx's default headers (Accept, Accept-Encoding, Connection,
    User-Agent) are removed so the outgoing headers are exactly the filtered
    inbound ones.
    """
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 10.0)),
        transport=transport,
        follow_redirects=False,
    )
    for name in list(client.headers.keys()):
        del client.headers[name]
    return client


# ============================================================================
# Forwarding
# ============================================================================

async def forward(client: httpx.AsyncClient, outgoing: OutgoingRequest) -> UpstreamResponse:
    """
    Issue the upstream call and read the response body.

    httpx undoes any Content-Encoding, so the body is returned decoded.

    Returns:
        UpstreamResponse for any status code the upstream returns

    Raises:
        httpx.TransportError: No response could be obtained (connect, DNS,
            timeout, protocol error)
        httpx.InvalidURL: The target URL could not be built
    """
    upstream_request = client.build_request(
        outgoing.method,
        outgoing.url,
        headers=outgoing.headers,
        params=outgoing.params or None,
        content=outgoing.content,
    )

    response = await client.send(upstream_request)

    logger.info(
        f"Response received from Branch.io. Status: {response.status_code}",
        extra={"status_code": response.status_code, "url": outgoing.url}
    )

    return UpstreamResponse(
        status_code=response.status_code,
        headers=list(response.headers.multi_items()),
        content=response.content,
    )
