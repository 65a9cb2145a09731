"""
Header filtering for requests sent to Branch and responses sent back.

Both directions follow the same rule: copy every header except a fixed
exclusion set. The sets are module constants so the policy can be checked
on its own.
"""

from typing import Iterable, List, Tuple

# Recomputed by httpx for the outgoing call, or meaningless past this hop.
# The body is buffered, so inbound chunked framing never applies upstream.
REQUEST_HEADER_EXCLUSIONS = frozenset(
    {
        "host",
        "connection",
        "content-length",
        "transfer-encoding",
        "accept-encoding",
        "user-agent",
    }
)

# Framing headers; Starlette sets its own for the relayed body. httpx hands
# back the decoded body, so the upstream content-encoding no longer applies.
RESPONSE_HEADER_EXCLUSIONS = frozenset(
    {
        "transfer-encoding",
        "connection",
        "content-length",
        "content-encoding",
    }
)


def build_upstream_headers(request_headers: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """
    Filter inbound request headers for the upstream call.

    Args:
        request_headers: (name, value) pairs, typically ``request.headers.items()``

    Returns:
        Remaining pairs in their original order and casing. Repeated headers
        are kept.
    """
    return [
        (name, value)
        for name, value in request_headers
        if name.lower() not in REQUEST_HEADER_EXCLUSIONS
    ]


def build_client_response_headers(upstream_headers: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """
    Filter upstream response headers for the reply to the client.

    Args:
        upstream_headers: (name, value) pairs, typically
            ``httpx.Response.headers.multi_items()``

    Returns:
        Remaining pairs; repeated headers such as Set-Cookie are kept.
    """
    return [
        (name, value)
        for name, value in upstream_headers
        if name.lower() not in RESPONSE_HEADER_EXCLUSIONS
    ]
