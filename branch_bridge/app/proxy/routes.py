"""
Proxy Routes - Branch API Forwarding
====================================

This module implements the catch-all endpoint that forwards authorized
requests from mobile clients to the Branch.io API.

Request Flow:
-------------
1. Read the raw body and parse it into a typed view (branch_key, os)
2. Reject with 403 unless branch_key is in the allow-list
3. Pick the upstream host from the os field (iOS or Android/default)
4. Forward method, raw body, query and filtered headers
5. Relay status, filtered headers and raw body back to the client

Every request gets exactly one response. Upstream error statuses are relayed
as they are; the bridge only answers by itself on 403 and on failures to
reach the upstream.

Endpoints:
----------
- ANY /{path}: Forward to https://api3.branch.io/{path} or https://api2.branch.io/{path}
"""

import logging
from typing import AbstractSet

import httpx
from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from ..auth.gate import parse_request_body, require_allowed_key
from ..errors import InternalBridgeError
from .relay import build_failure_response, build_outgoing_response
from .upstream import build_outgoing_request, build_target, forward

logger = logging.getLogger(__name__)

# Create router
proxy_router = APIRouter()

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


# ============================================================================
# Dependencies
# ============================================================================

def get_allow_list(request: Request) -> AbstractSet[str]:
    """
    Dependency returning the allow-list built when the app was created.

    Raises:
        InternalBridgeError: If the application state is missing
    """
    app_state = getattr(request.app.state, "app_state", None)
    if app_state is None:
        raise InternalBridgeError()
    return app_state.allow_list


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the shared upstream HTTP client from app state.

    Raises:
        InternalBridgeError: If the client was not started by the lifespan
    """
    app_state = getattr(request.app.state, "app_state", None)
    client = getattr(app_state, "upstream_client", None)
    if client is None:
        logger.error("Upstream client not initialized")
        raise InternalBridgeError()
    return client


def inbound_path(request: Request) -> str:
    """
    Path exactly as the client sent it, percent-escapes included.

    request.url is rebuilt from the decoded path, which turns an escaped
    "/" or "?" into a real separator.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.scope["path"]


# ============================================================================
# Proxy Endpoint
# ============================================================================

@proxy_router.api_route(
    "/{full_path:path}",
    methods=PROXY_METHODS,
)
async def proxy_branch_request(
    request: Request,
    allow_list: AbstractSet[str] = Depends(get_allow_list),
    upstream_client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    """
    Forward an authorized request to the Branch API.

    Raises:
        AuthorizationError: branch_key missing or not allowed (403)
    """
    path = inbound_path(request)
    content = await request.body()
    body = parse_request_body(content, request.headers.get("content-type"))

    require_allowed_key(body, allow_list, path)

    target = build_target(path, body.os)

    logger.info(
        f"Redirecting {request.method} /{target.path} to: {target.url}",
        extra={
            "method": request.method,
            "path": path,
            "target_url": target.url,
            "query": str(request.query_params),
        }
    )

    try:
        outgoing = build_outgoing_request(request, content, target)
        upstream = await forward(upstream_client, outgoing)
    except Exception as exc:
        return build_failure_response(exc)

    return build_outgoing_response(upstream)
