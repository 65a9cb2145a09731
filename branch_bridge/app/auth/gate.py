"""
Credential Gate
===============

Reads the Branch key from the inbound request body and checks it against the
configured allow-list before anything is forwarded.

The body is parsed the way the clients send it: a JSON object, or an
url-encoded form. Anything else is treated as a body without a key, which
the gate rejects rather than failing.
"""

import json
import logging
from typing import AbstractSet, Any, Dict, Optional
from urllib.parse import parse_qs

from pydantic import ValidationError

from ..errors import AuthorizationError
from ..models import BridgeRequestBody

logger = logging.getLogger(__name__)


# =============================================================================
# Body Parsing
# =============================================================================

def _decode_form(content: bytes) -> Dict[str, Any]:
    fields = parse_qs(content.decode("utf-8", errors="replace"), keep_blank_values=True)
    # Repeated keys stay lists, which the body model treats as absent
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in fields.items()
    }


def parse_request_body(content: bytes, content_type: Optional[str]) -> BridgeRequestBody:
    """
    Build the typed body view from raw request bytes.

    Args:
        content: Raw inbound body
        content_type: Value of the Content-Type header, if any

    Returns:
        BridgeRequestBody; empty when the body is missing, malformed or not
        an object.
    """
    if not content:
        return BridgeRequestBody()

    media_type = (content_type or "").split(";")[0].strip().lower()

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            data = json.loads(content)
        except (ValueError, RecursionError):
            logger.debug("Request body is not valid JSON, treating as empty")
            return BridgeRequestBody()
    elif media_type == "application/x-www-form-urlencoded":
        data = _decode_form(content)
    else:
        return BridgeRequestBody()

    if not isinstance(data, dict):
        return BridgeRequestBody()

    try:
        return BridgeRequestBody.model_validate(data)
    except ValidationError:
        logger.debug("Request body does not match the expected shape, treating as empty")
        return BridgeRequestBody()


# =============================================================================
# Authorization
# =============================================================================

def authorize(body: BridgeRequestBody, allow_list: AbstractSet[str], path: str) -> bool:
    """
    Decide whether a request may be forwarded.

    The key must appear verbatim in the allow-list: no trimming, no case
    folding. A missing or empty key never matches. The decision is logged,
    including the key that was tried, so misconfigured clients can be traced.
    """
    branch_key = body.branch_key

    if branch_key and branch_key in allow_list:
        logger.info(
            f"[Proxy-Auth] Valid 'branch_key' \"{branch_key}\" received for {path}. Proceeding.",
            extra={"path": path, "decision": "allow"}
        )
        return True

    logger.warning(
        f"[Proxy-Auth] Request to {path} denied: Invalid 'branch_key' \"{branch_key}\".",
        extra={"path": path, "decision": "deny"}
    )
    return False


def require_allowed_key(body: BridgeRequestBody, allow_list: AbstractSet[str], path: str) -> None:
    """
    Raise AuthorizationError unless the body carries an allowed key.

    Raises:
        AuthorizationError: 403, terminal for the request
    """
    if not authorize(body, allow_list, path):
        raise AuthorizationError()
