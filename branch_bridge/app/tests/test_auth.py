"""
Credential Gate Tests

Tests body parsing and the exact-match allow-list check in
branch_bridge/app/auth/gate.py.
"""

import logging

import pytest

from branch_bridge.app.auth.gate import authorize, parse_request_body, require_allowed_key
from branch_bridge.app.errors import AuthorizationError
from branch_bridge.app.models import BridgeRequestBody


ALLOW_LIST = frozenset({"key_live_allowed", "key_test_allowed"})


# ============================================================================
# Body Parsing
# ============================================================================

def test_parse_json_object():
    body = parse_request_body(
        b'{"branch_key": "key_live_allowed", "os": "iOS", "data": {"a": 1}}',
        "application/json",
    )

    assert body.branch_key == "key_live_allowed"
    assert body.os == "iOS"


def test_parse_json_with_charset_parameter():
    body = parse_request_body(b'{"branch_key": "k"}', "application/json; charset=utf-8")

    assert body.branch_key == "k"


def test_parse_form_body():
    body = parse_request_body(b"branch_key=key_live_allowed&os=android", "application/x-www-form-urlencoded")

    assert body.branch_key == "key_live_allowed"
    assert body.os == "android"


def test_parse_form_with_repeated_key_drops_it():
    body = parse_request_body(b"branch_key=a&branch_key=b", "application/x-www-form-urlencoded")

    assert body.branch_key is None


@pytest.mark.parametrize(
    "content,content_type",
    [
        (b"", "application/json"),
        (b"{not json", "application/json"),
        (b"\xff\xfe", "application/json"),
        (b'["key_live_allowed"]', "application/json"),
        (b'"key_live_allowed"', "application/json"),
        (b'{"branch_key": "key_live_allowed"}', None),
        (b'{"branch_key": "key_live_allowed"}', "text/plain"),
    ],
)
def test_unusable_bodies_parse_as_empty(content, content_type):
    body = parse_request_body(content, content_type)

    assert body.branch_key is None
    assert body.os is None


def test_deeply_nested_json_parses_as_empty():
    depth = 100_000
    content = b'{"a":' + b"[" * depth + b"]" * depth + b"}"

    body = parse_request_body(content, "application/json")

    assert body.branch_key is None


@pytest.mark.parametrize("value", [123, 1.5, True, ["k"], {"k": "v"}, None])
def test_non_string_fields_are_absent(value):
    body = BridgeRequestBody.model_validate({"branch_key": value, "os": value})

    assert body.branch_key is None
    assert body.os is None


# ============================================================================
# Authorization
# ============================================================================

def test_authorize_exact_match():
    assert authorize(BridgeRequestBody(branch_key="key_live_allowed"), ALLOW_LIST, "/v1/url") is True


@pytest.mark.parametrize(
    "branch_key",
    [None, "", " key_live_allowed", "key_live_allowed ", "KEY_LIVE_ALLOWED", "key_live"],
)
def test_authorize_rejects_anything_else(branch_key):
    assert authorize(BridgeRequestBody(branch_key=branch_key), ALLOW_LIST, "/v1/url") is False


def test_authorize_with_empty_allow_list():
    assert authorize(BridgeRequestBody(branch_key="key_live_allowed"), frozenset(), "/v1/url") is False


def test_denial_is_logged_with_key_and_path(caplog):
    caplog.set_level(logging.INFO, logger="branch_bridge.app.auth.gate")

    authorize(BridgeRequestBody(branch_key="key_live_typo"), ALLOW_LIST, "/v2/event")

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "key_live_typo" in record.getMessage()
    assert "/v2/event" in record.getMessage()


def test_approval_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="branch_bridge.app.auth.gate")

    authorize(BridgeRequestBody(branch_key="key_test_allowed"), ALLOW_LIST, "/v1/url")

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert "key_test_allowed" in record.getMessage()


def test_require_allowed_key_raises_403():
    with pytest.raises(AuthorizationError) as exc_info:
        require_allowed_key(BridgeRequestBody(), ALLOW_LIST, "/v1/url")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Authentication failed: Provided credential is not allowed."


def test_require_allowed_key_passes():
    require_allowed_key(BridgeRequestBody(branch_key="key_live_allowed"), ALLOW_LIST, "/v1/url")
