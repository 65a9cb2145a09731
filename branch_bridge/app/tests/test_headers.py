"""
Header Filtering Tests

Tests the exclusion sets in branch_bridge/app/proxy/headers.py on their own.
"""

import httpx

from branch_bridge.app.proxy.headers import (
    REQUEST_HEADER_EXCLUSIONS,
    RESPONSE_HEADER_EXCLUSIONS,
    build_client_response_headers,
    build_upstream_headers,
)


def test_request_exclusion_set():
    assert REQUEST_HEADER_EXCLUSIONS == {
        "host",
        "connection",
        "content-length",
        "transfer-encoding",
        "accept-encoding",
        "user-agent",
    }


def test_response_exclusion_set_covers_framing_headers():
    assert {"transfer-encoding", "connection", "content-length"} <= RESPONSE_HEADER_EXCLUSIONS


def test_upstream_headers_drop_excluded_names_case_insensitively():
    headers = build_upstream_headers(
        [
            ("Host", "bridge.example.com"),
            ("Connection", "keep-alive"),
            ("Content-Length", "42"),
            ("Accept-Encoding", "gzip"),
            ("User-Agent", "okhttp/4.12"),
            ("Content-Type", "application/json"),
            ("X-Trace-Id", "abc"),
            ("Authorization", "Bearer token"),
        ]
    )

    assert headers == [
        ("Content-Type", "application/json"),
        ("X-Trace-Id", "abc"),
        ("Authorization", "Bearer token"),
    ]


def test_upstream_headers_keep_repeated_values():
    headers = build_upstream_headers([("x-forwarded-for", "1.1.1.1"), ("x-forwarded-for", "2.2.2.2")])

    assert headers == [("x-forwarded-for", "1.1.1.1"), ("x-forwarded-for", "2.2.2.2")]


def test_client_response_headers_drop_framing_headers():
    upstream = httpx.Headers(
        [
            ("Content-Type", "application/json"),
            ("Transfer-Encoding", "chunked"),
            ("Connection", "close"),
            ("Content-Length", "10"),
            ("Content-Encoding", "gzip"),
            ("X-Branch-Request-Id", "req-1"),
        ]
    )

    headers = build_client_response_headers(upstream.multi_items())

    assert headers == [
        ("content-type", "application/json"),
        ("x-branch-request-id", "req-1"),
    ]


def test_client_response_headers_keep_set_cookie_pairs():
    headers = build_client_response_headers([("set-cookie", "a=1"), ("set-cookie", "b=2")])

    assert headers == [("set-cookie", "a=1"), ("set-cookie", "b=2")]
