"""
Authentication Package

This package decides which callers may use the bridge.

Key responsibilities:
- Parsing the inbound body into a typed view (branch_key, os)
- Exact-match lookup of the Branch key in the configured allow-list
- Audit logging of every allow/deny decision

Modules:
- gate: body parsing and the allow-list check
"""

from .gate import authorize, parse_request_body, require_allowed_key

__all__ = [
    "authorize",
    "parse_request_body",
    "require_allowed_key",
]
