"""
Proxy Package
=============

This package forwards authorized requests from mobile clients to the
Branch.io API and relays the answers back.

Main Components:
----------------
- routes.py: catch-all FastAPI router
- upstream.py: host selection, request construction, upstream call
- headers.py: request/response header exclusion sets
- relay.py: upstream outcome to client response

Usage:
------
    from branch_bridge.app.proxy import proxy_router
    app.include_router(proxy_router)
"""

from .routes import proxy_router

__all__ = ["proxy_router"]
