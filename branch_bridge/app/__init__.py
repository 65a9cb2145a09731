"""
Branch Bridge Application
=========================

FastAPI application that checks the Branch key of each request against an
allow-list and forwards accepted requests to the Branch.io API.

Packages:
    - auth:  credential gate
    - proxy: upstream selection, forwarding and response relay
"""
