"""Branch.io API bridge: allow-list gate and reverse proxy."""

__version__ = "1.0.0"
