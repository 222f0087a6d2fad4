"""HTTP API for price lookups and scenario lifecycle operations."""

from cloudbot.api.app import create_app

__all__ = ["create_app"]
