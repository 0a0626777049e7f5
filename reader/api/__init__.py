"""HTTP API for the reader core."""

from reader.api.app import create_app

__all__ = ["create_app"]
