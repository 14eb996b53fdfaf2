"""HTTP API for the GitHub updates newsletter."""

from api.app import create_app

__all__ = ["create_app"]
