"""JSON API for progress-fit."""

from .app import create_app

__all__ = ["create_app"]
