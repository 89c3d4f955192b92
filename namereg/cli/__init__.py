"""Command-line entrypoint for namereg (`namereg ...`)."""

from .main import app, main

__all__ = ["app", "main"]
