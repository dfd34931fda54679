"""Command-line entrypoint for packagexml-diff."""

from .main import main

__all__ = ["main"]
