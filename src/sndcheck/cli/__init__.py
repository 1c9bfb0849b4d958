"""Command-line interface for sndcheck."""

from .cli import cli

__all__ = ["cli"]
