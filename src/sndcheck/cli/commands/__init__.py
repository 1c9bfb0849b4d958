"""CLI command modules for sndcheck."""

from .batch import batch
from .check import check
from .config import config

__all__ = [
    "batch",
    "check",
    "config",
]
