"""File repository layer for dependency injection."""

from sndcheck.repository.local import LocalFileRepository
from sndcheck.repository.protocol import FileRepositoryProtocol

__all__ = [
    "FileRepositoryProtocol",
    "LocalFileRepository",
]
