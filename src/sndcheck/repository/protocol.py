"""File access for services, as a protocol so tests can run without a disk."""

from pathlib import Path
from typing import List, Protocol, Union

PathLike = Union[str, Path]


class FileRepositoryProtocol(Protocol):
    """Filesystem operations LoudnessService performs.

    Decoding reads audio through soundfile/pydub directly; the repository
    covers discovery, existence checks and report output.
    """

    def exists(self, path: PathLike) -> bool: ...

    def is_file(self, path: PathLike) -> bool: ...

    def list_files(self, directory: PathLike, recursive: bool = False) -> List[Path]:
        """Files (not directories) under ``directory``, sorted; empty if it is missing."""
        ...

    def write_text(self, path: PathLike, content: str) -> None:
        """Write UTF-8 text, creating parent directories."""
        ...

    def resolve(self, path: PathLike) -> Path:
        """Absolute form of ``path`` for reports."""
        ...
