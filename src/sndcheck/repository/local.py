"""FileRepositoryProtocol on the local disk."""

from pathlib import Path
from typing import List

from sndcheck.repository.protocol import PathLike


class LocalFileRepository:
    """Local filesystem repository used by the CLI."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_file(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def list_files(self, directory: PathLike, recursive: bool = False) -> List[Path]:
        root = Path(directory)
        if not root.is_dir():
            return []
        entries = root.rglob("*") if recursive else root.iterdir()
        return sorted(entry for entry in entries if entry.is_file())

    def write_text(self, path: PathLike, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def resolve(self, path: PathLike) -> Path:
        return Path(path).resolve()
