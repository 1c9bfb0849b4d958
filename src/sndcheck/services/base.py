# services/base.py
"""
Result type and base class for sndcheck services.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from sndcheck.core.exceptions import SndcheckError
from sndcheck.repository.protocol import FileRepositoryProtocol

T = TypeVar("T")

# Called as (files_done, files_total, last_file)
ProgressCallback = Callable[[int, int, Optional[str]], None]


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service call.

    Commands read ``data`` on success, and ``error`` with ``exit_code`` on
    failure. ``warnings`` carry non-fatal notices such as statistics that
    could not be computed.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls, data: T = None, message: str = None, warnings: List[str] = None, **metadata
    ) -> "ServiceResult[T]":
        return cls(True, data=data, message=message, warnings=list(warnings or []), metadata=metadata)

    @classmethod
    def fail(cls, error: str, exit_code: int = 1, **metadata) -> "ServiceResult[T]":
        return cls(False, error=error, metadata={"exit_code": exit_code, **metadata})

    @classmethod
    def from_error(cls, error: SndcheckError) -> "ServiceResult[T]":
        """Failed result carrying the exception's exit code."""
        return cls.fail(str(error), exit_code=error.exit_code)

    @property
    def exit_code(self) -> int:
        if self.success:
            return 0
        return int(self.metadata.get("exit_code", 1))


class BaseService:
    """
    Base for services that find audio files through a file repository.

    Batch operations report progress to an optional callback and keep going
    when a single file fails.
    """

    def __init__(self, file_repository: FileRepositoryProtocol) -> None:
        self.file_repository = file_repository
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        """Receive ``(done, total, last_file)`` during batch runs; None detaches."""
        self._progress_callback = callback

    def _report_progress(self, done: int, total: int, last_file: Optional[str] = None) -> None:
        if self._progress_callback is not None:
            self._progress_callback(done, total, last_file)

    def _get_audio_files(self, path: str, recursive: bool = True) -> List[Path]:
        """``path`` itself when it is a file, else the supported audio files under it."""
        from sndcheck.adapters.soundfile import SUPPORTED_AUDIO_EXTENSIONS

        if self.file_repository.is_file(path):
            return [Path(path)]
        return [
            Path(f)
            for f in self.file_repository.list_files(path, recursive=recursive)
            if Path(f).suffix.lower() in SUPPORTED_AUDIO_EXTENSIONS
        ]

    def _process_batch(
        self,
        files: List[Path],
        processor: Callable[[Path], T],
    ) -> Iterator[Tuple[Path, Optional[T], Optional[str]]]:
        """Yield ``(file, result, error)`` per file; exceptions become the error text."""
        total = len(files)
        self._report_progress(0, total)

        for done, filepath in enumerate(files, 1):
            try:
                result, error = processor(filepath), None
            except Exception as e:
                result, error = None, str(e)
            yield filepath, result, error
            self._report_progress(done, total, str(filepath))
