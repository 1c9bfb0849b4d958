"""
Service Factory
===============

Builds the sndcheck services around one file repository.

Usage:
    from sndcheck.services.factory import ServiceFactory

    factory = ServiceFactory()
    report = factory.loudness.analyze_file("take1.wav").data

    # Tests inject an in-memory repository
    factory = ServiceFactory(file_repository=MockFileRepository())
"""

from typing import Optional

from sndcheck.repository import LocalFileRepository
from sndcheck.repository.protocol import FileRepositoryProtocol

from .config import ConfigService
from .loudness import LoudnessService


class ServiceFactory:
    """
    Lazily created, cached services sharing one repository.

    Attributes:
        file_repository: Repository handed to file-based services
            (LocalFileRepository unless one is injected)
    """

    def __init__(self, file_repository: Optional[FileRepositoryProtocol] = None):
        self.file_repository = file_repository or LocalFileRepository()
        self._loudness: Optional[LoudnessService] = None
        self._config: Optional[ConfigService] = None

    @property
    def loudness(self) -> LoudnessService:
        if self._loudness is None:
            self._loudness = LoudnessService(self.file_repository)
        return self._loudness

    @property
    def config(self) -> ConfigService:
        if self._config is None:
            self._config = ConfigService()
        return self._config
