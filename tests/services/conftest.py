"""Shared fixtures for service tests."""

import pytest

from sndcheck.repository import LocalFileRepository
from sndcheck.services.loudness import LoudnessService
from tests.mocks.mock_repository import MockFileRepository


@pytest.fixture
def mock_repository() -> MockFileRepository:
    """Create a mock file repository for testing."""
    return MockFileRepository()


@pytest.fixture
def local_repository() -> LocalFileRepository:
    """Repository backed by the real filesystem."""
    return LocalFileRepository()


@pytest.fixture
def loudness_service(local_repository) -> LoudnessService:
    """LoudnessService over the local filesystem (decoding needs real files)."""
    return LoudnessService(file_repository=local_repository)
