"""
Services Layer
==============

Services wrap the core analysis in ServiceResult objects so every caller
(CLI, scripts, tests) handles success and failure the same way.
"""

from .base import BaseService, ServiceResult
from .config import ConfigService
from .factory import ServiceFactory
from .loudness import LoudnessService

__all__ = [
    "BaseService",
    "ServiceResult",
    "ServiceFactory",
    "ConfigService",
    "LoudnessService",
]
