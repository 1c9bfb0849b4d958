"""
sndcheck - Loudness quality scoring for audio recordings
========================================================

Version: 0.1.0
"""

__version__ = "0.1.0"

from sndcheck.core.exceptions import (
    InvalidConfigurationError,
    InvalidInputError,
    SndcheckError,
)
from sndcheck.core.loudness import LoudnessConfig, analyze_loudness
from sndcheck.core.mono import MonoSampleExtractor

__all__ = [
    "__version__",
    # Errors
    "SndcheckError",
    "InvalidInputError",
    "InvalidConfigurationError",
    # Core
    "LoudnessConfig",
    "MonoSampleExtractor",
    "analyze_loudness",
]
