"""Result models shared by services and views."""

from sndcheck.models.loudness import SUMMARY_FIELDS, BatchLoudnessResult, LoudnessReport

__all__ = [
    "SUMMARY_FIELDS",
    "LoudnessReport",
    "BatchLoudnessResult",
]
