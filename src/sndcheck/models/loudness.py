"""Loudness report models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sndcheck.core.loudness import LoudnessAnalysis

# Per-file columns written by batch runs, in output order
SUMMARY_FIELDS = [
    "filepath",
    "bucket_count",
    "good_count",
    "pct_good",
    "min",
    "max",
    "mean",
    "stddev",
    "variance",
    "skewness",
    "kurtosis",
]


@dataclass
class LoudnessReport:
    """
    Loudness analysis of one audio source, with the decoder's stream info.

    Attributes:
        analysis: The bucketed loudness analysis
        source_path: File the samples were decoded from
        sample_rate: Source sample rate in Hz (0 when unknown)
        channels: Source channel count before downmixing
        frames: Frames reported by the decoder
    """

    analysis: LoudnessAnalysis
    source_path: Optional[str] = None
    sample_rate: int = 0
    channels: int = 1
    frames: int = 0

    @property
    def num_samples(self) -> int:
        """Mono samples fed to the analyzer."""
        return self.analysis.samples_analyzed + self.analysis.samples_discarded

    @property
    def bucket_count(self) -> int:
        return self.analysis.bucket_count

    @property
    def good_count(self) -> int:
        return self.analysis.good_count

    @property
    def pct_good(self) -> Optional[float]:
        return self.analysis.pct_good

    @property
    def bucket_rms(self) -> List[float]:
        """Bucket RMS values as plain floats."""
        return [float(v) for v in self.analysis.bucket_rms]

    def passes(self, min_pct_good: float) -> bool:
        """
        Check the report against a quality bar.

        A report with no buckets never passes a non-zero bar.
        """
        if min_pct_good <= 0:
            return True
        pct = self.pct_good
        return pct is not None and pct >= min_pct_good

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary exposing every report field."""
        result: Dict[str, Any] = {"filepath": self.source_path}
        result["sample_rate"] = self.sample_rate
        result["channels"] = self.channels
        result["frames"] = self.frames
        result["num_samples"] = self.num_samples
        result.update(self.analysis.to_dict())
        return result

    def summary_row(self) -> Dict[str, Any]:
        """Flat row with the per-file summary columns."""
        data = self.to_dict()
        return {key: data.get(key) for key in SUMMARY_FIELDS}


@dataclass
class BatchLoudnessResult:
    """
    Result of analyzing several files.

    Attributes:
        rows: One summary row per file; failed files carry an "error" entry
        successful: Files analyzed
        failed: Files that could not be analyzed
        below_threshold: Files analyzed but under the quality bar
        output_path: CSV summary written, if any
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    successful: int = 0
    failed: int = 0
    below_threshold: int = 0
    output_path: Optional[str] = None

    @property
    def total(self) -> int:
        """Total number of files processed."""
        return self.successful + self.failed
