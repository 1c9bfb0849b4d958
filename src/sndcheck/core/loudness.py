"""
Bucketed Loudness Analysis
==========================

Score the loudness quality of a mono sample stream.

The stream is cut into fixed-size, non-overlapping buckets (about 500 ms
each at the default of 22000 samples for 44.1 kHz audio). For every bucket
the RMS of the samples is computed; a bucket is "good" when its RMS strictly
exceeds the threshold. The score is the percentage of good buckets, reported
together with descriptive statistics over the bucket RMS values.

This is a cheap energy-threshold heuristic, not a perceptual loudness model:
no frequency weighting, no gating, no LUFS-style integration.

Bucket boundaries:
    "exact"   A bucket closes when the next sample would push its running
              count above ``bucket_size``; a full bucket left at the end of
              the stream is closed as well. Every bucket holds exactly
              ``bucket_size`` samples.
    "legacy"  The bucket closes only after its running count exceeds
              ``bucket_size``, so each bucket consumes ``bucket_size + 1``
              samples while the RMS divisor stays ``bucket_size``. Older
              sndchecker reports were made this way; it is almost certainly
              an off-by-one and exists for comparing against historical
              numbers only.

Samples left over after the last complete bucket are discarded.

Example:
    >>> config = LoudnessConfig(threshold=0.5, bucket_size=2)
    >>> result = analyze_loudness(np.ones(4), config)
    >>> result.bucket_count, result.good_count, result.pct_good
    (2, 2, 100.0)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from sndcheck.core.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.13
DEFAULT_BUCKET_SIZE = 22000  # 500 ms @ 44.1 kHz; not derived from the file's rate
BOUNDARY_EXACT = "exact"
BOUNDARY_LEGACY = "legacy"
BOUNDARY_MODES = (BOUNDARY_EXACT, BOUNDARY_LEGACY)

# Fields of LoudnessStatistics that may be undefined
MOMENT_FIELDS = ("min", "max", "mean", "variance", "stddev", "skewness", "kurtosis")


@dataclass(frozen=True)
class LoudnessConfig:
    """
    Parameters of one analysis run.

    Validated on construction; an invalid value raises
    InvalidConfigurationError before any audio is touched.

    Attributes:
        threshold: RMS level a bucket must strictly exceed to count as good
        bucket_size: Samples per bucket
        boundary: Bucket closing policy, "exact" or "legacy"
    """

    threshold: float = DEFAULT_THRESHOLD
    bucket_size: int = DEFAULT_BUCKET_SIZE
    boundary: str = BOUNDARY_EXACT

    def __post_init__(self) -> None:
        if isinstance(self.bucket_size, bool) or not isinstance(
            self.bucket_size, (int, np.integer)
        ):
            raise InvalidConfigurationError(
                f"bucket_size must be an integer, got {self.bucket_size!r}.",
                key="bucket_size",
            )
        if self.bucket_size <= 0:
            raise InvalidConfigurationError(
                f"bucket_size must be positive, got {self.bucket_size}.",
                key="bucket_size",
            )

        if isinstance(self.threshold, bool) or not isinstance(
            self.threshold, (int, float, np.floating, np.integer)
        ):
            raise InvalidConfigurationError(
                f"threshold must be a number, got {self.threshold!r}.",
                key="threshold",
            )
        if not math.isfinite(self.threshold) or not 0.0 <= self.threshold <= 1.0:
            raise InvalidConfigurationError(
                f"threshold must be within [0.0, 1.0], got {self.threshold}.",
                key="threshold",
            )

        if self.boundary not in BOUNDARY_MODES:
            raise InvalidConfigurationError(
                f"boundary must be one of {', '.join(BOUNDARY_MODES)}, got {self.boundary!r}.",
                key="boundary",
            )

        object.__setattr__(self, "bucket_size", int(self.bucket_size))
        object.__setattr__(self, "threshold", float(self.threshold))

    @property
    def bucket_stride(self) -> int:
        """Samples consumed per bucket under the boundary policy."""
        if self.boundary == BOUNDARY_LEGACY:
            return self.bucket_size + 1
        return self.bucket_size

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "threshold": self.threshold,
            "bucket_size": self.bucket_size,
            "boundary": self.boundary,
        }


@dataclass(frozen=True)
class LoudnessStatistics:
    """
    Summary statistics over the bucket RMS sequence.

    Undefined values are None, never NaN:
        - min, max, mean when there are no buckets
        - variance, stddev when there are fewer than two buckets
        - skewness, kurtosis when stddev is undefined or zero

    Attributes:
        count: Number of buckets
        good_count: Buckets whose RMS exceeded the threshold
        min: Smallest bucket RMS
        max: Largest bucket RMS
        mean: Mean bucket RMS
        variance: Sample variance (Bessel-corrected)
        stddev: Square root of variance
        skewness: Third standardized moment
        kurtosis: Excess kurtosis (fourth standardized moment minus 3)
    """

    count: int
    good_count: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    variance: Optional[float] = None
    stddev: Optional[float] = None
    skewness: Optional[float] = None
    kurtosis: Optional[float] = None

    @property
    def unavailable(self) -> List[str]:
        """Names of the statistics that are undefined for this data."""
        return [name for name in MOMENT_FIELDS if getattr(self, name) is None]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "count": self.count,
            "good_count": self.good_count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "variance": self.variance,
            "stddev": self.stddev,
            "skewness": self.skewness,
            "kurtosis": self.kurtosis,
        }


@dataclass(frozen=True)
class LoudnessAnalysis:
    """
    Complete result of one analysis run.

    Attributes:
        config: Parameters the run used
        bucket_rms: Read-only RMS value per bucket, in bucket order
        good_count: Buckets classified good
        statistics: Summary statistics over bucket_rms
        samples_analyzed: Samples that fell into complete buckets
        samples_discarded: Trailing samples that did not fill a bucket
    """

    config: LoudnessConfig
    bucket_rms: np.ndarray
    good_count: int
    statistics: LoudnessStatistics
    samples_analyzed: int = 0
    samples_discarded: int = 0
    unavailable: List[str] = field(default_factory=list)

    @property
    def bucket_count(self) -> int:
        """Number of complete buckets analyzed."""
        return int(self.bucket_rms.size)

    @property
    def pct_good(self) -> Optional[float]:
        """Percentage of good buckets, or None when there are no buckets."""
        return percent_good(self.good_count, self.bucket_count)

    @property
    def has_data(self) -> bool:
        """True when at least one bucket was analyzed."""
        return self.bucket_count > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the report field names."""
        stats = self.statistics
        return {
            "threshold": self.config.threshold,
            "bucket_size": self.config.bucket_size,
            "boundary": self.config.boundary,
            "bucket_count": self.bucket_count,
            "good_count": self.good_count,
            "pct_good": self.pct_good,
            "min": stats.min,
            "max": stats.max,
            "mean": stats.mean,
            "stddev": stats.stddev,
            "variance": stats.variance,
            "skewness": stats.skewness,
            "kurtosis": stats.kurtosis,
            "samples_analyzed": self.samples_analyzed,
            "samples_discarded": self.samples_discarded,
            "unavailable": list(self.unavailable),
            "bucket_rms_sequence": [float(v) for v in self.bucket_rms],
        }


def compute_bucket_rms(samples: np.ndarray, config: LoudnessConfig) -> np.ndarray:
    """
    Compute the RMS of every complete bucket.

    Args:
        samples: Mono sample stream.
        config: Analysis parameters (bucket size and boundary policy).

    Returns:
        Read-only float64 array with one RMS value per complete bucket.
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    stride = config.bucket_stride
    n_buckets = data.size // stride

    if n_buckets == 0:
        rms = np.zeros(0, dtype=np.float64)
    else:
        buckets = data[: n_buckets * stride].reshape(n_buckets, stride)
        sum_of_squares = np.sum(buckets * buckets, axis=1)
        rms = np.sqrt(sum_of_squares / config.bucket_size)

    rms.setflags(write=False)
    return rms


def count_good_buckets(bucket_rms: np.ndarray, threshold: float) -> int:
    """Count buckets whose RMS strictly exceeds the threshold."""
    return int(np.count_nonzero(np.asarray(bucket_rms) > threshold))


def percent_good(good_count: int, bucket_count: int) -> Optional[float]:
    """
    Percentage of good buckets.

    Returns:
        good_count / bucket_count * 100, or None when there are no buckets.
    """
    if bucket_count == 0:
        return None
    return float(good_count) / float(bucket_count) * 100.0


def compute_statistics(bucket_rms: np.ndarray, good_count: int = 0) -> LoudnessStatistics:
    """
    Compute summary statistics over a bucket RMS sequence.

    Args:
        bucket_rms: RMS value per bucket.
        good_count: Number of good buckets, carried into the result.

    Returns:
        LoudnessStatistics with undefined values set to None.
    """
    r = np.asarray(bucket_rms, dtype=np.float64).reshape(-1)
    n = int(r.size)

    if n == 0:
        return LoudnessStatistics(count=0, good_count=good_count)

    minimum = float(r.min())
    maximum = float(r.max())
    mean = float(np.sum(r) / n)

    if n < 2:
        return LoudnessStatistics(
            count=n, good_count=good_count, min=minimum, max=maximum, mean=mean
        )

    # A constant sequence has exactly zero spread; do not let rounding in
    # the mean leak a tiny stddev into the higher moments.
    if minimum == maximum:
        deviations = np.zeros(n, dtype=np.float64)
    else:
        deviations = r - mean

    squared = deviations * deviations
    sum_sq = float(np.sum(squared))
    sum_cube = float(np.sum(squared * deviations))
    sum_quad = float(np.sum(squared * squared))

    variance = sum_sq / (n - 1)
    stddev = math.sqrt(variance)

    if stddev == 0.0:
        return LoudnessStatistics(
            count=n,
            good_count=good_count,
            min=minimum,
            max=maximum,
            mean=mean,
            variance=variance,
            stddev=stddev,
        )

    skewness = sum_cube / (n * stddev**3)
    kurtosis = sum_quad / (n * stddev**4) - 3.0

    return LoudnessStatistics(
        count=n,
        good_count=good_count,
        min=minimum,
        max=maximum,
        mean=mean,
        variance=variance,
        stddev=stddev,
        skewness=skewness,
        kurtosis=kurtosis,
    )


def analyze_loudness(
    samples: np.ndarray,
    config: Optional[LoudnessConfig] = None,
) -> LoudnessAnalysis:
    """
    Run the bucketed loudness analysis over a mono sample stream.

    The input is not modified; calling this twice with the same samples and
    config yields identical results.

    Args:
        samples: Mono sample stream, typically in [-1.0, 1.0].
        config: Analysis parameters (default: LoudnessConfig()).

    Returns:
        LoudnessAnalysis with bucket RMS values, good count and statistics.
    """
    if config is None:
        config = LoudnessConfig()

    total = int(np.asarray(samples).size)
    bucket_rms = compute_bucket_rms(samples, config)
    good_count = count_good_buckets(bucket_rms, config.threshold)
    statistics = compute_statistics(bucket_rms, good_count)

    analyzed = bucket_rms.size * config.bucket_stride
    unavailable = statistics.unavailable
    if bucket_rms.size == 0:
        unavailable = ["pct_good"] + unavailable

    logger.debug(
        f"Analyzed {total} samples into {bucket_rms.size} buckets "
        f"({good_count} good, {total - analyzed} discarded)"
    )
    if unavailable:
        logger.info(f"Statistics unavailable for this input: {', '.join(unavailable)}")

    return LoudnessAnalysis(
        config=config,
        bucket_rms=bucket_rms,
        good_count=good_count,
        statistics=statistics,
        samples_analyzed=int(analyzed),
        samples_discarded=int(total - analyzed),
        unavailable=unavailable,
    )
