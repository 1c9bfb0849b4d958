"""Reusable Click decorators and settings resolution for analysis commands."""

from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

import click

from sndcheck.core.config import Config
from sndcheck.core.exceptions import InvalidConfigurationError
from sndcheck.core.loudness import BOUNDARY_MODES, LoudnessConfig


def analysis_options(f: Callable) -> Callable:
    """Add loudness analysis options to a command.

    Adds:
    - --threshold: RMS level a bucket must exceed to count as good
    - --bucket-size: Samples per bucket
    - --boundary: Bucket boundary policy
    - --block-frames: Frames per decoder read
    - --min-pct-good: Quality bar in percent

    Every option defaults to None so the config file can fill it in.

    Args:
        f: Click command function

    Returns:
        Decorated function with analysis options
    """

    @click.option("--threshold", "-t", type=float, default=None, help="RMS threshold for a good bucket (default 0.13)")
    @click.option("--bucket-size", "-b", type=int, default=None, help="Samples per bucket (default 22000)")
    @click.option(
        "--boundary",
        type=click.Choice(BOUNDARY_MODES),
        default=None,
        help="Bucket boundary policy: exact, or legacy (stride of bucket size + 1)",
    )
    @click.option("--block-frames", type=click.IntRange(min=1), default=None, help="Frames per decoder read")
    @click.option(
        "--min-pct-good",
        type=click.FloatRange(0.0, 100.0),
        default=None,
        help="Fail when the percentage of good buckets is below this value",
    )
    @wraps(f)
    def wrapper(*args, **kwargs):
        return f(*args, **kwargs)

    return wrapper


@dataclass
class AnalysisSettings:
    """Analysis parameters after merging options, positionals and config."""

    loudness: LoudnessConfig
    block_frames: int
    min_pct_good: float


def resolve_settings(
    config: Config,
    threshold: Optional[float] = None,
    bucket_size: Optional[int] = None,
    boundary: Optional[str] = None,
    block_frames: Optional[int] = None,
    min_pct_good: Optional[float] = None,
) -> AnalysisSettings:
    """
    Merge explicit values over the loaded configuration.

    Exits with the configuration error status when the merged values are invalid.
    """
    from sndcheck.cli.service_helpers import exit_with_error

    try:
        loudness = config.loudness_config(threshold, bucket_size, boundary)
    except InvalidConfigurationError as e:
        exit_with_error(str(e), e.exit_code)

    return AnalysisSettings(
        loudness=loudness,
        block_frames=block_frames or config.get("decoder", "block_frames", 1024),
        min_pct_good=min_pct_good
        if min_pct_good is not None
        else config.get("analysis", "min_pct_good", 0.0),
    )


def current_config() -> Config:
    """Config loaded and validated by the root command."""
    return click.get_current_context().find_root().obj["config"]
