"""
Configuration Management
========================

sndcheck reads TOML settings from a cascade of files, highest priority first:

1. the file passed with ``--config``
2. ./sndcheck.toml
3. ~/.config/sndcheck/config.toml
4. /etc/sndcheck/config.toml

Each file is merged key by key over DEFAULT_CONFIG, so a file only needs the
settings it changes. ``sndcheck config init`` writes the full default file
with a note on every key.

A file that cannot be read or parsed is a configuration error wherever it
sits in the cascade, and so is a value rejected by validate_config().
"""

import copy
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sndcheck.core.exceptions import InvalidConfigurationError
from sndcheck.core.logger import parse_level
from sndcheck.core.loudness import (
    BOUNDARY_EXACT,
    DEFAULT_BUCKET_SIZE,
    DEFAULT_THRESHOLD,
    LoudnessConfig,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("text", "json", "csv", "url")
DEFAULT_CHART_URL = "http://sparksvg.me/bar.svg"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "analysis": {
        "threshold": DEFAULT_THRESHOLD,
        "bucket_size": DEFAULT_BUCKET_SIZE,
        "boundary": BOUNDARY_EXACT,
        "min_pct_good": 0.0,
    },
    "decoder": {
        "block_frames": 1024,
    },
    "output": {
        "format": "text",
        "chart_url": DEFAULT_CHART_URL,
    },
    "batch": {
        "recursive": True,
    },
    "logging": {
        "level": "WARNING",
    },
}

SECTIONS = tuple(DEFAULT_CONFIG)

# Notes written above each key by `sndcheck config init`
_KEY_NOTES = {
    ("analysis", "threshold"): "RMS a bucket must exceed to count as good, 0.0 to 1.0",
    ("analysis", "bucket_size"): "Mono samples per bucket",
    ("analysis", "boundary"): '"exact", or "legacy" for buckets of bucket_size + 1 samples',
    ("analysis", "min_pct_good"): "Required percentage of good buckets; 0 turns the gate off",
    ("decoder", "block_frames"): "Frames per decoder read",
    ("output", "format"): "text, json, csv or url",
    ("output", "chart_url"): "Sparkline base URL for text and url output",
    ("batch", "recursive"): "Search subdirectories in `sndcheck batch`",
    ("logging", "level"): "DEBUG, INFO, WARNING, ERROR or CRITICAL",
}

CONFIG_LOCATIONS = [
    Path("sndcheck.toml"),
    Path("~/.config/sndcheck/config.toml").expanduser(),
    Path("/etc/sndcheck/config.toml"),
]


@dataclass
class Config:
    """
    Merged settings, one dictionary per section.

    Attributes:
        source: Highest-priority file that contributed, None for pure defaults
    """

    analysis: Dict[str, Any] = field(default_factory=dict)
    decoder: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)
    batch: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        values = getattr(self, section, None) if section in SECTIONS else None
        if not values:
            return default
        return values.get(key, default)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: getattr(self, name) for name in SECTIONS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        return cls(**{name: dict(data.get(name, {})) for name in SECTIONS}, source=source)

    def loudness_config(
        self,
        threshold: Optional[float] = None,
        bucket_size: Optional[int] = None,
        boundary: Optional[str] = None,
    ) -> LoudnessConfig:
        """
        Analysis parameters, with explicit arguments winning over ``[analysis]``.

        Raises:
            InvalidConfigurationError: If the merged values are invalid.
        """

        def pick(value: Any, key: str, default: Any) -> Any:
            return self.get("analysis", key, default) if value is None else value

        return LoudnessConfig(
            threshold=pick(threshold, "threshold", DEFAULT_THRESHOLD),
            bucket_size=pick(bucket_size, "bucket_size", DEFAULT_BUCKET_SIZE),
            boundary=pick(boundary, "boundary", BOUNDARY_EXACT),
        )


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse one TOML file.

    Raises:
        InvalidConfigurationError: If the file is missing, unreadable or not TOML.
    """
    path = Path(filepath)
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise InvalidConfigurationError(f"Config file not found: {path}", key="config") from e
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise InvalidConfigurationError(
            f"Cannot load config file {path}: {e}", key="config"
        ) from e


def _setting(config: Config, section: str, key: str) -> Any:
    return config.get(section, key, DEFAULT_CONFIG[section][key])


def validate_config(config: Config) -> None:
    """
    Reject settings the commands cannot run with.

    Raises:
        InvalidConfigurationError: Naming the first offending setting.
    """
    config.loudness_config()

    block_frames = _setting(config, "decoder", "block_frames")
    if isinstance(block_frames, bool) or not isinstance(block_frames, int) or block_frames <= 0:
        raise InvalidConfigurationError(
            f"block_frames must be a positive integer, got {block_frames!r}.",
            key="decoder.block_frames",
        )

    min_pct_good = _setting(config, "analysis", "min_pct_good")
    if (
        isinstance(min_pct_good, bool)
        or not isinstance(min_pct_good, (int, float))
        or not 0.0 <= min_pct_good <= 100.0
    ):
        raise InvalidConfigurationError(
            f"min_pct_good must be within [0, 100], got {min_pct_good!r}.",
            key="analysis.min_pct_good",
        )

    output_format = _setting(config, "output", "format")
    if output_format not in OUTPUT_FORMATS:
        raise InvalidConfigurationError(
            f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}.",
            key="output.format",
        )

    recursive = _setting(config, "batch", "recursive")
    if not isinstance(recursive, bool):
        raise InvalidConfigurationError(
            f"recursive must be true or false, got {recursive!r}.", key="batch.recursive"
        )

    parse_level(_setting(config, "logging", "level"))


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value)


def default_config_text() -> str:
    """DEFAULT_CONFIG as commented TOML."""
    lines = ["# sndcheck configuration", ""]
    for section, values in DEFAULT_CONFIG.items():
        lines.append(f"[{section}]")
        for key, value in values.items():
            lines.append(f"# {_KEY_NOTES[(section, key)]}")
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
    return "\n".join(lines)


def create_default_config_file(filepath: Union[str, Path] = "sndcheck.toml") -> str:
    """Write the default configuration file and return its path."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config_text(), encoding="utf-8")
    return str(path)


def get_config_locations() -> List[Path]:
    """Search locations, highest priority first."""
    return list(CONFIG_LOCATIONS)


def _merge_file(data: Dict[str, Dict[str, Any]], file_data: Dict[str, Any], path: Path) -> None:
    for section, values in file_data.items():
        if section not in data:
            logger.warning(f"Ignoring unknown section [{section}] in {path}")
            continue
        if not isinstance(values, dict):
            raise InvalidConfigurationError(f"[{section}] in {path} must be a table.", key=section)
        data[section].update(values)


def load_config_cascade(explicit_path: Optional[str] = None) -> Config:
    """
    Merge the search locations and ``explicit_path`` over the defaults.

    Files are applied lowest priority first, so later files override earlier
    ones key by key; the explicit path is applied last.

    Raises:
        InvalidConfigurationError: If any file to merge is missing (explicit
            path only), unreadable, not TOML, or has a non-table section.
    """
    data = copy.deepcopy(DEFAULT_CONFIG)
    files = [path for path in reversed(get_config_locations()) if path.is_file()]
    if explicit_path:
        files.append(Path(explicit_path))

    source = None
    for path in files:
        _merge_file(data, load_toml(path), path)
        source = str(path)
        logger.debug(f"Merged configuration from {path}")

    return Config.from_dict(data, source=source)
