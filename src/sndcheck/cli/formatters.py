"""
Report Formatters
=================

Pure functions that render a LoudnessReport for the terminal or for files.
None of them touch the analysis; undefined statistics render as ``n/a``.
"""

import json
from typing import Iterable, Optional

from sndcheck.core.config import DEFAULT_CHART_URL
from sndcheck.models.loudness import LoudnessReport

NOT_AVAILABLE = "n/a"

# Width of the right-aligned labels in the text report
_LABEL_WIDTH = 8


def _line(label: str, value: object) -> str:
    return f"{label:>{_LABEL_WIDTH}}: {value}"


def _float(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:f}"


def format_text(report: LoudnessReport, chart_url: Optional[str] = DEFAULT_CHART_URL) -> str:
    """
    Render the human-readable report block.

    Args:
        report: Analysis of one source
        chart_url: Sparkline base URL; None leaves the chart line out

    Returns:
        Multi-line report text
    """
    analysis = report.analysis
    stats = analysis.statistics

    lines = [
        _line("thresh", f"{analysis.config.threshold:f}"),
        _line("bkt_siz", analysis.config.bucket_size),
        _line("chan", report.channels),
        _line("frames", report.frames),
        _line("samples", report.num_samples),
        _line("buckets", report.bucket_count),
        _line("good", report.good_count),
    ]

    if not analysis.has_data:
        lines.append(_line("pctgood", "no data"))
        return "\n".join(lines) + "\n"

    lines.extend(
        [
            _line("pctgood", f"{report.pct_good:.2f} %"),
            _line("minrms", _float(stats.min)),
            _line("maxrms", _float(stats.max)),
            _line("mean", _float(stats.mean)),
            _line("stddev", _float(stats.stddev)),
            _line("variance", _float(stats.variance)),
            _line("skewness", _float(stats.skewness)),
            _line("kurtosis", _float(stats.kurtosis)),
        ]
    )

    if chart_url:
        lines.extend(["", "RMS Buckets", "", format_chart_url(report.bucket_rms, chart_url)])

    return "\n".join(lines) + "\n"


def format_json(report: LoudnessReport, indent: int = 2) -> str:
    """Render the full report dictionary as JSON."""
    return json.dumps(report.to_dict(), indent=indent, default=str) + "\n"


def format_csv(report: LoudnessReport) -> str:
    """Render the bucket RMS sequence as one comma-separated line."""
    return ",".join(repr(value) for value in report.bucket_rms) + "\n"


def format_chart_url(bucket_rms: Iterable[float], base_url: str = DEFAULT_CHART_URL) -> str:
    """
    Build a sparkline bar-chart URL from bucket RMS values.

    Each value is scaled by 1000 and truncated to an integer.
    """
    values = ",".join(str(int(value * 1000)) for value in bucket_rms)
    return f"{base_url}?{values}"


def render(report: LoudnessReport, output_format: str, chart_url: str = DEFAULT_CHART_URL) -> str:
    """Render a report in one of the configured output formats."""
    if output_format == "json":
        return format_json(report)
    if output_format == "csv":
        return format_csv(report)
    if output_format == "url":
        return format_chart_url(report.bucket_rms, chart_url) + "\n"
    return format_text(report, chart_url)
