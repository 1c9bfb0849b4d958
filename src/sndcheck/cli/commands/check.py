"""Single-file loudness check."""

import logging
from typing import Optional

import click

from sndcheck.cli.analysis_options import analysis_options
from sndcheck.core.config import DEFAULT_CHART_URL, OUTPUT_FORMATS

logger = logging.getLogger(__name__)


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("threshold_arg", metavar="[THRESHOLD]", required=False, type=float)
@click.argument("bucket_size_arg", metavar="[BUCKET_SIZE]", required=False, type=int)
@analysis_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default from config: text)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the report to a file")
def check(
    file: str,
    threshold_arg: Optional[float],
    bucket_size_arg: Optional[int],
    threshold: Optional[float],
    bucket_size: Optional[int],
    boundary: Optional[str],
    block_frames: Optional[int],
    min_pct_good: Optional[float],
    output_format: Optional[str],
    output: Optional[str],
) -> None:
    """Score the loudness of a single audio file.

    THRESHOLD and BUCKET_SIZE may be given positionally as in
    'sndcheck check FILE 0.2 44100'; --threshold and --bucket-size win
    over them.

    Examples:
        sndcheck check take1.wav
        sndcheck check take1.wav 0.2 --format json
        sndcheck check take1.flac --min-pct-good 80
    """
    from sndcheck.cli.analysis_options import current_config, resolve_settings
    from sndcheck.cli.formatters import render
    from sndcheck.cli.service_helpers import exit_with_error, handle_result, services

    config = current_config()
    settings = resolve_settings(
        config,
        threshold=threshold if threshold is not None else threshold_arg,
        bucket_size=bucket_size if bucket_size is not None else bucket_size_arg,
        boundary=boundary,
        block_frames=block_frames,
        min_pct_good=min_pct_good,
    )

    result = services.loudness.analyze_file(file, settings.loudness, settings.block_frames)
    report = handle_result(result)
    for warning in result.warnings:
        logger.info(warning)

    output_format = output_format or config.get("output", "format", "text")
    chart_url = config.get("output", "chart_url", DEFAULT_CHART_URL)
    text = render(report, output_format, chart_url)

    if output:
        handle_result(services.loudness.write_report(output, text))
        click.echo(f"Report saved to {output}")
    else:
        click.echo(text, nl=False)

    if not report.passes(settings.min_pct_good):
        pct = "n/a" if report.pct_good is None else f"{report.pct_good:.2f}%"
        exit_with_error(
            f"{pct} of buckets above threshold, required {settings.min_pct_good:.2f}%", 1
        )
