"""Loudness checks over many files."""

from typing import Optional

import click

from sndcheck.cli.analysis_options import analysis_options


def _fmt(value: Optional[float], digits: int = 4) -> str:
    return "n/a" if value is None else f"{value:.{digits}f}"


@click.command()
@click.argument("path", type=click.Path())
@click.option(
    "--recursive/--no-recursive",
    default=None,
    help="Search subdirectories (default from config: recursive)",
)
@analysis_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output CSV file for per-file results")
def batch(
    path: str,
    recursive: Optional[bool],
    threshold: Optional[float],
    bucket_size: Optional[int],
    boundary: Optional[str],
    block_frames: Optional[int],
    min_pct_good: Optional[float],
    output: Optional[str],
) -> None:
    """Score every audio file in a directory.

    Files that cannot be decoded are reported and skipped. The command exits
    with status 1 when any file failed or fell below --min-pct-good.

    Examples:
        sndcheck batch ./takes
        sndcheck batch ./takes --no-recursive -o scores.csv --min-pct-good 75
    """
    from pathlib import Path

    from rich.console import Console
    from rich.markup import escape
    from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
    from rich.table import Table

    from sndcheck.cli.analysis_options import current_config, resolve_settings
    from sndcheck.cli.service_helpers import handle_result, services

    config = current_config()
    settings = resolve_settings(
        config,
        threshold=threshold,
        bucket_size=bucket_size,
        boundary=boundary,
        block_frames=block_frames,
        min_pct_good=min_pct_good,
    )
    if recursive is None:
        recursive = config.get("batch", "recursive", True)

    console = Console()
    service = services.loudness

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
        disable=not console.is_terminal,
    ) as progress:
        task = progress.add_task("Scoring files", total=None)

        def on_progress(done: int, total: int, last_file: Optional[str]) -> None:
            progress.update(task, completed=done, total=total)

        service.set_progress_callback(on_progress)
        try:
            result = service.analyze_batch(
                path,
                settings.loudness,
                recursive=recursive,
                output_path=output,
                min_pct_good=settings.min_pct_good,
                block_frames=settings.block_frames,
            )
        finally:
            service.set_progress_callback(None)

    batch_result = handle_result(result)

    table = Table(title="Loudness", show_header=True)
    for column in ("File", "Buckets", "Good", "% Good", "Mean RMS", "Stddev"):
        table.add_column(column, justify="left" if column == "File" else "right", no_wrap=column == "File")
    table.add_column("Status")

    for row in batch_result.rows:
        name = escape(Path(row["filepath"]).name)
        if row.get("error"):
            table.add_row(name, "-", "-", "-", "-", "-", "[red]error[/red]")
            continue
        pct = row["pct_good"]
        if settings.min_pct_good > 0 and (pct is None or pct < settings.min_pct_good):
            status = "[yellow]below[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(
            name,
            str(row["bucket_count"]),
            str(row["good_count"]),
            _fmt(pct, 2),
            _fmt(row["mean"]),
            _fmt(row["stddev"]),
            status,
        )

    console.print(table)

    for row in batch_result.rows:
        if row.get("error"):
            console.print(f"[yellow]![/yellow] {escape(row['filepath'])}: {escape(row['error'])}")

    click.echo(
        f"Analyzed {batch_result.successful} of {batch_result.total} files: "
        f"{batch_result.failed} failed, {batch_result.below_threshold} below threshold"
    )
    if batch_result.output_path:
        console.print(f"[green]✓[/green] Results saved to {batch_result.output_path}")

    if batch_result.failed or batch_result.below_threshold:
        raise SystemExit(1)
