"""Configuration management commands."""

from typing import Optional

import click


def _root_config_path() -> Optional[str]:
    return click.get_current_context().find_root().obj.get("config_path")


@click.group()
def config() -> None:
    """Inspect and create configuration files."""


@config.command("show")
def config_show() -> None:
    """Show the merged configuration and any invalid values."""
    from rich.console import Console
    from rich.markup import escape

    from sndcheck.cli.service_helpers import handle_result, services

    console = Console()
    result = services.config.load_config(_root_config_path(), strict=False)
    config_obj = handle_result(result)

    console.print("\n[bold]Current Configuration[/bold]")
    console.print(f"[dim]Source: {config_obj.source or 'defaults (no config file found)'}[/dim]\n")

    for section_name, section in config_obj.to_dict().items():
        console.print(f"[bold blue]\\[{section_name}][/bold blue]")
        for key, value in section.items():
            console.print(f"  {key} = {escape(repr(value))}")
        console.print()

    for warning in result.warnings:
        console.print(f"[yellow]! Invalid:[/yellow] {escape(warning)}")


@config.command("init")
@click.option("--output", "-o", default="sndcheck.toml", help="Output file path")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing file")
def config_init(output: str, force: bool) -> None:
    """Write a commented default configuration file."""
    from rich.console import Console

    from sndcheck.cli.service_helpers import handle_result, services

    written = handle_result(services.config.create_default_config(output, force=force))
    Console().print(f"[green]✓[/green] Created configuration file: {written}")


@config.command("path")
def config_path() -> None:
    """List config files in priority order and mark the one in effect."""
    from pathlib import Path

    from rich.console import Console
    from rich.markup import escape

    from sndcheck.cli.service_helpers import handle_result, services

    console = Console()
    explicit = _root_config_path()
    candidates = ([Path(explicit)] if explicit else []) + handle_result(
        services.config.get_config_locations()
    )
    active = next((path for path in candidates if path.is_file()), None)

    console.print("\n[bold]Config files, highest priority first[/bold]\n")
    for i, path in enumerate(candidates, 1):
        if path == active:
            status = "[green]✓ active[/green]"
        elif path.is_file():
            status = "[dim]merged below the active file[/dim]"
        else:
            status = "[dim]not found[/dim]"
        label = " (--config)" if explicit and i == 1 else ""
        console.print(f"  {i}. {escape(str(path))}{label} {status}")
    console.print()
