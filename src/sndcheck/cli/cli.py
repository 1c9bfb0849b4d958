"""
sndcheck CLI - loudness quality scoring for audio recordings
"""

import click

from sndcheck import __version__

from .commands import batch, check, config


@click.group()
@click.version_option(version=__version__, prog_name="sndcheck")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (takes priority over the search path)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.pass_context
def cli(ctx: click.Context, config_path: str, verbose: bool, quiet: bool) -> None:
    """sndcheck - score how much of a recording is loud enough

    Splits the mono downmix into fixed-size buckets, computes the RMS of each
    and reports the share of buckets above a threshold together with the
    distribution of bucket loudness.

    Use 'sndcheck COMMAND --help' for more information on a command.
    """
    from sndcheck.cli.service_helpers import handle_result, services
    from sndcheck.core.logger import set_level

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    level = "ERROR" if quiet else "DEBUG" if verbose else "WARNING"

    # The config commands load what they need themselves, so they still
    # work while the config files are broken
    if ctx.invoked_subcommand != "config":
        loaded = handle_result(services.config.load_config(config_path))
        ctx.obj["config"] = loaded
        if not (quiet or verbose):
            level = loaded.get("logging", "level", level)

    set_level(level)


cli.add_command(check)
cli.add_command(batch)
cli.add_command(config)


if __name__ == "__main__":
    cli()
