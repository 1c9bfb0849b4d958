"""
CLI Service Helpers
===================

Commands reach the services through ``services`` and turn a failed
ServiceResult into an ``Error: ...`` line on stderr plus the result's
exit status.

Usage:
    from sndcheck.cli.service_helpers import handle_result, services

    report = handle_result(services.loudness.analyze_file("take1.wav"))
"""

from typing import TYPE_CHECKING, NoReturn, Optional, TypeVar

import click

# LAZY IMPORT: the services (and numpy/soundfile behind them) load on first access
if TYPE_CHECKING:
    from sndcheck.services import ServiceFactory
    from sndcheck.services.base import ServiceResult
    from sndcheck.services.config import ConfigService
    from sndcheck.services.loudness import LoudnessService

T = TypeVar("T")

_factory: Optional["ServiceFactory"] = None


def get_factory() -> "ServiceFactory":
    """The CLI's ServiceFactory, created on first use over the local disk."""
    global _factory
    if _factory is None:
        from sndcheck.services import ServiceFactory

        _factory = ServiceFactory()
    return _factory


class _ServiceAccessor:
    """Attribute access to the CLI factory's services."""

    @property
    def loudness(self) -> "LoudnessService":
        return get_factory().loudness

    @property
    def config(self) -> "ConfigService":
        return get_factory().config


services = _ServiceAccessor()


def exit_with_error(message: str, code: int = 1) -> NoReturn:
    """Print ``Error: message`` to stderr and exit with ``code``."""
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)


def handle_result(result: "ServiceResult[T]") -> T:
    """Return the result's data, or exit with its error and exit code."""
    if not result.success:
        exit_with_error(result.error or "Unknown error", result.exit_code)
    return result.data
