"""Console output for the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass

import click


@dataclass(frozen=True)
class Log:
    """Prints status lines to stdout; verbose lines only when enabled."""

    verbose_enabled: bool = False

    def info(self, msg: str) -> None:
        click.echo(msg)

    def verbose(self, msg: str) -> None:
        if self.verbose_enabled:
            click.echo(msg)


def _format_elapsed(seconds: float) -> str:
    """Round an elapsed time to milliseconds for display (e.g. ``12ms``, ``1.204s``)."""
    ms = round(seconds * 1000)
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:g}s"
