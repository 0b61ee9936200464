from __future__ import annotations

import platform

import click
import rich_click

import repofilter

from ..context import CLIContext
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.command(name="version", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def version_cmd(ctx: CLIContext) -> None:
    """Show the repofilter version."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        return CommandOutput(
            data={
                "version": repofilter.__version__,
                "pythonVersion": platform.python_version(),
                "operators": len(repofilter.CanonicalOperator),
            }
        )

    run_command(ctx, command="version", fn=fn)
