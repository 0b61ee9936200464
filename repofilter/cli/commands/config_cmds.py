from __future__ import annotations

import os
from contextlib import suppress

import click
import rich_click

from ..config import config_init_template, load_config
from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.group(name="config", cls=rich_click.RichGroup)
def config_group() -> None:
    """Config file and allow-list profiles."""


@config_group.command(name="path", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def config_path(ctx: CLIContext) -> None:
    """Show where config.toml is read from, and the profiles it defines."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        path = ctx.paths.config_path
        exists = path.exists()
        profiles = sorted(load_config(path).profiles) if exists else []
        return CommandOutput(data={"path": str(path), "exists": exists, "profiles": profiles})

    run_command(ctx, command="config path", fn=fn)


@config_group.command(name="init", cls=rich_click.RichCommand)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@output_options
@click.pass_obj
def config_init(ctx: CLIContext, *, force: bool) -> None:
    """Write a commented config.toml template."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        path = ctx.paths.config_path
        if path.exists() and not force:
            raise CLIError(
                f"Config already exists: {path} (use --force to overwrite)",
                exit_code=2,
                error_type="usage_error",
            )
        overwritten = path.exists()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config_init_template(), encoding="utf-8")
        if os.name == "posix":
            with suppress(OSError):
                path.chmod(0o600)
        return CommandOutput(data={"path": str(path), "overwritten": overwritten})

    run_command(ctx, command="config init", fn=fn)
