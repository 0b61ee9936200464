from __future__ import annotations

from pathlib import Path

import click
import rich_click

import repofilter

from .context import CLIContext
from .logging import configure_logging, restore_logging
from .paths import get_paths


@click.group(
    name="repofilter",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=rich_click.RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option("--profile", type=str, default=None, help="Config profile name.")
@click.option("--dotenv/--no-dotenv", default=False, help="Opt-in .env loading.")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None)
@click.option("--no-log-file", is_flag=True, help="Disable file logging explicitly.")
@click.version_option(version=repofilter.__version__, prog_name="repofilter")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    profile: str | None,
    dotenv: bool,
    env_file: str,
    log_file: str | None,
    no_log_file: bool,
) -> None:
    """Parse, validate, explain and build repository filter strings."""
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    out = "json" if json_flag else output
    paths = get_paths()
    effective_log_file = Path(log_file) if log_file else paths.log_file
    enable_log_file = not no_log_file

    click_ctx.obj = CLIContext(
        output=out,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        profile=profile,
        dotenv=dotenv,
        env_file=Path(env_file),
        log_file=effective_log_file,
        enable_log_file=enable_log_file,
        _paths=paths,
    )

    previous_logging = configure_logging(
        verbosity=verbose,
        log_file=effective_log_file,
        enable_file=enable_log_file,
    )
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


# Register commands
from .commands.config_cmds import config_group as _config_group  # noqa: E402
from .commands.filter_cmds import explain_cmd as _explain_cmd  # noqa: E402
from .commands.filter_cmds import operators_cmd as _operators_cmd  # noqa: E402
from .commands.filter_cmds import parse_cmd as _parse_cmd  # noqa: E402
from .commands.filter_cmds import serialize_cmd as _serialize_cmd  # noqa: E402
from .commands.filter_cmds import summary_cmd as _summary_cmd  # noqa: E402
from .commands.filter_cmds import validate_cmd as _validate_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_version_cmd)
cli.add_command(_config_group)
cli.add_command(_parse_cmd)
cli.add_command(_validate_cmd)
cli.add_command(_serialize_cmd)
cli.add_command(_explain_cmd)
cli.add_command(_summary_cmd)
cli.add_command(_operators_cmd)
