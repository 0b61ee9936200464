from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

from .context import CLIContext

F = TypeVar("F", bound=Callable[..., object])


def _remember_output(ctx: click.Context, param: click.Parameter, value: Any) -> Any:
    # Per-command --output/--json override the group-level setting
    if not value:
        return value
    obj = ctx.obj
    if isinstance(obj, CLIContext):
        obj.output = "json" if param.name == "json" else value
    return value


def output_options(fn: F) -> F:
    fn = click.option(
        "--output",
        type=click.Choice(["table", "json"]),
        default=None,
        help="Override output format for this command.",
        callback=_remember_output,
        expose_value=False,
    )(fn)
    return click.option(
        "--json",
        "json",
        is_flag=True,
        help="Alias for --output json.",
        callback=_remember_output,
        expose_value=False,
    )(fn)


def allow_option(fn: F) -> F:
    return click.option(
        "--allow",
        "allow",
        multiple=True,
        metavar="FIELD",
        help="Allowed field (repeatable, or comma-separated). Other fields are dropped.",
    )(fn)
