from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, TextIO

import click
import rich_click

from repofilter import (
    CanonicalOperator,
    FilterCondition,
    RecordingSink,
    apply,
    parse,
    serialize,
    summarize,
    validate,
)

from ..context import CLIContext
from ..errors import CLIError
from ..options import allow_option, output_options
from ..runner import CommandOutput, run_command


def _condition_row(condition: FilterCondition) -> dict[str, Any]:
    return {
        "field": condition.field,
        "operator": condition.operator.value,
        "values": list(condition.values),
    }


@click.command(name="parse", cls=rich_click.RichCommand)
@click.argument("filter_string", metavar="FILTER")
@allow_option
@output_options
@click.pass_obj
def parse_cmd(ctx: CLIContext, filter_string: str, *, allow: tuple[str, ...]) -> None:
    """Parse a filter string leniently and show the resulting conditions.

    Malformed segments and fields outside the allow-list are dropped.
    """

    def fn(ctx: CLIContext, warnings: list[str]) -> CommandOutput:
        allowed = ctx.resolve_allowed_fields(allow, warnings=warnings)
        expression = parse(filter_string, allowed_fields=allowed)
        return CommandOutput(
            data={
                "filter": expression.to_string(),
                "conditions": [_condition_row(c) for c in expression],
            },
            allowed_fields=allowed,
        )

    run_command(ctx, command="parse", fn=fn)


@click.command(name="validate", cls=rich_click.RichCommand)
@click.argument("filter_string", metavar="FILTER")
@output_options
@click.pass_obj
def validate_cmd(ctx: CLIContext, filter_string: str) -> None:
    """Check a filter string strictly. Exits 1 when it is invalid."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        result = validate(filter_string)
        return CommandOutput(
            data=result.model_dump(by_alias=True, mode="json"),
            exit_code=0 if result.valid else 1,
        )

    run_command(ctx, command="validate", fn=fn)


def _read_conditions(source: TextIO) -> Any:
    try:
        payload = json.load(source)
    except json.JSONDecodeError as exc:
        raise CLIError(
            f"Conditions are not valid JSON: {exc}",
            exit_code=2,
            error_type="usage_error",
            hint="Pass a JSON list of {field, operator, values} objects or a field mapping.",
        ) from exc

    if isinstance(payload, Mapping):
        return payload
    if not isinstance(payload, list):
        raise CLIError(
            "Conditions must be a JSON list or object",
            exit_code=2,
            error_type="usage_error",
        )

    entries: list[Any] = []
    for item in payload:
        if isinstance(item, Mapping):
            if "field" not in item or "operator" not in item:
                raise CLIError(
                    f"Condition object needs 'field' and 'operator': {json.dumps(item)}",
                    exit_code=2,
                    error_type="usage_error",
                )
            if not isinstance(item["field"], str):
                raise CLIError(
                    f"Condition field must be a string: {json.dumps(item)}",
                    exit_code=2,
                    error_type="usage_error",
                )
            entries.append((item["field"], item["operator"], item.get("values", [])))
        else:
            entries.append(item)
    return entries


@click.command(name="serialize", cls=rich_click.RichCommand)
@click.option(
    "--file",
    "source",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="JSON conditions to read ('-' for stdin).",
)
@output_options
@click.pass_obj
def serialize_cmd(ctx: CLIContext, *, source: TextIO) -> None:
    """Build a filter string from JSON conditions.

    Accepts a list of ``{"field", "operator", "values"}`` objects (or
    ``[field, operator, values]`` arrays), or an object mapping each field to
    a list (IN), a scalar (EQ) or ``{"operator", "values"}``.
    """

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        conditions = _read_conditions(source)
        return CommandOutput(data={"filter": serialize(conditions)})

    run_command(ctx, command="serialize", fn=fn)


@click.command(name="explain", cls=rich_click.RichCommand)
@click.argument("filter_string", metavar="FILTER")
@allow_option
@output_options
@click.pass_obj
def explain_cmd(ctx: CLIContext, filter_string: str, *, allow: tuple[str, ...]) -> None:
    """Show the query predicates a filter string turns into, in order."""

    def fn(ctx: CLIContext, warnings: list[str]) -> CommandOutput:
        allowed = ctx.resolve_allowed_fields(allow, warnings=warnings)
        expression = parse(filter_string, allowed_fields=allowed)
        sink = apply(expression, RecordingSink())
        skipped = len(expression) - len(sink.calls)
        if skipped:
            warnings.append(f"{skipped} condition(s) skipped for having too few values.")
        return CommandOutput(
            data={"calls": [call.to_dict() for call in sink.calls]},
            allowed_fields=allowed,
        )

    run_command(ctx, command="explain", fn=fn)


@click.command(name="summary", cls=rich_click.RichCommand)
@click.argument("filter_string", metavar="FILTER")
@output_options
@click.pass_obj
def summary_cmd(ctx: CLIContext, filter_string: str) -> None:
    """Summarize active filters for display."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        rows = summarize(parse(filter_string))
        return CommandOutput(data={"filters": [row.model_dump(mode="json") for row in rows]})

    run_command(ctx, command="summary", fn=fn)


@click.command(name="operators", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def operators_cmd(ctx: CLIContext) -> None:
    """List supported operators with their aliases and arity."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        rows = [
            {
                "operator": op.value,
                "description": op.description,
                "aliases": list(op.aliases),
                "arity": op.arity.name,
                "category": op.category.name,
            }
            for op in CanonicalOperator
        ]
        return CommandOutput(data={"operators": rows})

    run_command(ctx, command="operators", fn=fn)
