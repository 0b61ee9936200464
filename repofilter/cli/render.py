from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "validation_error": "Validation error",
        "config_error": "Configuration error",
        "io_error": "I/O error",
        "sink_rejected": "Sink rejected condition",
        "internal_error": "Internal error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _render_error_details(
    *,
    stderr: Console,
    command: str,
    error_type: str,
    hint: str | None,
    details: dict[str, Any] | None,
    settings: RenderSettings,
) -> None:
    if settings.quiet:
        return
    if hint:
        stderr.print(f"Hint: {hint}", markup=False)
    elif error_type == "usage_error":
        stderr.print(f"Hint: run `repofilter {command} --help`")
    if details and settings.verbosity >= 1:
        stderr.print(Panel.fit(Text(json.dumps(details, ensure_ascii=False, indent=2))))


def _format_cell(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_cell(v) for v in value)
    return json.dumps(value, ensure_ascii=False) if isinstance(value, dict) else str(value)


def _table_from_rows(rows: list[dict[str, Any]], *, empty: str = "No results") -> Table:
    table = Table(show_header=True, header_style="bold")
    if not rows:
        table.add_column("result")
        table.add_row(Text(empty))
        return table
    columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[Text(_format_cell(row.get(col))) for col in columns])
    return table


def _kv_table(obj: dict[str, Any]) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("key", style="bold")
    table.add_column("value")
    for key, value in obj.items():
        table.add_row(key, Text(_format_cell(value)))
    return table


def _render_validation(data: dict[str, Any]) -> Any:
    if data.get("valid"):
        return Text("Valid filter string", style="green")
    errors = data.get("errors") or []
    rows = [
        {
            "segment": e.get("segmentIndex"),
            "text": e.get("segmentText"),
            "message": e.get("message"),
        }
        for e in errors
    ]
    return Group(
        Text(f"Invalid filter string ({len(rows)} error(s))", style="red"),
        _table_from_rows(rows),
    )


def _render_human_data(command: str, data: Any) -> Any:
    if data is None:
        return Panel.fit(Text("OK"))
    if isinstance(data, str):
        return Text(data)
    if isinstance(data, list):
        if all(isinstance(row, dict) for row in data):
            return _table_from_rows(data)
        return Text("\n".join(_format_cell(item) for item in data))
    if not isinstance(data, dict):
        return Text(str(data))

    if command == "validate":
        return _render_validation(data)

    sections: list[Any] = []
    scalars = {k: v for k, v in data.items() if not isinstance(v, list)}
    if scalars:
        sections.append(_kv_table(scalars))
    for key, value in data.items():
        if isinstance(value, list):
            rows = [r for r in value if isinstance(r, dict)]
            if len(rows) == len(value):
                sections.append(Text(key, style="bold"))
                sections.append(_table_from_rows(rows, empty=f"No {key}"))
            else:
                sections.append(_kv_table({key: value}))
    return Group(*sections) if sections else Panel.fit(Text("OK"))


def render_result(result: CommandResult, *, settings: RenderSettings) -> int:
    stdout = Console(file=sys.stdout, force_terminal=False)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if settings.output == "json":
        payload = result.model_dump(by_alias=True, mode="json")
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return 0

    if not result.ok:
        if result.error is not None:
            stderr.print(
                f"{_error_title(result.error.type)}: {result.error.message}", markup=False
            )
            _render_error_details(
                stderr=stderr,
                command=result.command,
                error_type=result.error.type,
                hint=result.error.hint,
                details=result.error.details,
                settings=settings,
            )
        else:
            stderr.print("Error")
        return 0

    renderable: Any
    if result.command == "version" and isinstance(result.data, dict):
        renderable = Text(result.data.get("version", ""), style="bold")
    elif result.command == "serialize" and isinstance(result.data, dict):
        renderable = Text(str(result.data.get("filter", "")))
    elif result.command == "config path" and isinstance(result.data, dict):
        renderable = Text(str(result.data.get("path", "")))
    elif result.command == "config init" and isinstance(result.data, dict):
        renderable = Panel.fit(Text(f"Initialized config at {result.data.get('path', '')}"))
    else:
        renderable = _render_human_data(result.command, result.data)

    stdout.print(renderable)
    return 0
