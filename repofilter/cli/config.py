"""CLI configuration file (``config.toml``) and profiles."""

from __future__ import annotations

import os
import stat
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import CLIError


class ProfileConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    allowed_fields: list[str] | None = None


class LoadedConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    default: ProfileConfig = Field(default_factory=ProfileConfig)
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)


def load_config(path: Path) -> LoadedConfig:
    if not path.exists():
        return LoadedConfig()
    try:
        raw: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise CLIError(
            f"Failed to read config file {path}: {exc}", exit_code=2, error_type="config_error"
        ) from exc
    try:
        return LoadedConfig.model_validate(raw)
    except ValidationError as exc:
        raise CLIError(
            f"Invalid config file {path}: {exc.error_count()} error(s)",
            exit_code=2,
            error_type="config_error",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def config_file_permission_warnings(path: Path) -> list[str]:
    if os.name != "posix" or not path.exists():
        return []
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except OSError:
        return []
    if mode & 0o022:
        return [f"Config file {path} is writable by other users (mode {mode:o})."]
    return []


def config_init_template() -> str:
    return (
        "# repofilter configuration\n"
        "#\n"
        "# allowed_fields restricts which fields `repofilter parse` and\n"
        "# `repofilter explain` keep when no --allow option is given.\n"
        "\n"
        "[default]\n"
        "# allowed_fields = [\"status\", \"price\", \"category\"]\n"
        "\n"
        "# [profiles.listings]\n"
        "# allowed_fields = [\"category\", \"price\", \"bua\", \"sbeds\", \"status\"]\n"
    )
