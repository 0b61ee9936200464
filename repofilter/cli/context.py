from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv

from repofilter.exceptions import FilterSerializationError, SinkRejectedError

from .config import LoadedConfig, ProfileConfig, config_file_permission_warnings, load_config
from .errors import CLIError
from .paths import CliPaths, get_paths
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]

ALLOWED_FIELDS_ENV = "REPOFILTER_ALLOWED_FIELDS"
PROFILE_ENV = "REPOFILTER_PROFILE"


def split_field_list(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    profile: str | None
    dotenv: bool
    env_file: Path
    log_file: Path | None
    enable_log_file: bool

    _paths: CliPaths = field(default_factory=get_paths)
    _loaded_config: LoadedConfig | None = None
    _dotenv_loaded: bool = False

    def load_dotenv_if_requested(self) -> None:
        if not self.dotenv or self._dotenv_loaded:
            return
        load_dotenv(dotenv_path=self.env_file, override=False)
        self._dotenv_loaded = True

    @property
    def paths(self) -> CliPaths:
        return self._paths

    def _config_path(self) -> Path:
        return self.paths.config_path

    def load_config(self) -> LoadedConfig:
        if self._loaded_config is None:
            self._loaded_config = load_config(self._config_path())
        return self._loaded_config

    def effective_profile(self) -> str:
        return self.profile or os.getenv(PROFILE_ENV) or "default"

    def _profile_config(self) -> ProfileConfig:
        cfg = self.load_config()
        name = self.effective_profile()
        if name == "default":
            return cfg.default
        if name not in cfg.profiles:
            raise CLIError(
                f"Unknown profile '{name}' in {self._config_path()}",
                exit_code=2,
                error_type="config_error",
            )
        return cfg.profiles[name]

    def resolve_allowed_fields(
        self, explicit: tuple[str, ...] | list[str], *, warnings: list[str]
    ) -> list[str] | None:
        """Allow-list from --allow, then the environment, then the config profile.

        None means every field is allowed.
        """
        if explicit:
            fields: list[str] = []
            for item in explicit:
                fields.extend(split_field_list(item))
            return fields or None

        self.load_dotenv_if_requested()
        env_value = os.getenv(ALLOWED_FIELDS_ENV, "").strip()
        if env_value:
            return split_field_list(env_value) or None

        prof = self._profile_config()
        if prof.allowed_fields:
            warnings.extend(config_file_permission_warnings(self._config_path()))
            return list(prof.allowed_fields)
        return None


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, FilterSerializationError):
        return 2
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(
            type=exc.error_type, message=exc.message, hint=exc.hint, details=exc.details
        )
    if isinstance(exc, FilterSerializationError):
        return ErrorInfo(type="validation_error", message=str(exc))
    if isinstance(exc, SinkRejectedError):
        return ErrorInfo(
            type="sink_rejected",
            message=str(exc),
            details={"field": exc.condition.field, "predicate": exc.predicate},
        )
    return ErrorInfo(type="internal_error", message=f"{exc.__class__.__name__}: {exc}")


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    profile: str | None,
    allowed_fields: list[str] | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    meta = CommandMeta(
        duration_ms=duration_ms,
        profile=profile,
        allowed_fields=allowed_fields,
    )
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=meta,
        error=error,
    )
