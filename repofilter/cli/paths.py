from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

APP_NAME = "repofilter"


@dataclass(frozen=True, slots=True)
class CliPaths:
    config_dir: Path
    log_dir: Path

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.toml"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "repofilter.log"


def get_paths() -> CliPaths:
    # REPOFILTER_HOME pins both directories (handy for tests and containers)
    home = os.getenv("REPOFILTER_HOME")
    if home:
        base = Path(home)
        return CliPaths(config_dir=base, log_dir=base / "logs")
    return CliPaths(
        config_dir=Path(user_config_dir(APP_NAME, appauthor=False)),
        log_dir=Path(user_log_dir(APP_NAME, appauthor=False)),
    )
