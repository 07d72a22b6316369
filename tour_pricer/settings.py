"""
Runtime settings: where documents are stored and where schemas live.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR_ENV = "TOUR_PRICER_DATA_DIR"


def get_project_root() -> Path:
    """Return the repository root holding the ``schema`` directory."""
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    schema_dir: Path

    @classmethod
    def load(cls, data_dir: Path | None = None) -> "Settings":
        """Load settings, preferring an explicit data dir over the env."""
        env_dir = os.environ.get(DATA_DIR_ENV)
        if data_dir is None:
            data_dir = (
                Path(env_dir).expanduser()
                if env_dir
                else Path.home() / ".tour_pricer"
            )
        return cls(
            data_dir=data_dir,
            schema_dir=get_project_root() / "schema",
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
