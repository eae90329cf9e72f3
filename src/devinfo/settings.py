from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_path(name: str, default: str | None = None) -> Path | None:
    raw = os.getenv(name, default)
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from ``DEVINFO_*`` environment variables."""

    root: Path = Path("/")
    log_level: str = "WARNING"
    log_file: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        level = os.getenv("DEVINFO_LOG_LEVEL", "WARNING").strip().upper()
        if level not in _LOG_LEVELS:
            raise RuntimeError(
                f"Invalid DEVINFO_LOG_LEVEL={level!r} (expected one of {sorted(_LOG_LEVELS)})."
            )
        return cls(
            root=_env_path("DEVINFO_ROOT", "/") or Path("/"),
            log_level=level,
            log_file=_env_path("DEVINFO_LOG_FILE"),
        )


settings = Settings.from_env()
