from __future__ import annotations

import logging
import sys
from pathlib import Path


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    """Configure the root logger.

    Console output goes to stderr because stdout carries RPC responses.

    Args:
        level: Log level name (WARNING, DEBUG, ...).
        log_file: If provided, also append log records to this file.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as exc:
            root.error("File logging disabled (cannot open %s): %s", log_file, exc)
