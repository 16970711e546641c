"""Centralized logging configuration.

All modules obtain their logger with `get_logger(__name__)`; the CLI calls
`configure_logging` once with the level chosen by `--verbose` or settings.
Records go to stderr through Rich so they never mix with command output.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "deploy-ops"


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Configure the root logger (idempotent: re-calls only change the level)."""

    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(h, "name", None) == _HANDLER_NAME for h in root.handlers):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s", datefmt="[%X]"))
    root.addHandler(handler)

    # httpx logs every request at INFO, including full URLs.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
