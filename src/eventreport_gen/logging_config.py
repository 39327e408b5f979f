"""Logging setup for command-line use.

Library modules only call `logging.getLogger(__name__)`; nothing is configured
on import. The CLI calls `setup_logging()` once at startup.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True)
    logging.basicConfig(
        level=level,
        format="%(name)s - %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
