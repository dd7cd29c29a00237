"""Logging utilities shared across the pdfmono package."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler


_CONFIGURED: bool = False

DEFAULT_CONSOLE_LEVEL = "INFO"
DEFAULT_FILE_LEVEL = "DEBUG"
DEFAULT_FILE_ROTATION = "5 MB"
DEFAULT_FILE_RETENTION = 2

_RICH_HANDLER_KWARGS: dict[str, Any] = {
    "markup": True,
    "show_time": False,
}


def configure_logging(
    *,
    console_level: str = DEFAULT_CONSOLE_LEVEL,
    file_path: str | Path | None = None,
    force: bool = False,
) -> None:
    """Configure the shared logger once per process.

    Console records go to stderr so they never mix with bitmap bytes written to
    stdout. A rotating DEBUG file sink is added when ``file_path`` is given.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    logger.remove()

    logger.add(
        RichHandler(console=Console(stderr=True), **_RICH_HANDLER_KWARGS),  # type: ignore[arg-type]
        level=console_level,
        format="{message}",
    )

    if file_path:
        resolved_file_path = Path(file_path).expanduser().resolve()
        resolved_file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(resolved_file_path),
            level=DEFAULT_FILE_LEVEL,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            rotation=DEFAULT_FILE_ROTATION,
            retention=DEFAULT_FILE_RETENTION,
            enqueue=True,
        )

    _CONFIGURED = True


__all__ = ["configure_logging", "logger"]

# Configure logging on import so callers only need to import `logger`.
configure_logging()
