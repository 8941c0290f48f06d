"""
Logging Module - Sweep logging through Rich.
============================================

Every scraper module logs through ``get_logger(__name__)``. The CLI calls
``setup_logging`` once per command with the level from ``LOG_LEVEL`` or
``logging.level`` in settings.yaml. Per-chapter progress and skips show up
on the shared Rich console; ``logging.file`` adds a plain-text copy of the
sweep log.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# HTTP client loggers that would otherwise echo every chapter request
QUIET_LOGGERS = ("urllib3", "requests")

_logging_configured = False
_console = Console()


def _console_handler(use_rich: bool, log_format: str) -> logging.Handler:
    if use_rich:
        # Chapter titles and LaTeX contain brackets, so markup stays off
        handler: logging.Handler = RichHandler(
            console=_console,
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(log_format))
    return handler


def setup_logging(
    level: str = "INFO",
    use_rich: bool = True,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Route sweep logs to the console and, optionally, a log file.

    Args:
        level: Level name; unknown names fall back to INFO
        use_rich: Rich handler on the shared console, else plain stderr
        log_file: Path of a plain-text sweep log (parent dirs are created)
        log_format: Format for the stderr and file handlers
        force: Replace handlers installed by an earlier call

    Without ``force`` only the first call takes effect, so the implicit
    setup done by ``get_logger`` at import time never stacks handlers.
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_format = log_format or DEFAULT_LOG_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handlers = [_console_handler(use_rich, log_format)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(log_format))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True

    logging.getLogger(__name__).debug(
        f"Logging configured: level={level}, rich={use_rich}, file={log_file}"
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for a scraper module, configuring INFO defaults on first use."""
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)


def get_console() -> Console:
    """The Rich console shared by log output, progress bars and reports."""
    return _console
