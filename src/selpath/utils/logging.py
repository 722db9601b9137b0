"""Logging configuration for selpath."""

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from selpath.utils.files import get_logs_path


def _numeric_level(level: str) -> int:
    if level.upper() == 'ALL':
        return logging.NOTSET
    return getattr(logging, level.upper(), logging.DEBUG)


def setup_local_logging(level: str = 'DEBUG') -> Path:
    """Set up local file-based logging.

    Creates a log file in .selpath/logs/ and configures the root logger
    to write to it. Console output is left to the CLI.

    Args:
        level: Logging level (e.g., 'DEBUG', 'INFO'). Defaults to 'DEBUG'.

    Returns:
        Path: The path to the created log file.

    """
    logs_dir = get_logs_path()
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = logs_dir / f'run_{timestamp}.log'

    numeric_level = _numeric_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(file_handler)

    return log_file


def add_console_logging(level: str = 'WARNING', console: Console | None = None) -> RichHandler:
    """Mirror log records to the terminal through rich.

    Args:
        level: Minimum level shown on the console. Defaults to 'WARNING'.
        console: Console to write to. Defaults to a new stderr console.

    Returns:
        The handler that was attached to the root logger.

    """
    numeric_level = _numeric_level(level)
    handler = RichHandler(console=console or Console(stderr=True), show_path=False, markup=False)
    handler.setLevel(numeric_level)

    root_logger = logging.getLogger()
    # Root defaults to WARNING
    if numeric_level < root_logger.level:
        root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)
    return handler
