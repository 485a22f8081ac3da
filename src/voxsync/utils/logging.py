"""Logging setup for voxsync.

Console output goes through rich on stderr so it never mixes with command
output. An optional log file receives every record at DEBUG, which is where
per-attempt state transitions and rejected response bodies end up. aiohttp's
loggers stay at WARNING unless voxsync itself runs at DEBUG.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from ..config.settings import LoggingConfig
from ..config.validation import LOG_LEVELS

LOGGER_NAME = "voxsync"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HTTP_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.internal", "aiohttp.server")


def resolve_level(level: Union[str, int], verbose: bool = False, quiet: bool = False) -> int:
    """Turn a configured level plus the -v/-q flags into a numeric level.

    --quiet wins over --verbose. Unknown level names fall back to INFO.
    """
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    if isinstance(level, int):
        return level

    name = str(level).upper()
    if name not in LOG_LEVELS:
        logging.getLogger(LOGGER_NAME).warning(f"Unknown log level '{level}', using INFO")
        return logging.INFO
    return getattr(logging, name)


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Install voxsync's console and file handlers.

    Args:
        level: Console level name or number
        log_file: Optional file receiving DEBUG and above
        console: Rich console for output (stderr by default)

    Returns:
        The ``voxsync`` logger
    """
    console_level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="[%X]",
    )
    rich_handler.setLevel(console_level)
    logger.addHandler(rich_handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)

    # The logger must pass DEBUG records through when the file wants them
    logger.setLevel(logging.DEBUG if log_file else console_level)

    http_level = logging.DEBUG if console_level <= logging.DEBUG else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return logger


def configure_logging(
    config: LoggingConfig,
    verbose: bool = False,
    quiet: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Set up logging from the ``logging`` config section and CLI flags."""
    level = resolve_level(config.level, verbose=verbose, quiet=quiet)
    log_file = Path(config.file) if config.file else None
    return setup_logging(level, log_file, console)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
