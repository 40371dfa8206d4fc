"""Logging configuration models for the envbind package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from rich.console import Console
from rich.logging import RichHandler


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Parameters
    ----------
    level : str
        Log level.
    format : str
        Log format string used for the log file.
    file : Path | None
        Log file path.
    console : bool
        Whether to log to console.

    Examples
    --------
    >>> config = LoggingConfig()
    >>> config.level
    'WARNING'
    >>> config.console
    True
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Path | None = Field(default=None, description="Log file path")
    console: bool = Field(default=True, description="Log to console")


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Attach handlers described by ``config`` to the ``envbind`` logger.

    Existing handlers on the ``envbind`` logger are replaced, so calling this
    twice does not duplicate output.

    Parameters
    ----------
    config : LoggingConfig
        Logging configuration.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger = logging.getLogger("envbind")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(config.level)

    if config.console:
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        )

    if config.file is not None:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(file_handler)

    return logger
