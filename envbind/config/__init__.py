"""Configuration models for envbind.

Examples
--------
>>> from envbind.config import CodecOptions, LoggingConfig
>>> CodecOptions().separator
'__'
>>> LoggingConfig().level
'WARNING'
"""

from __future__ import annotations

from envbind.config.env import load_options_from_env
from envbind.config.logging import LoggingConfig, configure_logging
from envbind.config.options import CodecOptions

__all__ = [
    "CodecOptions",
    "LoggingConfig",
    "configure_logging",
    "load_options_from_env",
]
