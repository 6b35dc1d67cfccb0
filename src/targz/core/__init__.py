"""Ambient infrastructure shared by the archive and extract flows."""

from targz.core.config import ConfigResolver, ConfigSource, LoggingPolicy
from targz.core.errors import (
    ConfigError,
    CorruptedArchiveError,
    CurrentDirectoryError,
    FileError,
    InvalidArgumentError,
    TargzError,
)
from targz.core.events import EventBus, get_event_bus
from targz.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)

__all__ = [
    # Config
    "ConfigResolver",
    "ConfigSource",
    "LoggingPolicy",
    # Errors
    "TargzError",
    "InvalidArgumentError",
    "CurrentDirectoryError",
    "ConfigError",
    "FileError",
    "CorruptedArchiveError",
    # Events
    "EventBus",
    "get_event_bus",
    # Logging
    "VerbosityLevel",
    "apply_logging_policy",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_verbosity",
]
