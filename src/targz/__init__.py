"""targz - archive a directory tree as .tar.gz and extract it again.

    import targz

    targz.create("/srv/data/weekly", "weekly.tar.gz", targz.with_ignore(".cache"))
    targz.extract("weekly.tar.gz", "/restore")   # -> /restore/weekly/...
"""

__version__ = "1.0.0"

from targz.archive import create, create_writer
from targz.core.errors import (
    ConfigError,
    CorruptedArchiveError,
    CurrentDirectoryError,
    FileError,
    InvalidArgumentError,
    TargzError,
)
from targz.extract import extract, extract_reader
from targz.options import ArchiveOptions, Option, with_ignore
from targz.types import ArchiveResult, EntryKind, ExtractResult, Ownership, TarEntry

__all__ = [
    # Operations
    "create",
    "create_writer",
    "extract",
    "extract_reader",
    # Options
    "ArchiveOptions",
    "Option",
    "with_ignore",
    # Types
    "ArchiveResult",
    "EntryKind",
    "ExtractResult",
    "Ownership",
    "TarEntry",
    # Errors
    "TargzError",
    "InvalidArgumentError",
    "CurrentDirectoryError",
    "ConfigError",
    "FileError",
    "CorruptedArchiveError",
]
