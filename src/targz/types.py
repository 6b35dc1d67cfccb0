"""Types for the archive and extract flows.

All structures are transient: built during one call and dropped after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class EntryKind(StrEnum):
    DIRECTORY = "directory"
    REGULAR = "regular"
    OTHER = "other"


@dataclass(frozen=True)
class TarEntry:
    """One file or directory visited by the walker.

    ``name`` is slash-separated and starts with the archived root's own name;
    directory names end with ``/``.
    """

    kind: EntryKind
    name: str
    source: Path
    size: int
    mode: int
    mtime: float
    uid: int
    gid: int
    uname: str
    gname: str

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass(frozen=True)
class Ownership:
    """Numeric owner resolved from archive names; None leaves that axis unchanged."""

    uid: int | None = None
    gid: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.uid is None and self.gid is None


@dataclass(frozen=True)
class ArchiveResult:
    root_name: str
    entries: int
    dirs: int
    files: int
    total_bytes: int


@dataclass(frozen=True)
class ExtractResult:
    target_dir: str
    dirs: int
    files: int
    skipped: int
    total_bytes: int
