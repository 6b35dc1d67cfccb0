"""Directory walker for the archive flow.

The walk is pre-order: a directory's entry is produced before any entry below
it. Pending directories sit on an explicit stack, so memory grows with tree
width rather than depth, and every path is composed by joining names onto the
absolute root; the process working directory is never changed.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator, Set
from pathlib import Path

from targz.core.errors import CurrentDirectoryError, FileError, InvalidArgumentError
from targz.core.logging import get_logger
from targz.ownership import owner_names
from targz.types import EntryKind, TarEntry

_logger = get_logger(__name__)


def validate_source(src_dir: str | os.PathLike[str]) -> Path:
    """Clean ``src_dir`` and return it as an absolute path.

    Raises:
        InvalidArgumentError: empty path, ``.``, the filesystem root, or the
            current working directory.
        FileError: the path does not exist or is not a directory.
    """
    raw = os.fspath(src_dir)
    cleaned = os.path.normpath(raw) if raw else "."
    if cleaned == ".":
        raise CurrentDirectoryError(raw or ".")

    abs_path = os.path.abspath(cleaned)
    if abs_path == os.getcwd():
        raise CurrentDirectoryError(raw)
    if not os.path.basename(abs_path):
        raise InvalidArgumentError(
            f"Cannot archive filesystem root: '{raw}'",
            "Archive a directory with a name",
        )

    try:
        st = os.stat(abs_path)
    except OSError as e:
        raise FileError(f"Cannot read source directory '{raw}': {e.strerror or e}") from e
    if not stat.S_ISDIR(st.st_mode):
        raise FileError(f"Source path is not a directory: '{raw}'")
    return Path(abs_path)


def _entry(kind: EntryKind, name: str, path: Path, st: os.stat_result) -> TarEntry:
    uname, gname = owner_names(st.st_uid, st.st_gid)
    return TarEntry(
        kind=kind,
        name=name,
        source=path,
        size=st.st_size if kind == EntryKind.REGULAR else 0,
        mode=stat.S_IMODE(st.st_mode),
        mtime=st.st_mtime,
        uid=st.st_uid,
        gid=st.st_gid,
        uname=uname,
        gname=gname,
    )


def walk(root: Path, ignores: Set[str] = frozenset()) -> Iterator[TarEntry]:
    """Yield entries for ``root`` and everything under it.

    Names start with ``root.name``. Directory listings are sorted by name.
    Names in ``ignores`` are skipped at every depth, symlinks and special files
    are skipped silently, and the first OSError is raised as FileError.
    """
    pending: list[tuple[Path, str]] = [(root, root.name)]
    while pending:
        dir_path, dir_name = pending.pop()

        try:
            st = os.stat(dir_path)
        except OSError as e:
            raise FileError(f"Cannot stat directory '{dir_path}': {e.strerror or e}") from e
        yield _entry(EntryKind.DIRECTORY, dir_name + "/", dir_path, st)

        try:
            with os.scandir(dir_path) as it:
                children = sorted(it, key=lambda de: de.name)
        except OSError as e:
            raise FileError(f"Cannot list directory '{dir_path}': {e.strerror or e}") from e

        subdirs: list[tuple[Path, str]] = []
        for de in children:
            if de.name in ignores:
                _logger.debug(f"walk.ignore name={dir_name}/{de.name}")
                continue

            child_path = dir_path / de.name
            child_name = f"{dir_name}/{de.name}"
            try:
                if de.is_dir(follow_symlinks=False):
                    subdirs.append((child_path, child_name))
                    continue
                if not de.is_file(follow_symlinks=False):
                    _logger.debug(f"walk.skip name={child_name} reason=not-regular")
                    continue
                child_st = de.stat(follow_symlinks=False)
            except OSError as e:
                raise FileError(f"Cannot stat '{child_path}': {e.strerror or e}") from e
            yield _entry(EntryKind.REGULAR, child_name, child_path, child_st)

        # Reversed so the stack pops sibling directories in name order.
        pending.extend(reversed(subdirs))
