"""Archive creation: walk a directory and serialize it as .tar.gz.

If the directory to archive is given as "/tmp/myfiles/backups/weekly", only
"weekly" and what is under it go into the archive, without the parent path.
Extracting it anywhere creates a "weekly" directory with the archived contents.
"""

from __future__ import annotations

import os
import tarfile
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from targz.codec import open_tar_writer
from targz.core.config import ConfigResolver
from targz.core.diagnostics import observe_operation
from targz.core.errors import FileError
from targz.core.logging import get_logger
from targz.options import ArchiveOptions, Option, get_options
from targz.types import ArchiveResult, TarEntry
from targz.walker import validate_source, walk

log = get_logger(__name__)


def _tarinfo(entry: TarEntry) -> tarfile.TarInfo:
    ti = tarfile.TarInfo(name=entry.name)
    ti.type = tarfile.DIRTYPE if entry.is_dir else tarfile.REGTYPE
    ti.size = entry.size
    ti.mode = entry.mode
    ti.mtime = int(entry.mtime)
    ti.uid = entry.uid
    ti.gid = entry.gid
    ti.uname = entry.uname
    ti.gname = entry.gname
    return ti


def _write_entries(entries: Iterable[TarEntry], tw: tarfile.TarFile) -> tuple[int, int, int]:
    dirs = 0
    files = 0
    total = 0
    for entry in entries:
        ti = _tarinfo(entry)
        if entry.is_dir:
            tw.addfile(ti)
            dirs += 1
        else:
            try:
                with open(entry.source, "rb") as f:
                    # addfile copies exactly the size recorded by the walker.
                    tw.addfile(ti, f)
            except OSError as e:
                raise FileError(f"Cannot read '{entry.source}': {e.strerror or e}") from e
            files += 1
            total += entry.size
        log.debug(f"archive.add name={entry.name} size={entry.size}")
    return dirs, files, total


def _write_archive(root: Path, writer: BinaryIO, opts: ArchiveOptions) -> ArchiveResult:
    with observe_operation(
        operation="archive.create",
        base={"src_dir": str(root), "ignores": sorted(opts.ignore_set())},
        enabled=opts.diagnostics,
    ) as summary:
        try:
            with open_tar_writer(writer) as tw:
                dirs, files, total = _write_entries(walk(root, opts.ignore_set()), tw)
        except OSError as e:
            raise FileError(f"Failed to write archive: {e.strerror or e}") from e

        summary.update({"dirs": dirs, "files": files, "bytes": total})

    return ArchiveResult(
        root_name=root.name,
        entries=dirs + files,
        dirs=dirs,
        files=files,
        total_bytes=total,
    )


def create_writer(
    src_dir: str | os.PathLike[str],
    writer: BinaryIO,
    *options: Option,
    resolver: ConfigResolver | None = None,
) -> ArchiveResult:
    """Write a gzip-compressed tar of ``src_dir`` to ``writer``.

    ``writer`` is flushed when the archive is complete but left open.

    Raises:
        InvalidArgumentError: ``src_dir`` is empty, ``.`` or the working directory.
        FileError: reading the tree or writing the archive failed.
    """
    opts = get_options(options, resolver)
    root = validate_source(src_dir)
    return _write_archive(root, writer, opts)


def create(
    src_dir: str | os.PathLike[str],
    tar_path: str | os.PathLike[str],
    *options: Option,
    resolver: ConfigResolver | None = None,
) -> ArchiveResult:
    """Create a gzip-compressed tar file at ``tar_path`` from ``src_dir``.

    The source is validated before ``tar_path`` is opened, so a rejected
    source never creates or truncates the destination. On failure after that
    point a partial archive may remain on disk.
    """
    opts = get_options(options, resolver)
    root = validate_source(src_dir)

    try:
        f = open(tar_path, "wb")
    except OSError as e:
        raise FileError(f"Cannot create archive '{os.fspath(tar_path)}': {e.strerror or e}") from e
    with f:
        return _write_archive(root, f, opts)

