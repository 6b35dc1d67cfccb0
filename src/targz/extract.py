"""Extraction: decode a .tar.gz stream into a directory tree.

Entry names are joined onto the target directory as they are. Names with
``..`` segments can therefore land outside the target; callers extracting
untrusted archives must check names themselves.
"""

from __future__ import annotations

import os
import shutil
import tarfile
from typing import BinaryIO

from targz import ownership
from targz.codec import DECODE_ERRORS, open_tar_reader, stream_members
from targz.core.config import ConfigResolver
from targz.core.diagnostics import observe_operation
from targz.core.errors import CorruptedArchiveError, FileError
from targz.core.logging import get_logger
from targz.types import ExtractResult, Ownership

log = get_logger(__name__)


def target_path(target_dir: str, name: str) -> str:
    """Join a slash-separated entry name onto ``target_dir`` and clean it.

    A leading slash does not make the name absolute: "/etc/x" maps to
    "<target_dir>/etc/x".
    """
    return os.path.normpath(os.path.join(target_dir, *name.split("/")))


def _mkdir_all(path: str, mode: int) -> None:
    """Create ``path`` and any missing parents, each with ``mode``."""
    missing: list[str] = []
    current = path
    while current and not os.path.exists(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    for d in reversed(missing):
        try:
            os.mkdir(d, mode)
        except FileExistsError:
            if not os.path.isdir(d):
                raise


def _make_dir(path: str, member: tarfile.TarInfo, owner: Ownership | None) -> None:
    if os.path.exists(path):
        return
    _mkdir_all(path, member.mode & 0o777)
    if owner is not None:
        ownership.apply_ownership(path, owner)


def _write_file(
    path: str, member: tarfile.TarInfo, tr: tarfile.TarFile, owner: Ownership | None
) -> None:
    src = tr.extractfile(member)
    if src is None:
        return
    fd = os.open(path, os.O_CREAT | os.O_RDWR | os.O_TRUNC, member.mode & 0o777)
    with os.fdopen(fd, "wb") as dst, src:
        shutil.copyfileobj(src, dst)
    if owner is not None:
        ownership.apply_ownership(path, owner)


def extract_reader(
    reader: BinaryIO,
    target_dir: str | os.PathLike[str] = "",
    *,
    resolver: ConfigResolver | None = None,
    label: str = "<stream>",
) -> ExtractResult:
    """Extract gzip-compressed tar data read from ``reader`` into ``target_dir``.

    An empty ``target_dir`` means the current directory. Directories that
    already exist are kept as they are; regular files are created or
    truncated. Entries that are neither are skipped. When running as the
    superuser, archive owner and group names are mapped to local ids and
    applied where the host allows it.

    Raises:
        CorruptedArchiveError: the stream is not valid gzip or tar.
        FileError: a directory or file could not be written.
    """
    target = os.fspath(target_dir) or "."
    diagnostics = resolver.resolve_diagnostics_enabled() if resolver is not None else False
    privileged = ownership.is_privileged()

    dirs = 0
    files = 0
    skipped = 0
    total = 0
    with observe_operation(
        operation="archive.extract",
        base={"source": label, "target_dir": target, "privileged": privileged},
        enabled=diagnostics,
    ) as summary:
        try:
            with open_tar_reader(reader, label=label) as tr:
                for member in stream_members(tr):
                    owner = None
                    if privileged:
                        owner = ownership.resolve_ownership(member.uname, member.gname)

                    path = target_path(target, member.name)
                    if member.isdir():
                        _make_dir(path, member, owner)
                        dirs += 1
                    elif member.isreg():
                        _write_file(path, member, tr, owner)
                        files += 1
                        total += member.size
                    else:
                        skipped += 1
                        log.debug(f"extract.skip name={member.name} type={member.type!r}")
                        continue
                    log.debug(f"extract.entry name={member.name} path={path}")
        except DECODE_ERRORS as e:
            raise CorruptedArchiveError(label, str(e) or type(e).__name__) from e
        except OSError as e:
            raise FileError(f"Failed to extract into '{target}': {e}") from e

        summary.update({"dirs": dirs, "files": files, "skipped": skipped, "bytes": total})

    return ExtractResult(
        target_dir=target,
        dirs=dirs,
        files=files,
        skipped=skipped,
        total_bytes=total,
    )


def extract(
    tar_path: str | os.PathLike[str],
    target_dir: str | os.PathLike[str] = "",
    *,
    resolver: ConfigResolver | None = None,
) -> ExtractResult:
    """Extract the gzip-compressed tar file at ``tar_path`` into ``target_dir``."""
    label = os.fspath(tar_path)
    try:
        f = open(tar_path, "rb")
    except OSError as e:
        raise FileError(f"Cannot open archive '{label}': {e.strerror or e}") from e
    with f:
        return extract_reader(f, target_dir, resolver=resolver, label=label)
