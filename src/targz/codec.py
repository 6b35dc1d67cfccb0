"""Tar-over-gzip stream layering.

Writing stacks three layers: tar -> gzip -> sink. They are finalized strictly
in that order (tar end-of-archive blocks, then the gzip trailer, then a flush
of the sink), on the error path as well, so an aborted archive is still a
well-formed, if incomplete, .tar.gz. Reading mirrors it: gzip -> streaming tar.
"""

from __future__ import annotations

import contextlib
import gzip
import tarfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

from targz.core.errors import CorruptedArchiveError, FileError

# Errors raised by the decoders for malformed input. BadGzipFile is an OSError,
# so these must be matched before filesystem errors.
DECODE_ERRORS: tuple[type[BaseException], ...] = (
    gzip.BadGzipFile,
    tarfile.TarError,
    zlib.error,
    EOFError,
)


def _close_quietly(*layers: tarfile.TarFile | gzip.GzipFile) -> None:
    for layer in layers:
        with contextlib.suppress(Exception):
            layer.close()


@contextmanager
def open_tar_writer(sink: BinaryIO) -> Iterator[tarfile.TarFile]:
    """Yield a tar writer whose output is gzip-compressed into ``sink``.

    ``sink`` is flushed but not closed.
    """
    # Empty filename and zero mtime keep the gzip header independent of the sink.
    gz = gzip.GzipFile(filename="", mode="wb", fileobj=sink, mtime=0)
    try:
        tw = tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT)
    except BaseException:
        _close_quietly(gz)
        raise

    try:
        yield tw
    except BaseException:
        # The body's error wins; closing still writes the trailers.
        _close_quietly(tw, gz)
        with contextlib.suppress(Exception):
            sink.flush()
        raise

    try:
        tw.close()
        gz.close()
        sink.flush()
    except OSError as e:
        raise FileError(f"Failed to finalize archive: {e}") from e


@contextmanager
def open_tar_reader(source: BinaryIO, *, label: str = "<stream>") -> Iterator[tarfile.TarFile]:
    """Yield a streaming tar reader over gzip-compressed ``source``.

    Streaming mode reads strictly forward, so ``source`` need not be seekable.
    Decoder failures while opening surface as CorruptedArchiveError; iteration
    errors are mapped by the caller, which also owns filesystem errors.
    """
    gz = gzip.GzipFile(mode="rb", fileobj=source)
    try:
        try:
            tr = tarfile.open(fileobj=gz, mode="r|")
        except DECODE_ERRORS as e:
            raise CorruptedArchiveError(label, str(e) or type(e).__name__) from e
        with tr:
            yield tr
    finally:
        gz.close()


def stream_members(tr: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
    """Iterate the members of a streaming reader without keeping them.

    ``tarfile`` records every header it reads in ``tr.members``; the list is
    reset after each member is handled so memory stays flat on long archives.
    """
    for member in tr:
        yield member
        tr.members = []
