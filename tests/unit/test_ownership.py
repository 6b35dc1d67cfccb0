"""Unit tests for ownership lookup and best-effort application."""

from __future__ import annotations

import grp
import io
import os
import pwd
import tarfile
from pathlib import Path

import pytest

from targz import extract_reader, ownership
from targz.types import Ownership

_USER = pwd.getpwuid(os.getuid()).pw_name
_GROUP = grp.getgrgid(os.getgid()).gr_name


def test_owner_names_for_current_identity() -> None:
    assert ownership.owner_names(os.getuid(), os.getgid()) == (_USER, _GROUP)


def test_owner_names_unknown_ids_are_empty() -> None:
    assert ownership.owner_names(2**31 - 7, 2**31 - 7) == ("", "")


def test_resolve_known_names() -> None:
    owner = ownership.resolve_ownership(_USER, _GROUP)
    assert owner == Ownership(uid=os.getuid(), gid=os.getgid())


def test_resolve_unknown_names_is_not_an_error() -> None:
    owner = ownership.resolve_ownership("no-such-user-targz", "no-such-group-targz")
    assert owner == Ownership()
    assert owner.is_empty


def test_resolve_empty_names_skips_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(name):
        raise AssertionError("lookup must not run for empty names")

    monkeypatch.setattr(pwd, "getpwnam", _boom)
    monkeypatch.setattr(grp, "getgrnam", _boom)

    assert ownership.resolve_ownership("", "") == Ownership()


def test_apply_ownership_partial_axis(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, int, int]] = []
    monkeypatch.setattr(os, "chown", lambda p, u, g: calls.append((str(p), u, g)))
    target = tmp_path / "f"
    target.write_bytes(b"")

    assert ownership.apply_ownership(target, Ownership(gid=42)) is True
    assert calls == [(str(target), -1, 42)]


def test_apply_ownership_refused_returns_false(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _refuse(path, uid, gid):
        raise PermissionError(1, "Operation not permitted", str(path))

    monkeypatch.setattr(os, "chown", _refuse)

    assert ownership.apply_ownership(tmp_path, Ownership(uid=0, gid=0)) is False


def test_apply_ownership_empty_does_nothing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args):
        raise AssertionError("chown must not run without resolved ids")

    monkeypatch.setattr(os, "chown", _boom)

    assert ownership.apply_ownership(tmp_path, Ownership()) is False


def _archive_with_owners() -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        d = tarfile.TarInfo("top/")
        d.type = tarfile.DIRTYPE
        d.mode = 0o755
        d.uname, d.gname = _USER, _GROUP
        tf.addfile(d)

        known = tarfile.TarInfo("top/known.txt")
        known.size = 1
        known.uname, known.gname = _USER, "no-such-group-targz"
        tf.addfile(known, io.BytesIO(b"k"))

        stranger = tarfile.TarInfo("top/stranger.txt")
        stranger.size = 1
        stranger.uname, stranger.gname = "no-such-user-targz", "no-such-group-targz"
        tf.addfile(stranger, io.BytesIO(b"s"))
    return buf.getvalue()


def test_privileged_extract_applies_resolved_ownership(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[str, int, int]] = []
    monkeypatch.setattr(ownership, "is_privileged", lambda: True)
    monkeypatch.setattr(os, "chown", lambda p, u, g: calls.append((str(p), u, g)))

    extract_reader(io.BytesIO(_archive_with_owners()), tmp_path)

    assert calls == [
        (str(tmp_path / "top"), os.getuid(), os.getgid()),
        (str(tmp_path / "top" / "known.txt"), os.getuid(), -1),
    ]
    assert (tmp_path / "top" / "stranger.txt").read_bytes() == b"s"


def test_privileged_extract_ignores_refused_chown(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _refuse(path, uid, gid):
        raise PermissionError(1, "Operation not permitted", str(path))

    monkeypatch.setattr(ownership, "is_privileged", lambda: True)
    monkeypatch.setattr(os, "chown", _refuse)

    result = extract_reader(io.BytesIO(_archive_with_owners()), tmp_path)

    assert result.files == 2
    assert (tmp_path / "top" / "known.txt").read_bytes() == b"k"


def test_unprivileged_extract_never_looks_up_owners(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(*args):
        raise AssertionError("ownership must not be touched without privilege")

    monkeypatch.setattr(ownership, "is_privileged", lambda: False)
    monkeypatch.setattr(ownership, "resolve_ownership", _boom)
    monkeypatch.setattr(os, "chown", _boom)

    result = extract_reader(io.BytesIO(_archive_with_owners()), tmp_path)

    assert result.dirs == 1
    assert result.files == 2


def test_existing_directory_ownership_untouched(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[str] = []
    monkeypatch.setattr(ownership, "is_privileged", lambda: True)
    monkeypatch.setattr(os, "chown", lambda p, u, g: calls.append(str(p)))
    (tmp_path / "top").mkdir()

    extract_reader(io.BytesIO(_archive_with_owners()), tmp_path)

    assert str(tmp_path / "top") not in calls
