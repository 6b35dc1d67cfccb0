"""Host identity lookups for archive ownership metadata.

Everything here is best-effort. Lookups that fail return empty values and
``apply_ownership`` reports failure through its return value; none of these
functions raise for a missing user, a missing group, or a refused chown.
"""

from __future__ import annotations

import grp
import os
import pwd
from pathlib import Path

from targz.core.logging import get_logger
from targz.types import Ownership

_logger = get_logger(__name__)


def is_privileged() -> bool:
    """True when the effective identity may change file ownership."""
    return os.geteuid() == 0


def owner_names(uid: int, gid: int) -> tuple[str, str]:
    """Return (uname, gname) for numeric ids; unknown ids give empty names."""
    try:
        uname = pwd.getpwuid(uid).pw_name
    except KeyError:
        uname = ""
    try:
        gname = grp.getgrgid(gid).gr_name
    except KeyError:
        gname = ""
    return uname, gname


def resolve_ownership(uname: str, gname: str) -> Ownership:
    """Map archive owner/group names to ids on this host.

    Empty names and names unknown to the host leave that axis unresolved.
    """
    uid: int | None = None
    gid: int | None = None
    if uname:
        try:
            uid = pwd.getpwnam(uname).pw_uid
        except KeyError:
            _logger.debug(f"ownership.lookup user={uname!r} status=unknown")
    if gname:
        try:
            gid = grp.getgrnam(gname).gr_gid
        except KeyError:
            _logger.debug(f"ownership.lookup group={gname!r} status=unknown")
    return Ownership(uid=uid, gid=gid)


def apply_ownership(path: str | Path, owner: Ownership) -> bool:
    """Change ownership of ``path``; return False when the host refuses.

    Some filesystems (network shares in particular) reject chown outright.
    """
    if owner.is_empty:
        return False
    uid = -1 if owner.uid is None else owner.uid
    gid = -1 if owner.gid is None else owner.gid
    try:
        os.chown(path, uid, gid)
    except OSError as e:
        _logger.debug(f"ownership.apply path={str(path)!r} status=refused error={e}")
        return False
    return True
