"""Archive options.

Options are callables applied in order to a fresh ``ArchiveOptions``; the
baseline comes from configuration (``archive.ignore``), so options given to a
call always add to it.

    create("photos", "photos.tar.gz", with_ignore(".DS_Store"), with_ignore("Thumbs.db"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from targz.core.config import ConfigResolver


@dataclass
class ArchiveOptions:
    ignores: list[str] = field(default_factory=list)
    diagnostics: bool = False

    def ignore_set(self) -> frozenset[str]:
        return frozenset(self.ignores)


Option = Callable[[ArchiveOptions], None]


def with_ignore(*names: str) -> Option:
    """Exclude entries whose base name equals one of ``names``.

    Matching is exact (no globbing) and applies at every depth; an ignored
    directory is skipped with everything under it. Multiple names may be given
    in one call and across several calls. A name that cannot be a base name,
    such as "" or "a/b", is accepted and never matches.
    """

    def _apply(opts: ArchiveOptions) -> None:
        opts.ignores.extend(names)

    return _apply


def get_options(options: Iterable[Option], resolver: ConfigResolver | None = None) -> ArchiveOptions:
    """Build ArchiveOptions from config (when a resolver is given) plus options."""
    opts = ArchiveOptions()
    if resolver is not None:
        opts.ignores.extend(resolver.resolve_ignore_names())
        opts.diagnostics = resolver.resolve_diagnostics_enabled()
    for opt in options:
        opt(opts)
    return opts
