"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path (for 'targz.*' imports without an install)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))

DUMMY_DATA = b"hello world"


@pytest.fixture(autouse=True)
def _isolate_global_buses():
    """Keep verbosity and bus subscribers from leaking between tests."""
    from targz.core.events import get_event_bus
    from targz.core.log_bus import get_log_bus
    from targz.core.logging import VerbosityLevel, set_verbosity

    yield
    set_verbosity(VerbosityLevel.NORMAL)
    get_log_bus().clear()
    get_event_bus().clear()


@pytest.fixture
def src_tree(tmp_path):
    """Create the reference tree.

    Layout:
        src/bar.txt, src/baz.txt, src/foo.txt, src/sub/bork.txt
    each holding b"hello world".

    Returns:
        Path to src
    """
    src = tmp_path / "src"
    src.mkdir(mode=0o750)
    for name in ("bar.txt", "baz.txt", "foo.txt"):
        (src / name).write_bytes(DUMMY_DATA)
    sub = src / "sub"
    sub.mkdir(mode=0o750)
    (sub / "bork.txt").write_bytes(DUMMY_DATA)
    return src
