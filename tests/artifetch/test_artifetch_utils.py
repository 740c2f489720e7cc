"""
Tests for platform detection.
"""

import pytest

from artifetch.artifetch_exceptions import ConfigurationError
from artifetch.artifetch_utils import Architecture, PlatformUtils


@pytest.mark.parametrize(
    "machine,expected",
    [("AMD64", Architecture.X64), ("x86_64", Architecture.X64), ("aarch64", Architecture.ARM64), ("i686", Architecture.X86)],
)
def test_known_architectures(monkeypatch, machine, expected):
    monkeypatch.delenv("PROCESSOR_ARCHITEW6432", raising=False)
    monkeypatch.setattr("artifetch.artifetch_utils.platform.machine", lambda: machine)

    assert PlatformUtils.get_architecture() is expected


def test_native_architecture_wins_under_emulation(monkeypatch):
    monkeypatch.setenv("PROCESSOR_ARCHITEW6432", "ARM64")
    monkeypatch.setattr("artifetch.artifetch_utils.platform.machine", lambda: "x86")

    assert PlatformUtils.get_architecture() is Architecture.ARM64


def test_unknown_architecture(monkeypatch):
    monkeypatch.delenv("PROCESSOR_ARCHITEW6432", raising=False)
    monkeypatch.setattr("artifetch.artifetch_utils.platform.machine", lambda: "sparc64")

    with pytest.raises(ConfigurationError, match="sparc64"):
        PlatformUtils.get_architecture()
