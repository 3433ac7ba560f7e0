"""Tests for iu.platform.detection module."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from iu.platform import detection
from iu.platform.detection import Platform, detect_platform


@pytest.fixture(autouse=True)
def clear_cache() -> Iterator[None]:
    detect_platform.cache_clear()
    yield
    detect_platform.cache_clear()


class TestPlatformEnum:
    def test_str(self) -> None:
        assert str(Platform.MACOS) == "macos"
        assert str(Platform.UNKNOWN) == "unknown"

    def test_is_unix(self) -> None:
        assert Platform.LINUX.is_unix is True
        assert Platform.MACOS.is_unix is True
        assert Platform.WINDOWS.is_unix is False
        assert Platform.UNKNOWN.is_unix is False


@pytest.mark.parametrize(
    ("sys_platform", "expected"),
    [
        ("linux", Platform.LINUX),
        ("darwin", Platform.MACOS),
        ("win32", Platform.WINDOWS),
        ("cygwin", Platform.WINDOWS),
        ("freebsd14", Platform.UNKNOWN),
    ],
)
def test_detect_platform(
    monkeypatch: pytest.MonkeyPatch, sys_platform: str, expected: Platform
) -> None:
    monkeypatch.setattr(detection._sys, "platform", sys_platform)

    assert detect_platform() is expected


def test_helpers_agree(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(detection._sys, "platform", "darwin")

    assert detection.is_macos() is True
    assert detection.is_linux() is False
    assert detection.is_windows() is False
