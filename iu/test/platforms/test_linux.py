"""Tests for iu.platforms.linux module."""

from __future__ import annotations

import io
import os
import sys
import tarfile
from pathlib import Path

import pytest

from iu.core.config import Config, InstallConfig
from iu.core.queue import EDITOR_PACKAGE_NAME, InstallQueue, PackageItem
from iu.core.result import Err, Ok
from iu.core.version import VersionMetadata
from iu.output.console import MockConsole
from iu.platforms import linux
from iu.platforms.linux import LinuxPlatform
from iu.test.fakes import FakeRunner

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")

VERSION = VersionMetadata.parse("2021.3.5f1")
assert VERSION is not None


def _tar(path: Path, files: dict[str, bytes]) -> Path:
    with tarfile.open(path, "w:xz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return path


def _platform(
    tmp_path: Path, runner: FakeRunner | None = None
) -> tuple[LinuxPlatform, MockConsole]:
    console = MockConsole()
    config = Config(
        install=InstallConfig(
            paths=f"{tmp_path}/Unity {{major}}.{{minor}}.{{patch}}{{type}}{{build}}",
            default_path=tmp_path / "Unity",
        )
    )
    return LinuxPlatform(console=console, runner=runner or FakeRunner(), config=config), console


class TestLayout:
    def test_defaults(self) -> None:
        platform = LinuxPlatform(console=MockConsole(), runner=FakeRunner())

        assert platform.layout.install_path == Path("/opt/Unity")
        executable = platform.layout.executable_for(Path("/opt/Unity"))
        assert executable == Path("/opt/Unity/Editor/Unity")
        assert platform.install_paths == "/opt/Unity {major}.{minor}.{patch}{type}{build}"

    def test_config_overrides(self, tmp_path: Path) -> None:
        platform, _ = _platform(tmp_path)

        assert platform.layout.install_path == tmp_path / "Unity"
        assert platform.install_paths.startswith(str(tmp_path))


class TestInstall:
    def test_editor_and_module(self, tmp_path: Path) -> None:
        platform, _ = _platform(tmp_path)
        editor = _tar(tmp_path / "Unity.tar.xz", {"Editor/Unity": b"#!/bin/sh\n"})
        module = _tar(tmp_path / "Android.tar.xz", {"Editor/Data/PlaybackEngines/a": b"a"})
        assert VERSION is not None
        queue = InstallQueue(
            VERSION,
            (
                PackageItem.for_file(EDITOR_PACKAGE_NAME, editor),
                PackageItem.for_file("Android", module),
            ),
        )

        result = platform.install(queue)

        assert isinstance(result, Ok)
        installation = result.value
        assert installation is not None
        assert installation.path == tmp_path / "Unity 2021.3.5f1"
        assert installation.executable.is_file()
        assert (installation.path / "Editor" / "Data" / "PlaybackEngines" / "a").is_file()
        assert not (tmp_path / "Unity").exists()

    def test_found_after_install(self, tmp_path: Path) -> None:
        platform, _ = _platform(tmp_path)
        editor = _tar(tmp_path / "Unity.tar.xz", {"Editor/Unity": b"#!/bin/sh\n"})
        assert VERSION is not None
        platform.install(
            InstallQueue(VERSION, (PackageItem.for_file(EDITOR_PACKAGE_NAME, editor),))
        )

        found = platform.find_installations()

        assert isinstance(found, Ok)
        assert [str(i.version) for i in found.value] == ["2021.3.5f1"]

    def test_upgrade_with_path_override(self, tmp_path: Path) -> None:
        platform, _ = _platform(tmp_path)
        editor = _tar(tmp_path / "Unity.tar.xz", {"Editor/Unity": b"#!/bin/sh\n"})
        module = _tar(tmp_path / "Android.tar.xz", {"Editor/Data/PlaybackEngines/a": b"a"})
        paths = f"{tmp_path}/custom/Unity {{major}}.{{minor}}.{{patch}}{{type}}{{build}}"
        assert VERSION is not None
        platform.install(
            InstallQueue(VERSION, (PackageItem.for_file(EDITOR_PACKAGE_NAME, editor),)), paths
        )

        result = platform.install(
            InstallQueue(VERSION, (PackageItem.for_file("Android", module),)), paths
        )

        assert isinstance(result, Ok)
        installation = result.value
        assert installation is not None
        assert installation.path == tmp_path / "custom" / "Unity 2021.3.5f1"
        assert (installation.path / "Editor" / "Data" / "PlaybackEngines" / "a").is_file()
        found = platform.find_installations(install_paths=paths)
        assert isinstance(found, Ok)
        assert [i.path for i in found.value] == [installation.path]

    def test_unsupported_package_aborts(self, tmp_path: Path) -> None:
        platform, _ = _platform(tmp_path)
        pkg = tmp_path / "Unity.pkg"
        pkg.write_text("")
        assert VERSION is not None

        result = platform.install(
            InstallQueue(VERSION, (PackageItem.for_file(EDITOR_PACKAGE_NAME, pkg),))
        )

        assert isinstance(result, Err)
        assert result.error.kind == "unsupported_package_type"
        assert platform.transaction.state.active is False

    def test_elevated_extract_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def deny(*_: object, **__: object) -> None:
            raise PermissionError("Permission denied")

        monkeypatch.setattr(os, "geteuid", lambda: 1000)
        monkeypatch.setattr(linux, "extract_archive", deny)
        runner = FakeRunner()
        platform, _ = _platform(tmp_path, runner)
        item = PackageItem.for_file(EDITOR_PACKAGE_NAME, tmp_path / "Unity.zip")
        install_path = tmp_path / "Unity"
        assert VERSION is not None
        platform.prepare(InstallQueue(VERSION, (item,)))

        result = platform.install_package(item)

        assert isinstance(result, Ok)
        assert runner.calls == [
            ["sudo", "mkdir", "-p", str(install_path)],
            ["sudo", "unzip", "-o", "-q", str(item.file_path), "-d", str(install_path)],
        ]
        platform.complete(True)


class TestElevation:
    def test_root_needs_nothing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(os, "geteuid", lambda: 0)
        runner = FakeRunner()
        platform = LinuxPlatform(console=MockConsole(), runner=runner)

        assert platform.ensure_elevation() == Ok(None)
        assert platform.is_privileged() == Ok(True)
        assert runner.calls == []

    def test_sudo_prompt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(os, "geteuid", lambda: 1000)
        runner = FakeRunner(returncode=1, stderr="sudo: 3 incorrect password attempts")
        platform = LinuxPlatform(console=MockConsole(), runner=runner)

        result = platform.ensure_elevation()

        assert isinstance(result, Err)
        assert result.error.kind == "insufficient_privilege"
        assert runner.calls == [["sudo", "-v"]]
        assert platform.is_privileged() == Ok(False)


def test_uninstall(tmp_path: Path) -> None:
    platform, console = _platform(tmp_path)
    root = tmp_path / "Unity 2021.3.5f1"
    (root / "Editor").mkdir(parents=True)
    (root / "Editor" / "Unity").write_text("bin")
    found = platform.find_installations()
    assert isinstance(found, Ok)

    result = platform.uninstall(found.value[0])

    assert isinstance(result, Ok)
    assert not root.exists()
    assert any(str(root) in line for line in console.messages)
