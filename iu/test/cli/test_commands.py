"""Tests for the iu CLI commands.

Commands run against a WindowsPlatform rooted in tmp_path: its installers
only go through the command runner, so they work on every OS.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
import typer

from iu.cli.context import CLIContext
from iu.core.config import Config, InstallConfig
from iu.core.errors import ErrorCode
from iu.output.console import MockConsole, Style
from iu.platforms import windows
from iu.platforms.windows import WindowsPlatform
from iu.test.fakes import FakeRunner


def nsis(args: list[str] | str) -> subprocess.CompletedProcess[str] | None:
    if isinstance(args, str) and "/D=" in args:
        target = Path(args.split("/D=", 1)[1])
        (target / "Editor").mkdir(parents=True)
        (target / "Editor" / "Unity.exe").write_text("exe")
    return None


def _ctx(tmp_path: Path, runner: FakeRunner | None = None) -> CLIContext:
    console = MockConsole()
    config = Config(
        install=InstallConfig(
            paths=f"{tmp_path}/Unity {{major}}.{{minor}}.{{patch}}{{type}}{{build}}",
            default_path=tmp_path / "Unity",
        )
    )
    platform = WindowsPlatform(console=console, runner=runner or FakeRunner(), config=config)
    return CLIContext(platform=platform, config=config, console=console)


def _installed(tmp_path: Path, version: str = "2021.3.5f1") -> Path:
    root = tmp_path / f"Unity {version}"
    (root / "Editor").mkdir(parents=True)
    (root / "Editor" / "Unity.exe").write_text("exe")
    return root


def _console(ctx: CLIContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


class TestList:
    def test_lists_installations(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.list_cmd as list_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(list_cmd, "build_context", lambda: ctx)
        root = _installed(tmp_path)

        list_cmd.list_installations()

        assert _console(ctx).messages == [f"2021.3.5f1  {root}"]

    def test_empty(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.list_cmd as list_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(list_cmd, "build_context", lambda: ctx)

        list_cmd.list_installations()

        assert _console(ctx).lines(Style.DIM) == ["No Unity installations found"]


class TestInstall:
    def _run(self, ctx: CLIContext, monkeypatch: pytest.MonkeyPatch, **kwargs: object) -> None:
        import iu.cli.commands.install_cmd as install_cmd

        monkeypatch.setattr(install_cmd, "build_context", lambda: ctx)
        args: dict[str, object] = {"editor": None, "module": None, "paths": None}
        args.update(kwargs)
        install_cmd.install(**args)  # type: ignore[arg-type]

    def test_installs_editor(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(windows, "is_elevated", lambda: True)
        ctx = _ctx(tmp_path, FakeRunner(handler=nsis))
        setup = tmp_path / "UnitySetup64.exe"
        setup.write_text("")

        self._run(ctx, monkeypatch, version="2021.3.5f1", editor=setup)

        success = _console(ctx).lines(Style.SUCCESS)
        assert success == [f"Installed Unity 2021.3.5f1 at {tmp_path / 'Unity 2021.3.5f1'}"]
        assert (tmp_path / "Unity 2021.3.5f1" / "Editor" / "Unity.exe").is_file()

    def test_requires_admin(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(windows, "is_elevated", lambda: False)
        ctx = _ctx(tmp_path)
        setup = tmp_path / "UnitySetup64.exe"
        setup.write_text("")

        with pytest.raises(typer.Exit) as exc:
            self._run(ctx, monkeypatch, version="2021.3.5f1", editor=setup)

        assert exc.value.exit_code == int(ErrorCode.PRIVILEGE_ERROR)
        assert any("hint:" in line for line in _console(ctx).lines(Style.DIM))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"version": "not-a-version"},
            {"version": "2021.3.5f1"},
            {"version": "2021.3.5f1", "module": ["Android"]},
            {"version": "2021.3.5f1", "module": ["Unity=setup.exe"]},
            {"version": "2021.3.5f1", "editor": Path("missing.exe")},
        ],
        ids=["bad-version", "nothing", "bad-module", "editor-as-module", "missing-file"],
    )
    def test_user_errors(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, kwargs: dict[str, object]
    ) -> None:
        ctx = _ctx(tmp_path)

        with pytest.raises(typer.Exit) as exc:
            self._run(ctx, monkeypatch, **kwargs)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert _console(ctx).has_error()

    def test_modules_for_missing_version(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(windows, "is_elevated", lambda: True)
        ctx = _ctx(tmp_path)
        module = tmp_path / "UnitySetup-Android.exe"
        module.write_text("")

        with pytest.raises(typer.Exit) as exc:
            self._run(ctx, monkeypatch, version="2021.3.5f1", module=[f"Android={module}"])

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert any("not already installed" in m for m in _console(ctx).lines(Style.ERROR))


class TestRun:
    def test_detached(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.run_cmd as run_cmd

        runner = FakeRunner()
        ctx = _ctx(tmp_path, runner)
        monkeypatch.setattr(run_cmd, "build_context", lambda: ctx)
        root = _installed(tmp_path)

        run_cmd.run(version="2021.3.5f1", arguments=["-batchmode"], child=False)

        assert runner.calls == [
            ["cmd", "/c", "start", "", str(root / "Editor" / "Unity.exe"), "-batchmode"]
        ]

    def test_not_installed(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.run_cmd as run_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(run_cmd, "build_context", lambda: ctx)
        _installed(tmp_path, "2022.1.0f1")

        with pytest.raises(typer.Exit) as exc:
            run_cmd.run(version="2021.3.5f1", arguments=None, child=False)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert _console(ctx).lines(Style.ERROR) == ["Unity 2021.3.5f1 is not installed"]
        assert _console(ctx).lines(Style.DIM) == ["Installed: 2022.1.0f1"]


class TestMove:
    def test_moves(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.mv_cmd as mv_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(mv_cmd, "build_context", lambda: ctx)
        root = _installed(tmp_path)
        destination = tmp_path / "archive" / "2021.3"

        mv_cmd.mv(version="2021.3.5f1", destination=destination)

        assert not root.exists()
        assert (destination / "Editor" / "Unity.exe").is_file()
        assert _console(ctx).lines(Style.SUCCESS)

    def test_destination_exists(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.mv_cmd as mv_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(mv_cmd, "build_context", lambda: ctx)
        _installed(tmp_path)
        taken = tmp_path / "taken"
        taken.mkdir()

        with pytest.raises(typer.Exit) as exc:
            mv_cmd.mv(version="2021.3.5f1", destination=taken)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


class TestUninstall:
    def test_dry_run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.uninstall_cmd as uninstall_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(uninstall_cmd, "build_context", lambda: ctx)
        root = _installed(tmp_path)

        uninstall_cmd.uninstall(version="2021.3.5f1", yes=False)

        assert root.exists()
        assert _console(ctx).lines(Style.WARNING) == ["DRY-RUN"]

    def test_execute(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import iu.cli.commands.uninstall_cmd as uninstall_cmd

        ctx = _ctx(tmp_path)
        monkeypatch.setattr(uninstall_cmd, "build_context", lambda: ctx)
        root = _installed(tmp_path)

        uninstall_cmd.uninstall(version="2021.3.5f1", yes=True)

        assert not root.exists()
        assert _console(ctx).lines(Style.SUCCESS) == ["Uninstalled Unity 2021.3.5f1"]
