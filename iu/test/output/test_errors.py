"""Tests for iu.output.errors module."""

from __future__ import annotations

from typing import get_args

import pytest

from iu.core.errors import ErrorCode
from iu.install.errors import InstallError, InstallErrorKind
from iu.output.console import MockConsole, Style
from iu.output.errors import install_error_exit_code, print_install_error


def test_print_message_and_hint() -> None:
    console = MockConsole()
    error = InstallError(
        kind="fallback_path_occupied",
        message="Fallback installation path '/opt/Unity (Moved by install-unity)' already exists.",
        hint="Move it back or delete it.",
    )

    print_install_error(error, console)

    assert console.lines(Style.ERROR) == [error.message]
    assert console.lines(Style.DIM) == ["hint: Move it back or delete it."]


def test_print_without_hint() -> None:
    console = MockConsole()

    print_install_error(InstallError(kind="run_failed", message="boom"), console)

    assert console.messages == ["boom"]


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("already_installing", ErrorCode.USER_ERROR),
        ("version_not_installed", ErrorCode.USER_ERROR),
        ("destination_exists", ErrorCode.USER_ERROR),
        ("insufficient_privilege", ErrorCode.PRIVILEGE_ERROR),
        ("elevation_failed", ErrorCode.PRIVILEGE_ERROR),
        ("package_install_failed", ErrorCode.ENV_ERROR),
        ("executable_not_found", ErrorCode.ENV_ERROR),
        ("restore_failed", ErrorCode.IO_ERROR),
    ],
)
def test_exit_codes(kind: InstallErrorKind, code: ErrorCode) -> None:
    assert install_error_exit_code(InstallError(kind=kind, message="x")) == int(code)


def test_every_kind_has_exit_code() -> None:
    for kind in get_args(InstallErrorKind):
        code = install_error_exit_code(InstallError(kind=kind, message="x"))
        assert ErrorCode(code).is_error


def test_install_error_str_is_message() -> None:
    assert str(InstallError(kind="run_failed", message="Could not run Unity")) == (
        "Could not run Unity"
    )
