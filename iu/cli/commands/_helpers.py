"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from iu.core.errors import ErrorCode
from iu.core.installation import Installation
from iu.core.result import Err, Result
from iu.core.version import VersionMetadata
from iu.install.errors import InstallError
from iu.output.console import Style
from iu.output.errors import install_error_exit_code, print_install_error

if TYPE_CHECKING:
    from iu.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, InstallError], ctx: CLIContext) -> T:
    """Exit with the error's exit code if result is Err, otherwise unwrap it.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_install_error(e, ctx.console)
                raise typer.Exit(code=install_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_install_error(result.error, ctx.console)
        raise typer.Exit(code=install_error_exit_code(result.error))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def parse_version(text: str, ctx: CLIContext) -> VersionMetadata:
    version = VersionMetadata.parse(text)
    if version is None:
        ctx.console.error(f"Invalid Unity version: {text}")
        ctx.console.print("hint: expected a version like 2021.3.5f1", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))
    return version


def find_installation(text: str, ctx: CLIContext) -> Installation:
    """Installed editor matching the version given on the command line."""
    version = parse_version(text, ctx)
    installations = exit_on_error(ctx.platform.find_installations(), ctx)
    for installation in installations:
        if installation.version.same_release(version):
            return installation

    ctx.console.error(f"Unity {version} is not installed")
    if installations:
        available = ", ".join(str(i.version) for i in installations)
        ctx.console.print(f"Installed: {available}", Style.DIM)
    exit_with_code(int(ErrorCode.USER_ERROR))
