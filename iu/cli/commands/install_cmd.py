"""Install an editor and modules from already downloaded packages."""

from __future__ import annotations

from pathlib import Path

import typer

from iu.cli.commands._helpers import exit_on_error, exit_with_code, parse_version
from iu.cli.context import CLIContext, build_context
from iu.core.errors import ErrorCode
from iu.core.queue import EDITOR_PACKAGE_NAME, InstallQueue, PackageItem
from iu.output.console import Style


def install(
    version: str = typer.Argument(..., help="Unity version, e.g. 2021.3.5f1"),
    editor: Path | None = typer.Option(
        None,
        "--editor",
        help="Editor package (omit to add modules to an installed editor)",
    ),
    module: list[str] | None = typer.Option(
        None,
        "--module",
        "-m",
        help="Module package as NAME=FILE (repeatable)",
    ),
    paths: str | None = typer.Option(
        None,
        "--paths",
        help="Install path templates separated by ';' (overrides config)",
    ),
) -> None:
    """Install Unity packages in one transaction."""
    ctx = build_context()

    queue = _build_queue(ctx, version, editor, module or [])
    exit_on_error(ctx.platform.ensure_elevation(), ctx)

    names = ", ".join(item.name for item in queue.items)
    ctx.console.header(f"Installing Unity {queue.version}: {names}")
    installation = exit_on_error(ctx.platform.install(queue, paths), ctx)
    if installation is None:
        ctx.console.warning("Install cancelled")
        exit_with_code(int(ErrorCode.USER_ERROR))

    ctx.console.success(f"Installed Unity {installation.version} at {installation.path}")


def _build_queue(
    ctx: CLIContext,
    version_text: str,
    editor: Path | None,
    modules: list[str],
) -> InstallQueue:
    version = parse_version(version_text, ctx)

    items: list[PackageItem] = []
    if editor is not None:
        items.append(PackageItem.for_file(EDITOR_PACKAGE_NAME, _existing_file(ctx, editor)))

    for value in modules:
        name, sep, file = value.partition("=")
        name = name.strip()
        if not sep or not name or not file:
            ctx.console.error(f"Invalid --module value: {value}")
            ctx.console.print("hint: expected NAME=FILE", Style.DIM)
            exit_with_code(int(ErrorCode.USER_ERROR))
        if name == EDITOR_PACKAGE_NAME:
            ctx.console.error(f"Use --editor to install the {EDITOR_PACKAGE_NAME} package")
            exit_with_code(int(ErrorCode.USER_ERROR))
        items.append(PackageItem.for_file(name, _existing_file(ctx, Path(file))))

    if not items:
        ctx.console.error("Nothing to install")
        ctx.console.print("hint: pass --editor and/or --module", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    return InstallQueue(version=version, items=tuple(items))


def _existing_file(ctx: CLIContext, path: Path) -> Path:
    path = path.expanduser()
    if not path.is_file():
        ctx.console.error(f"Package not found: {path}")
        exit_with_code(int(ErrorCode.USER_ERROR))
    return path.resolve()
