from __future__ import annotations

from pathlib import Path

import typer

from iu.cli.commands._helpers import exit_on_error, find_installation
from iu.cli.context import build_context


def mv(
    version: str = typer.Argument(..., help="Installed Unity version"),
    destination: Path = typer.Argument(..., help="New installation directory"),
) -> None:
    """Move an installed Unity editor."""
    ctx = build_context()

    installation = find_installation(version, ctx)
    old_path = installation.path
    exit_on_error(ctx.platform.move_installation(installation, destination.expanduser()), ctx)
    ctx.console.success(f"Moved Unity {installation.version}: {old_path} -> {installation.path}")
