from __future__ import annotations

import typer

from iu.cli.commands._helpers import exit_on_error, find_installation
from iu.cli.context import build_context
from iu.output.console import Style


def uninstall(
    version: str = typer.Argument(..., help="Installed Unity version"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Execute (default is dry-run)"),
) -> None:
    """Delete an installed Unity editor. Dry-run by default, use -y to execute."""
    ctx = build_context()

    installation = find_installation(version, ctx)
    if not yes:
        ctx.console.warning("DRY-RUN")
        ctx.console.print(f"  {installation.path}", Style.DIM)
        ctx.console.print("Use -y to execute", Style.DIM)
        return

    exit_on_error(ctx.platform.uninstall(installation), ctx)
    ctx.console.success(f"Uninstalled Unity {installation.version}")
