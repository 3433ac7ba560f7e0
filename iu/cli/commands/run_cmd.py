from __future__ import annotations

import typer

from iu.cli.commands._helpers import exit_on_error, find_installation
from iu.cli.context import build_context


def run(
    version: str = typer.Argument(..., help="Installed Unity version"),
    arguments: list[str] | None = typer.Argument(None, help="Arguments passed to Unity"),
    child: bool = typer.Option(
        False,
        "--child",
        help="Wait for Unity, stream its log and exit with its exit code",
    ),
) -> None:
    """Run an installed Unity editor."""
    ctx = build_context()

    installation = find_installation(version, ctx)
    exit_on_error(ctx.platform.run(installation, arguments or [], child), ctx)
