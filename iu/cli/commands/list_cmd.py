from __future__ import annotations

from iu.cli.commands._helpers import exit_on_error
from iu.cli.context import build_context
from iu.output.console import Style


def list_installations() -> None:
    """List installed Unity editors."""
    ctx = build_context()

    installations = exit_on_error(ctx.platform.find_installations(), ctx)
    if not installations:
        ctx.console.print("No Unity installations found", Style.DIM)
        return

    for installation in installations:
        ctx.console.print(f"{installation.version}  {installation.path}")
