from __future__ import annotations

import os
from pathlib import Path

import typer

from iu import __version__
from iu.cli.commands.install_cmd import install
from iu.cli.commands.list_cmd import list_installations
from iu.cli.commands.mv_cmd import mv
from iu.cli.commands.run_cmd import run
from iu.cli.commands.uninstall_cmd import uninstall
from iu.cli.context import CONFIG_ENV


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command("list")(list_installations)
app.command()(install)
# Unity takes single-dash options (-batchmode, -projectPath ...)
app.command(context_settings={"ignore_unknown_options": True})(run)
app.command()(mv)
app.command()(uninstall)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: config.toml in the user config directory)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser())


def main() -> None:
    app()
