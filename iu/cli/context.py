from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from iu.core.config import Config, load_config
from iu.core.errors import ErrorCode
from iu.core.result import Err
from iu.output.console import ConsoleProtocol, RichConsole
from iu.platform.paths import user_config_dir
from iu.platforms import BasePlatform, get_platform

# Set by the --config option of the root command
CONFIG_ENV = "IU_CONFIG"
CONFIG_FILE_NAME = "config.toml"


@dataclass(frozen=True, slots=True)
class CLIContext:
    platform: BasePlatform
    config: Config
    console: ConsoleProtocol


def config_path() -> tuple[Path, bool]:
    """Config file location and whether it was chosen explicitly."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser(), True
    return user_config_dir() / CONFIG_FILE_NAME, False


def _load(console: ConsoleProtocol) -> Config:
    path, explicit = config_path()
    if not explicit and not path.exists():
        return Config()

    result = load_config(path)
    if isinstance(result, Err):
        if explicit:
            console.error(result.error.message)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        console.warning(f"{result.error.message} (using defaults)")
        return Config()
    return result.value


def build_context() -> CLIContext:
    console = RichConsole()
    config = _load(console)

    try:
        platform = get_platform(console=console, config=config)
    except NotImplementedError as e:
        console.error(str(e))
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(platform=platform, config=config, console=console)
