"""Typed configuration loading and access.

The config file is optional TOML:

    [install]
    # Candidate install paths, separated by ';'. Tokens: {major} {minor}
    # {patch} {type} {build} {hash} (case-insensitive).
    paths = "/Applications/Unity {major}.{minor}.{patch}{type}{build}"
    # Override the canonical install location
    default_path = "/Applications/Unity"

    [run]
    poll_interval = 0.1
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "InstallConfig",
    "RunConfig",
    "DEFAULT_POLL_INTERVAL",
    "load_config",
]

# Seconds between checks while waiting for a child process
DEFAULT_POLL_INTERVAL = 0.1


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class InstallConfig:
    """Where installations go.

    Attributes:
        paths: ';'-separated install path templates (None: platform default)
        default_path: Canonical install location override (None: platform default)
    """

    paths: str | None = None
    default_path: Path | None = None


@dataclass(frozen=True, slots=True)
class RunConfig:
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    install: InstallConfig = field(default_factory=InstallConfig)
    run: RunConfig = field(default_factory=RunConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        install: StrDict = get_table(data, "install") or {}
        run: StrDict = get_table(data, "run") or {}

        default_path = get_str(install, "default_path")
        return cls(
            install=InstallConfig(
                paths=get_str(install, "paths"),
                default_path=Path(default_path).expanduser() if default_path else None,
            ),
            run=RunConfig(
                poll_interval=get_float(run, "poll_interval") or DEFAULT_POLL_INTERVAL,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
