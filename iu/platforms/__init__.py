"""Installer platform implementations."""

from __future__ import annotations

from iu.core.config import Config
from iu.output.console import ConsoleProtocol
from iu.platform.detection import Platform, detect_platform
from iu.platform.process import CommandRunner

from .base import BasePlatform, InstallerPlatform
from .linux import LinuxPlatform
from .macos import MacPlatform
from .windows import WindowsPlatform

__all__ = [
    "BasePlatform",
    "InstallerPlatform",
    "LinuxPlatform",
    "MacPlatform",
    "WindowsPlatform",
    "get_platform",
]


def get_platform(
    *,
    console: ConsoleProtocol,
    runner: CommandRunner | None = None,
    config: Config | None = None,
    platform: Platform | None = None,
) -> BasePlatform:
    """Create the implementation for the running (or given) OS.

    Raises:
        NotImplementedError: On an unrecognized operating system.
    """
    match platform or detect_platform():
        case Platform.WINDOWS:
            return WindowsPlatform(console=console, runner=runner, config=config)
        case Platform.MACOS:
            return MacPlatform(console=console, runner=runner, config=config)
        case Platform.LINUX:
            return LinuxPlatform(console=console, runner=runner, config=config)
        case other:
            raise NotImplementedError(f"Installing is not supported on {other}")
