"""Core domain types."""

from .config import Config, ConfigError, load_config
from .errors import ErrorCode
from .installation import Installation
from .queue import EDITOR_PACKAGE_NAME, FileType, InstallQueue, PackageItem
from .result import Err, Ok, Result, is_err, is_ok
from .version import ReleaseType, VersionMetadata

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    # errors
    "ErrorCode",
    # installation
    "Installation",
    # queue
    "EDITOR_PACKAGE_NAME",
    "FileType",
    "InstallQueue",
    "PackageItem",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # version
    "ReleaseType",
    "VersionMetadata",
]
