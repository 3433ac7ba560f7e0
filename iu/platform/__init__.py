"""Platform abstraction layer."""

from .detection import (
    Platform,
    detect_platform,
    is_linux,
    is_macos,
    is_windows,
)
from .paths import (
    PRODUCT_NAME,
    home,
    user_cache_dir,
    user_config_dir,
    user_download_dir,
)
from .privilege import is_elevated
from .process import (
    CANCELLED_RETURNCODE,
    CancelToken,
    CommandRunner,
    DefaultCommandRunner,
    ProcessError,
    run_checked,
)

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_linux",
    "is_macos",
    "is_windows",
    # paths
    "PRODUCT_NAME",
    "home",
    "user_cache_dir",
    "user_config_dir",
    "user_download_dir",
    # privilege
    "is_elevated",
    # process
    "CANCELLED_RETURNCODE",
    "CancelToken",
    "CommandRunner",
    "DefaultCommandRunner",
    "ProcessError",
    "run_checked",
]
