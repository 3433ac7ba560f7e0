"""Install transaction and the file operations behind it."""

from .errors import InstallError, InstallErrorKind
from .fileops import ElevatedShell, PrivilegedFileOps
from .layout import FALLBACK_MARKER, InstallLayout
from .paths import expand_install_path, generate_unique_path, resolve_unique_install_path
from .transaction import InstallTransaction, Phase, TransactionState

__all__ = [
    "FALLBACK_MARKER",
    "ElevatedShell",
    "InstallError",
    "InstallErrorKind",
    "InstallLayout",
    "InstallTransaction",
    "Phase",
    "PrivilegedFileOps",
    "TransactionState",
    "expand_install_path",
    "generate_unique_path",
    "resolve_unique_install_path",
]
