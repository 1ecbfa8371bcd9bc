"""ezkit: directory, authorization and nested path utilities."""

from __future__ import annotations

from importlib import metadata as _metadata

from .auth import AuthCoordinator, authorize, validate_check
from .directory import Directory, Privilege, Role, User, all_present, none_present
from .errors import (
    AuthorizationError,
    DirectoryError,
    DuplicateNameError,
    EzkitError,
    InvalidCheckError,
    SecurityError,
    UnknownPrivilegeError,
    UnknownRoleError,
    ValueBoundsError,
)
from .paths import Lookup, PathAccessor, PathRef, get_path, lookup_path, set_path
from .settings import Settings, get_settings, reload_settings

try:  # pragma: no cover - executed when package metadata is available
    __version__ = _metadata.version("ezkit")
except _metadata.PackageNotFoundError:  # pragma: no cover - local source tree fallback
    __version__ = "0.0.0"

__all__ = [
    "AuthCoordinator",
    "AuthorizationError",
    "Directory",
    "DirectoryError",
    "DuplicateNameError",
    "EzkitError",
    "InvalidCheckError",
    "Lookup",
    "PathAccessor",
    "PathRef",
    "Privilege",
    "Role",
    "SecurityError",
    "Settings",
    "UnknownPrivilegeError",
    "UnknownRoleError",
    "User",
    "ValueBoundsError",
    "__version__",
    "all_present",
    "authorize",
    "get_path",
    "get_settings",
    "lookup_path",
    "none_present",
    "reload_settings",
    "set_path",
    "validate_check",
]
