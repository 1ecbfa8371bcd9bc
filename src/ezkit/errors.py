"""Exception types raised across :mod:`ezkit`."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class EzkitError(Exception):
    """Base class for every error raised by ezkit."""


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------


class DirectoryError(EzkitError, ValueError):
    """Base class for user / role / privilege management errors."""

    def __init__(self, message: str, *, names: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.names: tuple[str, ...] = tuple(names)


class DuplicateNameError(DirectoryError):
    """Raised when creating an entity whose name is already taken."""


class UnknownPrivilegeError(DirectoryError):
    """Raised when a referenced privilege does not exist."""


class UnknownRoleError(DirectoryError):
    """Raised when a referenced role does not exist."""


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class AuthorizationError(EzkitError):
    """Raised when one or more authorization checks rejected the credentials.

    ``failures`` holds ``(index, exception)`` pairs in check order. When the
    deadline expired before every check settled, ``timed_out`` is ``True`` and
    ``failures`` only lists the checks that had already failed.
    """

    def __init__(
        self,
        message: str,
        *,
        failures: Sequence[tuple[int, BaseException]] = (),
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.failures: tuple[tuple[int, BaseException], ...] = tuple(failures)
        self.timed_out = timed_out

    @property
    def reasons(self) -> list[str]:
        return [str(exc) for _, exc in self.failures]


class InvalidCheckError(EzkitError, TypeError):
    """Raised when an authorization check cannot accept the credentials argument."""


# ---------------------------------------------------------------------------
# Values / security
# ---------------------------------------------------------------------------


class ValueBoundsError(EzkitError, ValueError):
    """Raised when a column value does not fit its declared width or length."""


class SecurityError(EzkitError):
    """Raised for invalid key material or data that cannot be decrypted."""


__all__ = [
    "AuthorizationError",
    "DirectoryError",
    "DuplicateNameError",
    "EzkitError",
    "InvalidCheckError",
    "SecurityError",
    "UnknownPrivilegeError",
    "UnknownRoleError",
    "ValueBoundsError",
]
