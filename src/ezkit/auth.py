"""Run independent authorization checks concurrently against one credentials value.

A check is any callable taking the credentials as its single argument. It
authorizes by returning (any value, possibly through an awaitable) and denies
by raising. Returned values are handed back to the caller so data fetched
while checking (a session row, a user record) does not have to be loaded a
second time.

Checks can be grouped into named contexts up front::

    coordinator = AuthCoordinator(
        {
            "client": [check_session],
            "admin": [check_cookie, check_session_age, check_privileges],
        }
    )
    session, cookie, _ = await coordinator.authorize("admin", credentials)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .errors import AuthorizationError, InvalidCheckError
from .logging import log_context
from .settings import Settings

logger = logging.getLogger(__name__)

Check = Callable[[Any], Any | Awaitable[Any]]

_UNSET: Any = object()

# Checks abandoned by a timed out or cancelled call; referenced until they settle.
_BACKGROUND: set[asyncio.Task[Any]] = set()


def check_name(check: Check) -> str:
    return getattr(check, "__qualname__", None) or getattr(check, "__name__", None) or repr(check)


def validate_check(check: object) -> None:
    """Raise :class:`InvalidCheckError` unless ``check`` can be called with one argument."""

    if not callable(check):
        raise InvalidCheckError(f"Authorization check {check!r} must be callable")
    try:
        signature = inspect.signature(check)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins); accepted as-is.
        return
    try:
        signature.bind(None)
    except TypeError as exc:
        raise InvalidCheckError(
            f"Authorization check '{check_name(check)}' must accept exactly one "
            f"credentials parameter: {exc}"
        ) from exc


async def _run_check(check: Check, credentials: Any) -> Any:
    result = check(credentials)
    if inspect.isawaitable(result):
        result = await result
    return result


def _settle_in_background(task: asyncio.Task[Any]) -> None:
    _BACKGROUND.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(
            "auth.check.late_failure",
            extra=log_context(error=type(exc).__name__, detail=str(exc)),
        )


def _leave_running(tasks: Iterable[asyncio.Task[Any]]) -> None:
    for task in tasks:
        _BACKGROUND.add(task)
        task.add_done_callback(_settle_in_background)


def _failure_message(checks: Sequence[Check], failures: Sequence[tuple[int, BaseException]]) -> str:
    details = "; ".join(
        f"check {index} ({check_name(checks[index])}): {exc}" for index, exc in failures
    )
    return f"Authorization was rejected - {details}"


async def authorize(
    checks: Sequence[Check],
    credentials: Any,
    *,
    timeout: float | None = None,
) -> list[Any]:
    """Run every check concurrently and return their values in input order.

    All checks are awaited, even after one has failed. If any check raised,
    :class:`AuthorizationError` is raised with every failure attached and the
    successful values are discarded. When ``timeout`` seconds pass before all
    checks settle, the call fails with ``timed_out=True`` and the unfinished
    checks are left running. They are also left running when the caller is
    cancelled; late failures are logged instead of being lost.
    """

    checks = list(checks)
    for check in checks:
        validate_check(check)
    if not checks:
        return []

    logger.debug("auth.authorize.start", extra=log_context(checks=len(checks)))

    tasks = [asyncio.ensure_future(_run_check(check, credentials)) for check in checks]
    try:
        done, pending = await asyncio.wait(tasks, timeout=timeout)
    except asyncio.CancelledError:
        _leave_running(tasks)
        logger.debug("auth.authorize.cancelled", extra=log_context(checks=len(checks)))
        raise

    failures: list[tuple[int, BaseException]] = []
    for index, task in enumerate(tasks):
        if task not in done:
            continue
        if task.cancelled():
            failures.append((index, asyncio.CancelledError(f"check {index} was cancelled")))
            continue
        exc = task.exception()
        if exc is not None:
            failures.append((index, exc))

    if pending:
        _leave_running(pending)
        logger.warning(
            "auth.authorize.timeout",
            extra=log_context(checks=len(checks), pending=len(pending), timeout=timeout),
        )
        message = f"Authorization timed out after {timeout}s with {len(pending)} check(s) pending"
        if failures:
            message = f"{message}; {_failure_message(checks, failures)}"
        raise AuthorizationError(message, failures=failures, timed_out=True)

    if failures:
        logger.warning(
            "auth.authorize.denied",
            extra=log_context(
                checks=len(checks),
                failed=",".join(check_name(checks[index]) for index, _ in failures),
            ),
        )
        raise AuthorizationError(_failure_message(checks, failures), failures=failures) from (
            failures[0][1]
        )

    logger.debug("auth.authorize.success", extra=log_context(checks=len(checks)))
    return [task.result() for task in tasks]


class AuthCoordinator:
    """Named sets of authorization checks plus a default deadline."""

    def __init__(
        self,
        contexts: Mapping[str, Sequence[Check]] | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        if contexts is not None and not isinstance(contexts, Mapping):
            raise InvalidCheckError("Authorization contexts must be a mapping of name to checks")
        self._contexts: dict[str, tuple[Check, ...]] = {}
        for name, checks in (contexts or {}).items():
            self.register(name, checks)
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        contexts: Mapping[str, Sequence[Check]] | None = None,
    ) -> AuthCoordinator:
        return cls(contexts, timeout=settings.auth_timeout_seconds)

    @property
    def contexts(self) -> Mapping[str, tuple[Check, ...]]:
        return MappingProxyType(self._contexts)

    def register(self, name: str, checks: Sequence[Check]) -> None:
        """Add or replace the context ``name`` after validating each check."""

        if isinstance(checks, (str, bytes)) or not isinstance(checks, Sequence):
            raise InvalidCheckError(f"Authorization context '{name}' must be a sequence of checks")
        for check in checks:
            validate_check(check)
        self._contexts[name] = tuple(checks)

    def resolve(self, checks: str | Sequence[Check]) -> tuple[Check, ...]:
        if isinstance(checks, str):
            try:
                return self._contexts[checks]
            except KeyError as exc:
                raise InvalidCheckError(f"Unknown authorization context '{checks}'") from exc
        return tuple(checks)

    async def authorize(
        self,
        checks: str | Sequence[Check],
        credentials: Any,
        *,
        timeout: float | None = _UNSET,
    ) -> list[Any]:
        """Authorize ``credentials`` against a context name or an explicit list of checks."""

        effective = self.timeout if timeout is _UNSET else timeout
        return await authorize(self.resolve(checks), credentials, timeout=effective)


__all__ = [
    "AuthCoordinator",
    "Check",
    "authorize",
    "check_name",
    "validate_check",
]
