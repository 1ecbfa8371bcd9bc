from __future__ import annotations

import functools

import pytest

from ezkit.auth import AuthCoordinator, validate_check
from ezkit.errors import InvalidCheckError
from ezkit.settings import Settings

# ---------------------------------------------------------------------------
# Check validation
# ---------------------------------------------------------------------------


def test_validate_check_accepts_single_argument_callables() -> None:
    class SessionCheck:
        def __call__(self, credentials):
            return credentials

    def with_default(credentials, extra=None):
        return credentials

    async def async_check(credentials):
        return credentials

    validate_check(lambda credentials: True)
    validate_check(with_default)
    validate_check(lambda *args: True)
    validate_check(SessionCheck())
    validate_check(functools.partial(lambda prefix, credentials: credentials, "x"))
    validate_check(async_check)


@pytest.mark.parametrize(
    "check",
    [
        lambda: True,
        lambda credentials, session: True,
        lambda *, credentials: True,
        "not callable",
    ],
)
def test_validate_check_rejects_invalid_checks(check) -> None:
    with pytest.raises(InvalidCheckError):
        validate_check(check)


# ---------------------------------------------------------------------------
# AuthCoordinator construction
# ---------------------------------------------------------------------------


def test_coordinator_validates_contexts_at_construction() -> None:
    with pytest.raises(InvalidCheckError):
        AuthCoordinator({"admin": [lambda: True]})
    with pytest.raises(InvalidCheckError):
        AuthCoordinator({"admin": lambda credentials: True})
    with pytest.raises(InvalidCheckError):
        AuthCoordinator(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_coordinator_contexts_are_read_only() -> None:
    def check(credentials):
        return True

    coordinator = AuthCoordinator({"client": [check]})

    assert coordinator.contexts["client"] == (check,)
    with pytest.raises(TypeError):
        coordinator.contexts["admin"] = (check,)  # type: ignore[index]


def test_coordinator_from_settings() -> None:
    coordinator = AuthCoordinator.from_settings(Settings(auth_timeout_seconds=2.5))

    assert coordinator.timeout == 2.5
