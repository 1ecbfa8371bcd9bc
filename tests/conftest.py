from __future__ import annotations

from collections.abc import Iterator

import pytest

from ezkit.directory import Directory
from ezkit.settings import reload_settings

EZKIT_ENV_VARS = (
    "EZKIT_LOG_LEVEL",
    "EZKIT_LOG_FORMAT",
    "EZKIT_AUTH_TIMEOUT_SECONDS",
    "EZKIT_SECURITY_KEY",
    "EZKIT_SECURITY_IV",
)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Isolate every test from the caller's environment and any local .env file."""

    for var in EZKIT_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    reload_settings()
    yield
    reload_settings()


@pytest.fixture()
def directory() -> Directory:
    """A directory seeded with a small restaurant staff model."""

    directory = Directory()
    for name in ("menu.read", "menu.write", "orders.read", "orders.write"):
        directory.privileges.create(name)
    directory.roles.create("waiter", ["menu.read", "orders.read", "orders.write"])
    directory.roles.create("chef", ["menu.read", "menu.write"])
    return directory
