from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from ezkit.directory import Privilege, User
from ezkit.logging import ConsoleLogFormatter, JsonLogFormatter, log_context, setup_logging
from ezkit.settings import Settings


def _record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ezkit.directory",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture()
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    if hasattr(root, "_ezkit_configured"):
        delattr(root, "_ezkit_configured")


def test_log_context_reduces_entities_to_names() -> None:
    user = User(name="alice", password="hunter2")

    ctx = log_context(user=user, privileges=[Privilege("a"), Privilege("b")], pending=2)

    assert ctx == {"user": "alice", "privileges": "a,b", "pending": 2}
    assert "hunter2" not in json.dumps(ctx)


def test_log_context_skips_missing_fields() -> None:
    assert log_context() == {}
    assert log_context(roles=[]) == {"roles": ""}


def test_console_formatter_appends_sorted_extras() -> None:
    line = ConsoleLogFormatter().format(_record("directory.role.create", role="chef", privileges="menu.read"))

    assert "DEBUG ezkit.directory directory.role.create" in line
    assert line.endswith("privileges=menu.read role=chef")
    assert line[:4].isdigit() and "Z " in line


def test_json_formatter_emits_one_object() -> None:
    payload = json.loads(JsonLogFormatter().format(_record("auth.authorize.denied", failed="check_ip")))

    assert payload["message"] == "auth.authorize.denied"
    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "ezkit.directory"
    assert payload["service"] == "ezkit"
    assert payload["failed"] == "check_ip"
    assert payload["timestamp"].endswith("Z")


@pytest.mark.usefixtures("restore_root_logger")
def test_setup_logging_installs_single_handler() -> None:
    setup_logging(Settings(log_level="DEBUG", log_format="json"))
    setup_logging(Settings(log_level="WARNING", log_format="console"))

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, ConsoleLogFormatter)
    assert root.level == logging.WARNING


def test_formatters_only_emit_extra_fields() -> None:
    record = _record("directory.user.create", user="alice", role=None)

    payload = json.loads(JsonLogFormatter().format(record))
    line = ConsoleLogFormatter().format(record)

    assert set(payload) == {"timestamp", "level", "service", "logger", "message", "user", "role"}
    assert line.endswith("directory.user.create role=null user=alice")
    assert "lineno" not in line
