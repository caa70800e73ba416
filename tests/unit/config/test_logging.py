"""JSON log formatting with table/pass context."""

import json
import logging
import sys

import pytest

from placement.config.logging import JsonFormatter, configure_logging
from placement.config.settings import get_settings
from placement.core.context import pass_id_ctx, table_id_ctx


def _record(msg="balance_pass_completed", **extra):
    logger = logging.getLogger("placement.test")
    return logger.makeRecord("placement.test", logging.INFO, __file__, 1, msg, (), None, extra=extra)


def test_formats_message_and_extras():
    out = json.loads(JsonFormatter().format(_record(migrations=3, capped=False)))
    assert out["message"] == "balance_pass_completed"
    assert out["level"] == "INFO"
    assert out["logger"] == "placement.test"
    assert out["migrations"] == 3
    assert out["capped"] is False
    assert out["table_id"] is None
    assert "timestamp" in out


def test_context_vars_included():
    table_token = table_id_ctx.set("1")
    pass_token = pass_id_ctx.set("abc")
    try:
        out = json.loads(JsonFormatter().format(_record()))
    finally:
        pass_id_ctx.reset(pass_token)
        table_id_ctx.reset(table_token)
    assert out["table_id"] == "1"
    assert out["pass_id"] == "abc"


def test_exception_info_rendered():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.getLogger("placement.test").makeRecord(
            "placement.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    out = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in out["exc_info"]


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    get_settings.cache_clear()
    yield root, before
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
    get_settings.cache_clear()


def test_configure_logging_installs_json_handler(root_logger):
    root, before = root_logger
    configure_logging("DEBUG")
    added = [h for h in root.handlers if h not in before]
    assert len(added) == 1
    assert isinstance(added[0].formatter, JsonFormatter)
    assert root.level == logging.DEBUG


def test_configure_logging_level_from_settings(root_logger, monkeypatch):
    root, _ = root_logger
    monkeypatch.setenv("PLACEMENT_LOG_LEVEL", "WARNING")
    configure_logging()
    assert root.level == logging.WARNING
