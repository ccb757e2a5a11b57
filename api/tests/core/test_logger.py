"""configure_logging(): one stdout handler, env-driven level and format."""

import json
import logging

import pytest

from core.logger import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    saved = (root.handlers[:], root.level)
    yield
    root.handlers, level = saved
    root.setLevel(level)


@pytest.mark.unit
class TestConfigureLogging:
    def test_replaces_root_handlers(self):
        root = logging.getLogger()
        root.addHandler(logging.NullHandler())
        root.addHandler(logging.NullHandler())

        configure_logging()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        configure_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_log_level_defaults_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_quiets_third_party_loggers(self):
        configure_logging()

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_json_format_renders_fields(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        configure_logging()

        logging.getLogger("test.module").info(
            "iou.created", extra={"iou_id": "abc"}
        )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        parsed = json.loads(line)
        assert parsed["event"] == "iou.created"
        assert parsed["iou_id"] == "abc"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "test.module"
        assert "timestamp" in parsed


@pytest.mark.unit
def test_get_logger_returns_bound_logger():
    logger = get_logger("test")
    assert hasattr(logger, "info")
    assert hasattr(logger, "bind")
