"""Tests for structured logging setup."""

import pytest
import structlog

from crm_segmentation.logging_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test configure_logging."""

    def test_json_lines_on_stderr(self, capsys):
        configure_logging("INFO")
        structlog.get_logger("test").info("customers_scored", count=3)

        err = capsys.readouterr().err
        assert '"event": "customers_scored"' in err
        assert '"count": 3' in err
        assert '"level": "info"' in err

    def test_level_filters_debug(self, capsys):
        configure_logging("WARNING")
        structlog.get_logger("test").info("hidden_event")

        assert "hidden_event" not in capsys.readouterr().err

    def test_level_from_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("CRM_SEGMENTATION_LOG_LEVEL", "debug")
        configure_logging()
        structlog.get_logger("test").debug("visible_event")

        assert "visible_event" in capsys.readouterr().err

    def test_unknown_level_raises_error(self):
        with pytest.raises(ValueError, match="Unknown log level: LOUD"):
            configure_logging("LOUD")
