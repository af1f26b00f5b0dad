"""
Tests for configuration loading and logging setup.
"""

import logging
import logging.handlers

import pytest

from puckforge.config.logging_config import ColoredFormatter, _parse_size, setup_logging
from puckforge.config.settings import Config


@pytest.fixture
def make_config(tmp_path):
    def _make():
        return Config(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
    return _make


def test_defaults_written_on_first_use(make_config, tmp_path):
    config = make_config()

    assert (tmp_path / "config" / "config.yaml").exists()
    assert config.get("install.directory") == "/srv/puckserver"
    assert config.get("steam.app_id") == 3481440
    assert config.get("missing.key", "fallback") == "fallback"


def test_user_values_merge_over_defaults(make_config, tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("install:\n  service_user: hockey\n")

    config = make_config()

    assert config.get("install.service_user") == "hockey"
    assert config.get("install.directory") == "/srv/puckserver"


def test_unreadable_config_falls_back_to_defaults(make_config, tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("install: [broken\n")

    config = make_config()

    assert config.get("install.service_user") == "puck"


def test_reset_to_defaults(make_config, tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("servers:\n  base_port: 9000\n")
    config = make_config()

    config.reset_to_defaults()

    assert config.get("servers.base_port") == 7777
    assert make_config().get("servers.base_port") == 7777


@pytest.mark.parametrize("text, expected", [
    ("10MB", 10 * 1024 ** 2),
    ("512KB", 512 * 1024),
    ("1GB", 1024 ** 3),
    ("100B", 100),
    ("lots", 10 * 1024 ** 2),
])
def test_parse_size(text, expected):
    assert _parse_size(text) == expected


def test_setup_logging_adds_file_handler():
    setup_logging(log_level="DEBUG", enable_file_logging=True, enable_rich_logging=False)

    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, logging.handlers.RotatingFileHandler) for handler in handlers)
    assert any(handler.level == logging.DEBUG for handler in handlers)


def test_colored_formatter_leaves_record_untouched():
    record = logging.LogRecord("puckforge", logging.INFO, __file__, 1, "hello", None, None)

    colored = ColoredFormatter("%(levelname)s - %(message)s").format(record)

    assert "\033[32mINFO\033[0m" in colored
    assert record.levelname == "INFO"
    assert logging.Formatter("%(levelname)s - %(message)s").format(record) == "INFO - hello"
