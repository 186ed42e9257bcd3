"""
Configuration Validation Tests.
Tests environment variables, config files, and logging setup.

Run with: pytest tests/test_configuration.py -v
"""
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from compliance_tracker.utils.config import get_api_config, get_tracker_config, load_yaml, reload_config
from compliance_tracker.utils.logger import setup_logging


@pytest.fixture(autouse=True)
def fresh_config():
    reload_config()
    yield
    reload_config()


class TestConfigFiles:
    """Test the shipped configuration files."""

    def test_api_config_sections(self):
        config = get_api_config()
        assert config["api"]["prefix"] == "/api/v1"
        assert "server" in config
        assert "cors" in config

    def test_tracker_config_defaults(self):
        with patch.dict(os.environ, {"TRACKER_CONFIG": os.environ["TRACKER_CONFIG"]}, clear=True):
            config = get_tracker_config()
        assert config["display"]["locale"] == "en"
        assert config["notifications"]["auto_send"] is False
        assert config["storage"]["seed_file"].endswith("seed_records.yaml")

    def test_seed_file_is_valid_yaml(self):
        seed_file = Path(__file__).resolve().parent.parent / "config" / "seed_records.yaml"
        with open(seed_file, 'r', encoding='utf-8') as f:
            seed = yaml.safe_load(f)
        assert "procedure" in seed

    def test_missing_file_yields_empty_config(self, tmp_path):
        assert load_yaml(str(tmp_path / "missing.yaml")) == {}

    def test_missing_tracker_config_keeps_sections(self, tmp_path):
        with patch.dict(os.environ, {"TRACKER_CONFIG": str(tmp_path / "missing.yaml")}):
            config = get_tracker_config()
        assert set(config) >= {"display", "notifications", "storage"}


class TestEnvironmentVariables:
    """Test environment variable overrides."""

    def test_admin_email_override(self):
        with patch.dict(os.environ, {"ADMIN_EMAIL": "ops@example.com"}):
            assert get_tracker_config()["notifications"]["recipient"] == "ops@example.com"

    def test_boolean_override(self):
        with patch.dict(os.environ, {"NOTIFICATIONS_AUTO_SEND": "TRUE"}):
            assert get_tracker_config()["notifications"]["auto_send"] is True

    def test_config_is_cached_until_reload(self):
        first = get_tracker_config()
        with patch.dict(os.environ, {"DISPLAY_LOCALE": "ar"}):
            assert get_tracker_config() is first
            reload_config()
            assert get_tracker_config()["display"]["locale"] == "ar"


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_creates_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "tracker.log"
        logger = setup_logging(level="DEBUG", log_file=str(log_file))

        assert logger.name == "compliance_tracker"
        assert log_file.exists()
        assert logging.getLogger().level == logging.DEBUG
