# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for composer_config module."""

import logging

from rds_composer.composer_config import ComposerConfig, config_from_env


class TestComposerConfig:
    """Tests for ComposerConfig dataclass."""

    def test_default_values(self):
        """Default values should be set correctly."""
        config = ComposerConfig()
        assert config.db_url is None
        assert config.time_zone == "local"
        assert config.log_level == "WARNING"

    def test_custom_values(self):
        config = ComposerConfig(db_url="/tmp/x.db", time_zone="Z", log_level="DEBUG")
        assert config.db_url == "/tmp/x.db"
        assert config.time_zone == "Z"
        assert config.log_level == "DEBUG"

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        ComposerConfig(log_level="debug").configure_logging()
        assert calls["level"] == logging.DEBUG

    def test_unknown_log_level_falls_back(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        ComposerConfig(log_level="chatty").configure_logging()
        assert calls["level"] == logging.WARNING


class TestConfigFromEnv:
    """Tests for config_from_env() function."""

    def test_default_values_when_no_env(self, monkeypatch):
        """Should use defaults when no env vars set."""
        monkeypatch.delenv("RDS_COMPOSER_DB", raising=False)
        monkeypatch.delenv("RDS_COMPOSER_TIME_ZONE", raising=False)
        monkeypatch.delenv("RDS_COMPOSER_LOG_LEVEL", raising=False)

        config = config_from_env()

        assert config == ComposerConfig()

    def test_values_from_env(self, monkeypatch):
        monkeypatch.setenv("RDS_COMPOSER_DB", "mysql://root@localhost/app")
        monkeypatch.setenv("RDS_COMPOSER_TIME_ZONE", "+08:00")
        monkeypatch.setenv("RDS_COMPOSER_LOG_LEVEL", "INFO")

        config = config_from_env()

        assert config.db_url == "mysql://root@localhost/app"
        assert config.time_zone == "+08:00"
        assert config.log_level == "INFO"

    def test_empty_db_is_none(self, monkeypatch):
        monkeypatch.setenv("RDS_COMPOSER_DB", "")
        assert config_from_env().db_url is None
