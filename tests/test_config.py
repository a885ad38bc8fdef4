"""
Tests for environment-driven settings.
"""

import logging

from src.config import Settings
from src.schemas import LoadMetric


def test_defaults(monkeypatch):
    """Test default settings without environment overrides."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.API_PORT == 8000
    assert settings.DEFAULT_LOAD_METRIC == LoadMetric.SESSION_LOAD
    assert settings.log_level == logging.INFO


def test_environment_overrides(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("API_PORT", "9001")
    monkeypatch.setenv("DEFAULT_LOAD_METRIC", "climb_count")
    settings = Settings(_env_file=None)

    assert settings.log_level == logging.DEBUG
    assert settings.API_PORT == 9001
    assert settings.DEFAULT_LOAD_METRIC == LoadMetric.CLIMB_COUNT


def test_unknown_log_level_falls_back_to_info(monkeypatch):
    """Test that an unknown level name does not break logging setup."""
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert Settings(_env_file=None).log_level == logging.INFO
