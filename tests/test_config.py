from __future__ import annotations

import logging
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from hr_backend.core.config import ConfigurationError, Settings, configure_settings, load_settings, setup_logging


@pytest.fixture
def basic_config_calls(monkeypatch) -> list[dict]:
    calls: list[dict] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    return calls


def test_setup_logging_reads_level_from_settings(monkeypatch, basic_config_calls):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    configure_settings(Settings(log_level="DEBUG"))

    setup_logging()

    assert basic_config_calls[-1]["level"] == logging.DEBUG


def test_setup_logging_explicit_level_wins(basic_config_calls):
    configure_settings(Settings(log_level="DEBUG"))

    setup_logging("warning")

    assert basic_config_calls[-1]["level"] == logging.WARNING


def test_load_settings_reads_log_level_and_tables(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LARK_TABLE_MANPOWER", "tblFromEnv")

    settings = load_settings()

    assert settings.log_level == "DEBUG"
    assert settings.table_id("manpower") == "tblFromEnv"


def test_missing_table_id_names_variable():
    settings = Settings(tables={})

    with pytest.raises(ConfigurationError, match="LARK_TABLE_EMPLOYEE"):
        settings.table_id("employee")
