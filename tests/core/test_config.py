"""Tests for settings loading."""

from __future__ import annotations

import pytest

from qc_extractor.core.config import Settings, get_settings


def test_defaults_in_test_environment():
    settings = get_settings()
    assert settings.ENVIRONMENT == "test"
    assert settings.GEMINI_API_KEY is None
    assert settings.EXTRACTION_MODEL == "gemini-3-flash-preview"
    assert settings.EXPORT_FILENAME == "质量数据报表.xlsx"


def test_api_key_read_from_either_variable(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy-key")
    assert get_settings().GEMINI_API_KEY == "legacy-key"

    get_settings.cache_clear()
    monkeypatch.setenv("GEMINI_API_KEY", "primary-key")
    assert get_settings().GEMINI_API_KEY == "primary-key"


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_invalid_environment_rejected(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "staging")
    with pytest.raises(ValueError):
        get_settings()


def test_export_filename_gets_xlsx_suffix():
    settings = Settings(ENVIRONMENT="test", EXPORT_FILENAME="report")
    assert settings.EXPORT_FILENAME == "report.xlsx"


def test_model_override_from_env(monkeypatch):
    monkeypatch.setenv("EXTRACTION_MODEL", "gemini-2.5-flash")
    assert get_settings().EXTRACTION_MODEL == "gemini-2.5-flash"
