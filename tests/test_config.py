"""Tests for environment-driven settings."""
from __future__ import annotations

import config


def test_defaults(monkeypatch):
    for name in ("GEMINI_API_KEY", "AI_MODEL", "SUGGESTION_API_URL", "EDGE_PORT", "LOG_LEVEL", "AI_TEMPERATURE"):
        monkeypatch.delenv(name, raising=False)

    settings = config.load_settings()

    assert settings.gemini_api_key == ""
    assert settings.ai_model == "gemini-2.0-flash"
    assert settings.ai_base_url == config.DEFAULT_AI_BASE_URL
    assert settings.suggestion_api_url == "http://localhost:8787/"
    assert settings.edge_port == 8787
    assert settings.ai_temperature == 0.7
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "  secret  ")
    monkeypatch.setenv("AI_MODEL", "gemini-2.5-flash")
    monkeypatch.setenv("EDGE_PORT", "9000")
    monkeypatch.setenv("AI_TOP_P", "0.8")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = config.load_settings()

    assert settings.gemini_api_key == "secret"
    assert settings.ai_model == "gemini-2.5-flash"
    assert settings.edge_port == 9000
    assert settings.ai_top_p == 0.8
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("EDGE_PORT", "eighty")
    monkeypatch.setenv("AI_MAX_OUTPUT_TOKENS", "1.5k")

    settings = config.load_settings()

    assert settings.edge_port == 8787
    assert settings.ai_max_output_tokens == 1024
