"""Tests for config module."""

from pathlib import Path

import pytest

from config import DEFAULT_SYSTEM_PROMPT, Config

_ENV_KEYS = (
    "AI_API_KEY", "AI_API_BASE", "AI_MODEL", "AI_TEMPERATURE", "AI_MAX_TOKENS",
    "AI_TIMEOUT_SECONDS", "AI_JSON_MODE", "AI_SYSTEM_PROMPT", "STORE_BACKEND",
    "DB_PATH", "APPWRITE_ENDPOINT", "APPWRITE_PROJECT_ID", "APPWRITE_API_KEY",
    "APPWRITE_DB_ID", "ARTICLES_COLLECTION_ID", "ENRICHMENT_COLLECTION_ID",
    "RECORD_FALLBACK_FIELD", "ARTICLE_CONTENT_FIELD", "MIN_CONTENT_CHARS",
    "PACING_DELAY_SECONDS", "LOG_LEVEL", "LOG_FORMAT", "ENABLE_LOGFIRE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoad:
    def test_defaults(self) -> None:
        config = Config.load()
        assert config.ai_api_key == ""
        assert config.ai_api_base == "https://openrouter.ai/api/v1"
        assert config.ai_max_tokens == 1000
        assert config.ai_system_prompt == DEFAULT_SYSTEM_PROMPT
        assert config.store_backend == "sqlite"
        assert config.db_path == Path("enrichment.db")
        assert config.articles_collection == "dataset_plan"
        assert config.enrichment_collection == "linklet_ai"
        assert config.record_fields.summary == "ai_summary"
        assert config.record_fields.content == "ai_content"
        assert config.min_content_chars == 50
        assert config.pacing_delay_seconds == 1.0

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("AI_API_KEY", "sk-test")
        monkeypatch.setenv("AI_MODEL", "some/model")
        monkeypatch.setenv("AI_JSON_MODE", "yes")
        monkeypatch.setenv("STORE_BACKEND", "AppWrite")
        monkeypatch.setenv("MIN_CONTENT_CHARS", "120")
        monkeypatch.setenv("PACING_DELAY_SECONDS", "0.25")
        monkeypatch.setenv("ARTICLE_CONTENT_FIELD", "body")
        monkeypatch.setenv("RECORD_FALLBACK_FIELD", "")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Config.load()

        assert config.ai_api_key == "sk-test"
        assert config.ai_model == "some/model"
        assert config.ai_json_mode is True
        assert config.store_backend == "appwrite"
        assert config.min_content_chars == 120
        assert config.pacing_delay_seconds == 0.25
        assert config.article_fields.content == "body"
        assert config.record_fields.fallback == ""
        assert config.log_level == "DEBUG"

    def test_invalid_integer_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("AI_MAX_TOKENS", "lots")
        with pytest.raises(ValueError, match="AI_MAX_TOKENS"):
            Config.load()

    def test_invalid_float_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("AI_TEMPERATURE", "warm")
        with pytest.raises(ValueError, match="AI_TEMPERATURE"):
            Config.load()


class TestValidate:
    def test_missing_api_key(self) -> None:
        assert Config().validate() == "AI_API_KEY environment variable is required"

    def test_valid(self) -> None:
        assert Config(ai_api_key="k").validate() is None

    def test_appwrite_requires_settings(self) -> None:
        error = Config(ai_api_key="k", store_backend="appwrite", appwrite_project_id="p").validate()
        assert error == "Missing Appwrite settings: APPWRITE_API_KEY, APPWRITE_DB_ID"

    def test_unknown_backend(self) -> None:
        assert "STORE_BACKEND" in Config(ai_api_key="k", store_backend="redis").validate()

    def test_negative_pacing(self) -> None:
        assert "PACING_DELAY_SECONDS" in Config(ai_api_key="k", pacing_delay_seconds=-1).validate()

    def test_bad_log_format(self) -> None:
        assert "LOG_FORMAT" in Config(ai_api_key="k", log_format="xml").validate()
