"""Configuration management for the article enrichment pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.
No credential has a default value; secrets must come from the environment.

Environment Variables:
    Required:
        AI_API_KEY: API key for the chat-completion endpoint

    AI Endpoint:
        AI_API_BASE: OpenAI-compatible base URL (default: OpenRouter)
        AI_MODEL: Model identifier sent with every request
        AI_TEMPERATURE: Sampling temperature
        AI_MAX_TOKENS: Token ceiling for the combined summary/analysis call
        AI_TIMEOUT_SECONDS: Request timeout for the AI call
        AI_JSON_MODE: Send a JSON response_format hint
        AI_SYSTEM_PROMPT: Override the built-in system instruction

    Document Store:
        STORE_BACKEND: 'sqlite' (local file) or 'appwrite'
        DB_PATH: SQLite database file path
        APPWRITE_ENDPOINT, APPWRITE_PROJECT_ID, APPWRITE_API_KEY, APPWRITE_DB_ID
        ARTICLES_COLLECTION_ID: Collection holding source articles
        ENRICHMENT_COLLECTION_ID: Companion collection for enrichment records

    Field Names:
        ARTICLE_TITLE_FIELD, ARTICLE_AUTHOR_FIELD, ARTICLE_SOURCE_FIELD,
        ARTICLE_PUBLISHED_FIELD, ARTICLE_CONTENT_FIELD, ARTICLE_URL_FIELD
        RECORD_ARTICLE_ID_FIELD, RECORD_SUMMARY_FIELD, RECORD_CONTENT_FIELD,
        RECORD_TIMESTAMP_FIELD, RECORD_FALLBACK_FIELD (empty disables the flag)

    Pipeline Behavior:
        MIN_CONTENT_CHARS: Articles with less content are skipped
        PROMPT_CONTENT_CHARS: Content excerpt length sent to the model
        SUMMARY_MAX_CHARS / ANALYSIS_MAX_CHARS: Stored field caps
        FALLBACK_SUMMARY_WORDS: Word budget of the non-AI fallback summary
        PACING_DELAY_SECONDS: Delay between articles in a batch

    Server:
        SERVER_HOST, SERVER_PORT: Bind address for `main.py serve`

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_DIR: Directory for log files
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


DEFAULT_SYSTEM_PROMPT = (
    "You are a professional news analyst and content generator. "
    "Base every statement strictly on the article you are given. "
    "Respond only with a single valid JSON object and no other text."
)


@dataclass
class ArticleFields:
    """Field names of a source article document."""

    title: str = "title"
    author: str = "author"
    source: str = "source"
    published: str = "published_date"
    content: str = "content"
    url: str = "url"


@dataclass
class RecordFields:
    """Field names of an enrichment record document.

    An empty `fallback` name omits the fallback flag, for stores whose
    collection schema does not declare that attribute.
    """

    article_id: str = "article_id"
    summary: str = "ai_summary"
    content: str = "ai_content"
    timestamp: str = "generated_at"
    fallback: str = "is_fallback"


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Use Config.load() to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    ai_api_key: str = ""  # AI_API_KEY

    # === AI Endpoint ===
    ai_api_base: str = "https://openrouter.ai/api/v1"
    ai_model: str = "meta-llama/llama-3.3-8b-instruct:free"
    ai_temperature: float = 0.7
    ai_max_tokens: int = 1000  # Single combined summary + analysis call
    ai_timeout_seconds: float = 60.0
    ai_json_mode: bool = False  # Many free models reject response_format
    ai_system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # === Document Store ===
    store_backend: str = "sqlite"  # STORE_BACKEND - 'sqlite' or 'appwrite'
    db_path: Path = field(default_factory=lambda: Path("enrichment.db"))
    appwrite_endpoint: str = "https://cloud.appwrite.io/v1"
    appwrite_project_id: str = ""
    appwrite_api_key: str = ""
    appwrite_db_id: str = ""
    articles_collection: str = "dataset_plan"
    enrichment_collection: str = "linklet_ai"

    # === Field Names ===
    article_fields: ArticleFields = field(default_factory=ArticleFields)
    record_fields: RecordFields = field(default_factory=RecordFields)

    # === Pipeline Behavior ===
    min_content_chars: int = 50
    prompt_content_chars: int = 3000
    summary_max_chars: int = 1000
    analysis_max_chars: int = 5000
    fallback_summary_words: int = 50
    pacing_delay_seconds: float = 1.0

    # === Server ===
    server_host: str = "127.0.0.1"
    server_port: int = 8080

    # === Logging Configuration ===
    log_dir: Path = field(default_factory=lambda: Path("log"))
    log_level: str = "INFO"
    log_backup_count: int = 30
    log_max_bytes: int = 0  # 0 = time-based rotation
    log_format: str = "text"  # 'text' or 'json'

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False
    logfire_token: str = ""

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            ai_api_key=_env("AI_API_KEY"),
            ai_api_base=_env("AI_API_BASE", "https://openrouter.ai/api/v1"),
            ai_model=_env("AI_MODEL", "meta-llama/llama-3.3-8b-instruct:free"),
            ai_temperature=_env_float("AI_TEMPERATURE", 0.7),
            ai_max_tokens=_env_int("AI_MAX_TOKENS", 1000),
            ai_timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", 60.0),
            ai_json_mode=_env_bool("AI_JSON_MODE", False),
            ai_system_prompt=_env("AI_SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
            store_backend=_env("STORE_BACKEND", "sqlite").lower(),
            db_path=Path(_env("DB_PATH", "enrichment.db")),
            appwrite_endpoint=_env("APPWRITE_ENDPOINT", "https://cloud.appwrite.io/v1"),
            appwrite_project_id=_env("APPWRITE_PROJECT_ID"),
            appwrite_api_key=_env("APPWRITE_API_KEY"),
            appwrite_db_id=_env("APPWRITE_DB_ID"),
            articles_collection=_env("ARTICLES_COLLECTION_ID", "dataset_plan"),
            enrichment_collection=_env("ENRICHMENT_COLLECTION_ID", "linklet_ai"),
            article_fields=ArticleFields(
                title=_env("ARTICLE_TITLE_FIELD", "title"),
                author=_env("ARTICLE_AUTHOR_FIELD", "author"),
                source=_env("ARTICLE_SOURCE_FIELD", "source"),
                published=_env("ARTICLE_PUBLISHED_FIELD", "published_date"),
                content=_env("ARTICLE_CONTENT_FIELD", "content"),
                url=_env("ARTICLE_URL_FIELD", "url"),
            ),
            record_fields=RecordFields(
                article_id=_env("RECORD_ARTICLE_ID_FIELD", "article_id"),
                summary=_env("RECORD_SUMMARY_FIELD", "ai_summary"),
                content=_env("RECORD_CONTENT_FIELD", "ai_content"),
                timestamp=_env("RECORD_TIMESTAMP_FIELD", "generated_at"),
                fallback=_env("RECORD_FALLBACK_FIELD", "is_fallback"),
            ),
            min_content_chars=_env_int("MIN_CONTENT_CHARS", 50),
            prompt_content_chars=_env_int("PROMPT_CONTENT_CHARS", 3000),
            summary_max_chars=_env_int("SUMMARY_MAX_CHARS", 1000),
            analysis_max_chars=_env_int("ANALYSIS_MAX_CHARS", 5000),
            fallback_summary_words=_env_int("FALLBACK_SUMMARY_WORDS", 50),
            pacing_delay_seconds=_env_float("PACING_DELAY_SECONDS", 1.0),
            server_host=_env("SERVER_HOST", "127.0.0.1"),
            server_port=_env_int("SERVER_PORT", 8080),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Returns:
            Error message string if invalid, None if valid.
        """
        if not self.ai_api_key:
            return "AI_API_KEY environment variable is required"
        if not self.ai_model:
            return "AI_MODEL must not be empty"
        if self.store_backend not in ("sqlite", "appwrite"):
            return f"Invalid STORE_BACKEND '{self.store_backend}' - must be 'sqlite' or 'appwrite'"
        if self.store_backend == "appwrite":
            missing = [
                name
                for name, value in (
                    ("APPWRITE_PROJECT_ID", self.appwrite_project_id),
                    ("APPWRITE_API_KEY", self.appwrite_api_key),
                    ("APPWRITE_DB_ID", self.appwrite_db_id),
                )
                if not value
            ]
            if missing:
                return f"Missing Appwrite settings: {', '.join(missing)}"
        if not self.articles_collection or not self.enrichment_collection:
            return "Collection IDs must not be empty"
        if not self.record_fields.article_id:
            return "RECORD_ARTICLE_ID_FIELD must not be empty"
        if self.ai_max_tokens <= 0:
            return "AI_MAX_TOKENS must be positive"
        if self.ai_timeout_seconds <= 0:
            return "AI_TIMEOUT_SECONDS must be positive"
        if not 0.0 <= self.ai_temperature <= 2.0:
            return "AI_TEMPERATURE must be between 0 and 2"
        if self.min_content_chars < 0:
            return "MIN_CONTENT_CHARS must be non-negative"
        if self.prompt_content_chars <= 0:
            return "PROMPT_CONTENT_CHARS must be positive"
        if self.summary_max_chars <= 0 or self.analysis_max_chars <= 0:
            return "SUMMARY_MAX_CHARS and ANALYSIS_MAX_CHARS must be positive"
        if self.fallback_summary_words <= 0:
            return "FALLBACK_SUMMARY_WORDS must be positive"
        if self.pacing_delay_seconds < 0:
            return "PACING_DELAY_SECONDS must be non-negative"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
