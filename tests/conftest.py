"""Shared fixtures: a local SQLite store, a scripted AI responder, seed helpers."""

import asyncio
import json
from typing import Any

import pytest

from config import Config
from database import SQLiteStore

ARTICLES = "dataset_plan"
RECORDS = "linklet_ai"

LONG_CONTENT = (
    "The central bank held interest rates steady on Tuesday, citing easing "
    "inflation and a cooling labor market. Officials signaled that cuts could "
    "come later in the year if price growth keeps slowing."
)

GOOD_REPLY = json.dumps({
    "summary": "The central bank held rates steady and hinted at later cuts.",
    "enhanced_content": "Key Points:\n- Rates unchanged\n- Inflation easing",
})


class FakeResponder:
    """Responder double that records prompts and returns a scripted reply."""

    def __init__(self, reply: str = GOOD_REPLY, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.max_tokens: list[int | None] = []
        self.closed = False

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        ai_api_key="test-key",
        db_path=tmp_path / "enrichment.db",
        log_dir=tmp_path / "log",
        pacing_delay_seconds=0.0,
    )


@pytest.fixture
def store(config):
    db = SQLiteStore(config.db_path)
    yield db
    db.close()


@pytest.fixture
def responder() -> FakeResponder:
    return FakeResponder()


@pytest.fixture
def seed_article(store):
    """Insert a source article; content defaults to a paragraph above the gate."""

    def seed(article_id: str, **fields: Any) -> None:
        document = {
            "title": "Rates held",
            "author": "Jane Reporter",
            "source": "Example Times",
            "published_date": "2024-05-07T10:00:00Z",
            "content": LONG_CONTENT,
            "url": "https://example.com/rates",
        }
        document.update(fields)
        asyncio.run(store.create(ARTICLES, document, document_id=article_id))

    return seed


@pytest.fixture
def seed_record(store):
    """Insert an existing enrichment record for an article."""

    def seed(article_id: str) -> None:
        asyncio.run(store.create(RECORDS, {
            "article_id": article_id,
            "ai_summary": "Earlier summary.",
            "ai_content": "Earlier analysis.",
        }))

    return seed


@pytest.fixture
def records(store):
    """Return the enrichment records stored for an article."""

    def find(article_id: str) -> list[dict[str, Any]]:
        return asyncio.run(store.find_by_field(RECORDS, "article_id", article_id, limit=100))

    return find
