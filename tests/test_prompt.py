"""Tests for agents.prompt module."""

from agents.prompt import build_prompt
from models.article import Article


def _article(**overrides) -> Article:
    fields = {
        "id": "a1",
        "title": "Rates held",
        "author": "Jane Reporter",
        "source": "Example Times",
        "published_date": "2024-05-07",
        "content": "Body text of the article.",
        "url": "https://example.com/rates",
    }
    fields.update(overrides)
    return Article(**fields)


class TestBuildPrompt:
    def test_includes_metadata(self) -> None:
        prompt = build_prompt(_article())
        assert "Title: Rates held" in prompt
        assert "Source: Example Times" in prompt
        assert "Author: Jane Reporter" in prompt
        assert "Published: 2024-05-07" in prompt
        assert "URL: https://example.com/rates" in prompt
        assert "Body text of the article." in prompt

    def test_requests_json_with_both_fields(self) -> None:
        prompt = build_prompt(_article())
        assert '"summary"' in prompt
        assert '"enhanced_content"' in prompt
        assert "Key Points" in prompt

    def test_truncates_long_content(self) -> None:
        prompt = build_prompt(_article(content="x" * 50), max_content_chars=10)
        assert "x" * 10 + "\n[Content truncated]" in prompt
        assert "x" * 11 not in prompt

    def test_content_at_limit_not_marked(self) -> None:
        prompt = build_prompt(_article(content="x" * 10), max_content_chars=10)
        assert "[Content truncated]" not in prompt

    def test_missing_fields(self) -> None:
        prompt = build_prompt(Article(id="a1"))
        assert "Title: Untitled" in prompt
        assert "Author: Unknown" in prompt
        assert "Published: Unknown" in prompt
        assert "No content available" in prompt
        assert "URL:" not in prompt

    def test_deterministic(self) -> None:
        assert build_prompt(_article()) == build_prompt(_article())
