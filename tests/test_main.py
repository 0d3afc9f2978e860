"""Tests for the command line interface."""

import asyncio
import json
import logging

import pytest

from database import SQLiteStore
from main import main


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setenv("STORE_BACKEND", "sqlite")
    monkeypatch.setenv("PACING_DELAY_SECONDS", "0")
    monkeypatch.delenv("AI_API_KEY", raising=False)
    root = logging.getLogger()
    saved = root.handlers[:]
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in saved:
        root.addHandler(handler)


@pytest.fixture
def articles_file(tmp_path):
    path = tmp_path / "articles.jsonl"
    lines = [
        {"id": "a1", "title": "Short one", "content": "Too short."},
        {"id": "a2", "title": "Another", "content": "Also short."},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n", encoding="utf-8")
    return path


class TestStatus:
    def test_reports_counts_without_secrets(self, capsys, monkeypatch) -> None:
        monkeypatch.setenv("AI_API_KEY", "sk-very-secret")

        assert main(["status"]) == 0

        out = capsys.readouterr().out
        status = json.loads(out)
        assert status["config"]["ai_api_key_set"] is True
        assert status["database"]["articles"] == 0
        assert "sk-very-secret" not in out


class TestLoad:
    def test_jsonl(self, articles_file, capsys) -> None:
        assert main(["load", str(articles_file)]) == 0
        assert "Loaded 2 articles" in capsys.readouterr().out

        assert main(["status"]) == 0
        assert json.loads(capsys.readouterr().out)["database"]["articles"] == 2

    def test_reload_keeps_existing(self, articles_file, capsys) -> None:
        main(["load", str(articles_file)])
        capsys.readouterr()

        assert main(["load", str(articles_file)]) == 0
        assert "Loaded 0 articles" in capsys.readouterr().out

    def test_json_array(self, tmp_path, capsys) -> None:
        path = tmp_path / "articles.json"
        path.write_text(json.dumps([{"id": "x1", "title": "T"}]), encoding="utf-8")

        assert main(["load", str(path)]) == 0
        assert "Loaded 1 articles" in capsys.readouterr().out

    def test_missing_id(self, tmp_path) -> None:
        path = tmp_path / "articles.json"
        path.write_text(json.dumps([{"title": "No id"}]), encoding="utf-8")
        assert main(["load", str(path)]) == 1


class TestShow:
    def test_no_record(self, capsys) -> None:
        assert main(["show", "a1"]) == 1
        assert "No enrichment record" in capsys.readouterr().out

    def test_prints_record(self, tmp_path, capsys) -> None:
        with SQLiteStore(tmp_path / "cli.db") as store:
            asyncio.run(store.create("linklet_ai", {"article_id": "a1", "ai_summary": "S"}))

        assert main(["show", "a1"]) == 0
        assert json.loads(capsys.readouterr().out)["ai_summary"] == "S"


class TestEnrich:
    def test_requires_api_key(self, capsys) -> None:
        assert main(["enrich", "a1"]) == 1
        assert "AI_API_KEY" in capsys.readouterr().err

    def test_requires_ids(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("AI_API_KEY", "k")
        assert main(["enrich"]) == 1
        assert "article IDs or --payload" in capsys.readouterr().err

    def test_batch_without_ai_calls(self, articles_file, monkeypatch, capsys) -> None:
        monkeypatch.setenv("AI_API_KEY", "k")
        main(["load", str(articles_file)])
        capsys.readouterr()

        assert main(["enrich", "a1", "ghost"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["summary"] == {"total": 2, "processed": 0, "skipped": 1, "failed": 1}
        assert payload["results"]["details"][0]["reason"] == "insufficient content"
        assert payload["results"]["details"][1]["stage"] == "fetch"

    def test_payload_file_rejected(self, tmp_path, monkeypatch, capsys) -> None:
        monkeypatch.setenv("AI_API_KEY", "k")
        body = tmp_path / "body.json"
        body.write_text('{"articleIds": []}', encoding="utf-8")

        assert main(["enrich", "--payload", str(body)]) == 1
        assert json.loads(capsys.readouterr().out)["success"] is False
