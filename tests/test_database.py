"""Tests for database module."""

import asyncio

import pytest

from appwrite_store import AppwriteStore
from config import Config
from database import SQLiteStore, new_document_id, open_store
from errors import DocumentNotFoundError, StoreError


class TestSQLiteStore:
    def test_create_and_get(self, store) -> None:
        created = asyncio.run(store.create("articles", {"title": "T", "id": "ignored"}, document_id="a1"))
        assert created == {"id": "a1", "title": "T"}
        assert asyncio.run(store.get_by_id("articles", "a1")) == {"id": "a1", "title": "T"}

    def test_generated_id(self, store) -> None:
        created = asyncio.run(store.create("records", {"article_id": "a1"}))
        assert len(created["id"]) == 20
        assert len(new_document_id()) == 20

    def test_get_missing(self, store) -> None:
        with pytest.raises(DocumentNotFoundError) as exc_info:
            asyncio.run(store.get_by_id("articles", "nope"))
        assert exc_info.value.document_id == "nope"
        assert exc_info.value.collection == "articles"

    def test_collections_are_separate(self, store) -> None:
        asyncio.run(store.create("articles", {"title": "T"}, document_id="a1"))
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(store.get_by_id("records", "a1"))

    def test_duplicate_id(self, store) -> None:
        asyncio.run(store.create("articles", {"title": "T"}, document_id="a1"))
        with pytest.raises(StoreError):
            asyncio.run(store.create("articles", {"title": "U"}, document_id="a1"))

    def test_unserializable_fields(self, store) -> None:
        with pytest.raises(StoreError):
            asyncio.run(store.create("articles", {"when": object()}))
        assert store.counts() == {}

    def test_find_by_field(self, store) -> None:
        for doc_id, article_id in (("r1", "a1"), ("r2", "a2"), ("r3", "a1")):
            asyncio.run(store.create("records", {"article_id": article_id}, document_id=doc_id))

        found = asyncio.run(store.find_by_field("records", "article_id", "a1", limit=10))
        assert [doc["id"] for doc in found] == ["r1", "r3"]

        limited = asyncio.run(store.find_by_field("records", "article_id", "a1", limit=1))
        assert [doc["id"] for doc in limited] == ["r1"]

        assert asyncio.run(store.find_by_field("records", "article_id", "zzz")) == []

    def test_counts(self, store) -> None:
        asyncio.run(store.create("articles", {"title": "T"}, document_id="a1"))
        asyncio.run(store.create("articles", {"title": "U"}, document_id="a2"))
        asyncio.run(store.create("records", {"article_id": "a1"}))
        assert store.counts() == {"articles": 2, "records": 1}

    def test_persists_across_connections(self, tmp_path) -> None:
        path = tmp_path / "docs.db"
        with SQLiteStore(path) as first:
            asyncio.run(first.create("articles", {"title": "T"}, document_id="a1"))
        with SQLiteStore(path) as second:
            assert asyncio.run(second.get_by_id("articles", "a1"))["title"] == "T"


class TestOpenStore:
    def test_sqlite(self, config) -> None:
        store = open_store(config)
        try:
            assert isinstance(store, SQLiteStore)
        finally:
            store.close()

    def test_appwrite(self) -> None:
        config = Config(
            store_backend="appwrite",
            appwrite_endpoint="https://appwrite.example.com/v1/",
            appwrite_project_id="p",
            appwrite_api_key="k",
            appwrite_db_id="db",
        )
        store = open_store(config)
        assert isinstance(store, AppwriteStore)
        assert store.endpoint == "https://appwrite.example.com/v1"
        assert store.database_id == "db"

    def test_unknown_backend(self) -> None:
        with pytest.raises(StoreError, match="Unknown store backend"):
            open_store(Config(store_backend="memory"))
