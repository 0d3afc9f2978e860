#!/usr/bin/env python3
"""Article enrichment: AI summaries and analyses for stored news articles.

This CLI tool runs enrichment batches over article identifiers, hosts the
HTTP trigger, and inspects the document store.

Commands:
    enrich      Enrich one batch of articles and print the trigger response
    serve       Run the HTTP trigger (POST /enrich, GET /health)
    load        Import articles from a JSON or JSON-lines file
    show        Print the enrichment record for an article
    status      Show configuration and store statistics

Examples:
    python main.py enrich a1 a2                 # Enrich two articles
    python main.py enrich --payload body.json   # Use a trigger body file
    echo '{"articleIds": ["a1"]}' | python main.py enrich --payload -
    python main.py load articles.jsonl          # Seed the local store
    python main.py serve --port 9000

Environment:
    AI_API_KEY: Required for enrich and serve
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from config import Config
from database import SQLiteStore, open_store
from errors import DocumentNotFoundError, StoreError
from observability.logging import setup_logging
from observability.tracing import setup_tracing

logger = logging.getLogger(__name__)


def _read_articles(path: str) -> list[dict[str, Any]]:
    """Read articles from a JSON array file or a JSON-lines file ('-' for stdin)."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        articles = json.loads(stripped)
    else:
        articles = [json.loads(line) for line in text.splitlines() if line.strip()]
    if not all(isinstance(a, dict) for a in articles):
        raise ValueError("Every article must be a JSON object")
    return articles


def cmd_enrich(args: argparse.Namespace, config: Config) -> int:
    """Run one enrichment batch.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 when the batch was accepted)
    """
    from handler import handle_request

    if args.payload:
        body: Any = sys.stdin.read() if args.payload == "-" else Path(args.payload).read_text(encoding="utf-8")
    else:
        body = {"articleIds": args.ids}

    status, payload = asyncio.run(handle_request(body, config))
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if status == 200 else 1


def cmd_serve(args: argparse.Namespace, config: Config) -> int:
    """Run the HTTP trigger until interrupted."""
    from server import serve

    try:
        serve(config, host=args.host, port=args.port)
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130
    return 0


def cmd_load(args: argparse.Namespace, config: Config) -> int:
    """Import articles into the articles collection.

    Articles that already exist are reported and left untouched.
    """
    articles = _read_articles(args.file)

    async def load() -> tuple[int, int]:
        store = open_store(config)
        created = existing = 0
        try:
            for article in articles:
                article_id = str(article.get("id") or "").strip()
                if not article_id:
                    raise ValueError(f"Article without 'id': {str(article)[:80]}")
                try:
                    await store.get_by_id(config.articles_collection, article_id)
                    existing += 1
                    continue
                except DocumentNotFoundError:
                    pass
                await store.create(config.articles_collection, article, document_id=article_id)
                created += 1
        finally:
            await store.aclose()
        return created, existing

    created, existing = asyncio.run(load())
    logger.info("Articles loaded | created=%d existing=%d", created, existing)
    print(f"Loaded {created} articles into '{config.articles_collection}' ({existing} already present)")
    return 0


def cmd_show(args: argparse.Namespace, config: Config) -> int:
    """Print the enrichment record for one article."""

    async def find() -> list[dict[str, Any]]:
        store = open_store(config)
        try:
            return await store.find_by_field(
                config.enrichment_collection,
                config.record_fields.article_id,
                args.article_id,
                limit=1,
            )
        finally:
            await store.aclose()

    records = asyncio.run(find())
    if not records:
        print(f"No enrichment record for article {args.article_id}.")
        return 1

    print(json.dumps(records[0], indent=2, ensure_ascii=False))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration and store statistics.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    status: dict[str, Any] = {
        "config": {
            "ai_api_base": config.ai_api_base,
            "ai_model": config.ai_model,
            "ai_api_key_set": bool(config.ai_api_key),
            "ai_max_tokens": config.ai_max_tokens,
            "min_content_chars": config.min_content_chars,
            "pacing_delay_seconds": config.pacing_delay_seconds,
            "store_backend": config.store_backend,
            "articles_collection": config.articles_collection,
            "enrichment_collection": config.enrichment_collection,
            "enable_logfire": config.enable_logfire,
        },
    }

    if config.store_backend == "sqlite":
        with SQLiteStore(config.db_path) as store:
            counts = store.counts()
        status["database"] = {
            "path": str(config.db_path),
            "articles": counts.get(config.articles_collection, 0),
            "enrichment_records": counts.get(config.enrichment_collection, 0),
        }
    else:
        status["database"] = {
            "endpoint": config.appwrite_endpoint,
            "database_id": config.appwrite_db_id,
        }

    print(json.dumps(status, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Article enrichment: AI summaries and analyses for stored articles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # enrich command
    enrich_parser = subparsers.add_parser("enrich", help="Enrich a batch of articles")
    enrich_parser.add_argument(
        "ids",
        nargs="*",
        help="Article identifiers, processed in the given order",
    )
    enrich_parser.add_argument(
        "--payload",
        help="Read a trigger body ({\"articleIds\": [...]}) from FILE, or '-' for stdin",
    )

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP trigger")
    serve_parser.add_argument(
        "--host",
        help="Bind address (default: config SERVER_HOST)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Bind port (default: config SERVER_PORT)",
    )

    # load command
    load_parser = subparsers.add_parser("load", help="Import articles into the store")
    load_parser.add_argument(
        "file",
        help="JSON array or JSON-lines file of articles with an 'id' field ('-' for stdin)",
    )

    # show command
    show_parser = subparsers.add_parser("show", help="Show the enrichment record of an article")
    show_parser.add_argument("article_id", help="Source article identifier")

    # status command
    subparsers.add_parser("status", help="Show configuration and statistics")

    args = parser.parse_args(argv)

    # Load configuration
    config = Config.load()

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that need it
    if args.command in ("enrich", "serve"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1
        setup_tracing(config.enable_logfire, token=config.logfire_token)

    if args.command == "enrich" and not args.ids and not args.payload:
        print("Error: article IDs or --payload is required", file=sys.stderr)
        return 1

    # Route to command handler
    commands = {
        "enrich": cmd_enrich,
        "serve": cmd_serve,
        "load": cmd_load,
        "show": cmd_show,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except (StoreError, OSError, ValueError) as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
