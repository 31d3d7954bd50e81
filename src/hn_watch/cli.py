from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable

from hn_watch.config import AppConfig, ConfigError, load_config
from hn_watch.filters import TitleKeywordFilter
from hn_watch.logging_config import normalize_log_level, setup_logging
from hn_watch.models import Link
from hn_watch.notifiers import NotificationDispatcher, SmtpEmailNotifier, render_body, render_subject
from hn_watch.service import PollService, PollStats
from hn_watch.sources import HackerNewsSource
from hn_watch.store import MemoryStore, SQLiteStore, StorageError, Store

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hn-watch",
        description="Poll Hacker News and email new stories whose titles mention watched keywords.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("poll", help="Fetch once and email new matching stories")
    subparsers.add_parser("dry-run", help="Fetch once and print matching stories")
    subparsers.add_parser("init-db", help="Initialize the seen-link store")

    backfill = subparsers.add_parser(
        "backfill",
        help="Fetch current stories and mark matches seen without emailing",
    )
    backfill.add_argument(
        "--mark-seen",
        action="store_true",
        help="Required safety flag for backfill operation",
    )

    serve = subparsers.add_parser("serve", help="Serve the /poll endpoint over HTTP")
    serve.add_argument("--host", help="Override config server host")
    serve.add_argument("--port", type=int, help="Override config server port")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_config(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    try:
        log_level = normalize_log_level(args.log_level or app_config.log_level)
    except ValueError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    setup_logging(log_level)

    store = build_store(app_config)
    try:
        store.init_db()
    except StorageError as exc:
        logger.error("Could not initialize store: %s", exc)
        return 1

    if args.command == "init-db":
        logger.info("Initialized %s store at %s", app_config.storage.type, app_config.storage.path)
        return 0

    if args.command == "backfill":
        if not args.mark_seen:
            parser.error("backfill requires --mark-seen")
        service = build_service(app_config, store=store, dispatcher=None, dry_run=True)
        stats = service.backfill()
        logger.info(
            "Backfill complete | marked_seen=%d already_seen=%d errors=%d",
            stats.claimed,
            stats.already_seen,
            len(stats.errors),
        )
        return 0 if stats.ok else 1

    dry_run = args.command == "dry-run" or app_config.polling.dry_run
    dispatcher = None
    if not dry_run:
        if not app_config.mail.sender or not app_config.mail.recipient:
            logger.error("mail.sender and mail.recipient must be configured to send notifications")
            return 2
        dispatcher = NotificationDispatcher(
            SmtpEmailNotifier(app_config.mail),
            max_workers=app_config.notify.max_workers,
        )

    service = build_service(
        app_config,
        store=store,
        dispatcher=dispatcher,
        dry_run=dry_run,
        preview_callback=_email_dry_run_preview if dry_run else None,
    )

    if args.command == "serve":
        return _serve(
            app_config,
            service,
            dispatcher,
            host=args.host,
            port=args.port,
            log_level=log_level,
        )

    try:
        stats = service.run_once()
    finally:
        # Let queued emails finish before the process exits.
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)

    _log_stats(stats)
    return 0 if stats.ok else 1


def build_store(app_config: AppConfig) -> Store:
    if app_config.storage.type == "memory":
        return MemoryStore()
    if app_config.storage.type != "sqlite":
        raise ConfigError(f"Unsupported storage type: {app_config.storage.type}")
    return SQLiteStore(app_config.storage.path)


def build_service(
    app_config: AppConfig,
    *,
    store: Store,
    dispatcher: NotificationDispatcher | None,
    dry_run: bool,
    preview_callback: Callable[[Link, str], None] | None = None,
) -> PollService:
    source = HackerNewsSource(app_config.source)
    return PollService(
        source=source,
        title_filter=TitleKeywordFilter(app_config.filters),
        store=store,
        dispatcher=dispatcher,
        isolate_entry_failures=app_config.polling.isolate_entry_failures,
        dry_run=dry_run,
        preview_callback=preview_callback,
    )


def _serve(
    app_config: AppConfig,
    service: PollService,
    dispatcher: NotificationDispatcher | None,
    *,
    host: str | None,
    port: int | None,
    log_level: str,
) -> int:
    import uvicorn

    from hn_watch.api import create_app

    app = create_app(service, dispatcher)
    uvicorn.run(
        app,
        host=host or app_config.server.host,
        port=port or app_config.server.port,
        log_level=log_level.lower(),
    )
    return 0


def _log_stats(stats: PollStats) -> None:
    logger.info(
        "Run complete | entries=%d matched=%d claimed=%d already_seen=%d missing_item_url=%d errors=%d",
        stats.entries,
        stats.matched,
        stats.claimed,
        stats.already_seen,
        stats.missing_item_url,
        len(stats.errors),
    )
    if stats.failure:
        logger.error("Run failed: %s", stats.failure)


def _email_dry_run_preview(link: Link, reason: str) -> None:
    print("[DRY RUN] WOULD EMAIL:")
    print(f"Subject: {render_subject(link)}")
    print(render_body(link))
    print(f"(matched {reason})")
    print("")


if __name__ == "__main__":
    raise SystemExit(main())
