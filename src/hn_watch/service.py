from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from hn_watch.filters import Filter
from hn_watch.models import Link, ListingEntry
from hn_watch.notifiers import NotificationDispatcher
from hn_watch.sources import FetchError, ItemExtractor, ParseError, Source
from hn_watch.store import StorageError, Store

logger = logging.getLogger(__name__)

FETCH_FAILED = "Error fetching page"
PARSE_FAILED = "Error parsing page"
STORE_FAILED = "Error storing link"
NOT_CONFIGURED = "Notifier not configured"


@dataclass(slots=True)
class PollStats:
    entries: int = 0
    matched: int = 0
    claimed: int = 0
    already_seen: int = 0
    missing_item_url: int = 0
    dispatched: int = 0
    errors: list[str] = field(default_factory=list)
    failure: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def fail(self, description: str, message: str) -> None:
        if self.failure is None:
            self.failure = description
        self.errors.append(message)


class PollService:
    def __init__(
        self,
        *,
        source: Source,
        title_filter: Filter,
        store: Store,
        dispatcher: NotificationDispatcher | None,
        item_extractor: ItemExtractor | None = None,
        isolate_entry_failures: bool = True,
        dry_run: bool = False,
        preview_callback: Callable[[Link, str], None] | None = None,
    ) -> None:
        self.source = source
        self.item_extractor = item_extractor or source.item_extractor
        self.title_filter = title_filter
        self.store = store
        self.dispatcher = dispatcher
        self.isolate_entry_failures = isolate_entry_failures
        self.dry_run = dry_run
        self.preview_callback = preview_callback or _default_preview

    def run_once(self) -> PollStats:
        stats = PollStats()

        if not self.dry_run and self.dispatcher is None:
            message = "dispatcher is required when dry_run is false"
            logger.error(message)
            stats.fail(NOT_CONFIGURED, message)
            return stats

        entries = self._fetch_entries(stats)
        if entries is None:
            return stats

        for entry in entries:
            link = self._match(entry, stats)
            if link is None:
                continue

            if self.dry_run:
                self.preview_callback(link, self.title_filter.evaluate(link.title).reason_text())
                continue

            try:
                claimed = self.store.try_claim(link)
            except StorageError as exc:
                message = f"failed to claim {link.item_url}: {exc}"
                logger.exception(message)
                stats.fail(STORE_FAILED, message)
                if self.isolate_entry_failures:
                    continue
                return stats

            if not claimed:
                stats.already_seen += 1
                logger.debug("Already notified about %s", link.item_url)
                continue

            stats.claimed += 1
            logger.info("New matching story %r (%s)", link.title, link.item_url)
            self.dispatcher.submit(link)
            stats.dispatched += 1

        return stats

    def backfill(self) -> PollStats:
        """Mark every currently matching story as seen without notifying."""
        stats = PollStats()

        entries = self._fetch_entries(stats)
        if entries is None:
            return stats

        for entry in entries:
            link = self._match(entry, stats)
            if link is None:
                continue

            try:
                claimed = self.store.try_claim(link)
            except StorageError as exc:
                message = f"failed to mark {link.item_url} seen: {exc}"
                logger.exception(message)
                stats.fail(STORE_FAILED, message)
                continue

            if claimed:
                stats.claimed += 1
            else:
                stats.already_seen += 1

        return stats

    def _fetch_entries(self, stats: PollStats) -> list[ListingEntry] | None:
        try:
            entries = self.source.fetch()
        except FetchError as exc:
            message = f"{FETCH_FAILED}: {exc}"
            logger.error(message)
            stats.fail(FETCH_FAILED, message)
            return None
        except ParseError as exc:
            message = f"{PARSE_FAILED}: {exc}"
            logger.error(message)
            stats.fail(PARSE_FAILED, message)
            return None

        stats.entries = len(entries)
        logger.info("Source %s returned %d entries", self.source.source_id, len(entries))
        return entries

    def _match(self, entry: ListingEntry, stats: PollStats) -> Link | None:
        if not self.title_filter.matches(entry.title):
            return None

        stats.matched += 1
        item_url = self.item_extractor.extract_item_url(entry)
        if not item_url:
            stats.missing_item_url += 1
            logger.warning("No discussion link found for %r; skipping", entry.title)
            return None

        return Link(title=entry.title, url=entry.url, item_url=item_url)


def _default_preview(link: Link, reason: str) -> None:
    print(f"[DRY RUN] WOULD NOTIFY: {link.title}")
    print(f"  URL: {link.url}")
    print(f"  Discussion: {link.item_url}")
    print(f"  Why it matched: {reason}")
    print("")
