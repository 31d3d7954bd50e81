from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock

from hn_watch.models import Link

from .base import SeenRecord, Store


class MemoryStore(Store):
    """Process-local store; records are lost when the process exits."""

    def __init__(self) -> None:
        self._records: dict[str, SeenRecord] = {}
        self._lock = Lock()

    def init_db(self) -> None:
        return None

    def exists(self, item_url: str) -> bool:
        with self._lock:
            return item_url in self._records

    def get(self, item_url: str) -> SeenRecord | None:
        with self._lock:
            return self._records.get(item_url)

    def put(self, link: Link) -> None:
        with self._lock:
            self._records.setdefault(link.item_url, _record_for(link))

    def try_claim(self, link: Link) -> bool:
        with self._lock:
            if link.item_url in self._records:
                return False
            self._records[link.item_url] = _record_for(link)
            return True


def _record_for(link: Link) -> SeenRecord:
    return SeenRecord(
        item_url=link.item_url,
        title=link.title,
        url=link.url,
        first_seen_at=datetime.now(timezone.utc),
    )
