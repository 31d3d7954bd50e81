from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from hn_watch.models import Link


class StorageError(RuntimeError):
    """Raised when the seen-link store cannot be read or written."""


@dataclass(slots=True)
class SeenRecord:
    item_url: str
    title: str
    url: str
    first_seen_at: datetime

    def to_link(self) -> Link:
        return Link(title=self.title, url=self.url, item_url=self.item_url)


class Store(ABC):
    @abstractmethod
    def init_db(self) -> None:
        """Create any required schema."""

    @abstractmethod
    def exists(self, item_url: str) -> bool:
        """Return True if a record is stored under this key."""

    @abstractmethod
    def get(self, item_url: str) -> SeenRecord | None:
        """Return the stored record, otherwise None."""

    @abstractmethod
    def put(self, link: Link) -> None:
        """Store a link under its item URL; existing records are left untouched."""

    @abstractmethod
    def try_claim(self, link: Link) -> bool:
        """Atomically store the link if its key is unseen.

        Returns True only for the single caller that created the record.
        """
