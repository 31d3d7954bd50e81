from __future__ import annotations

from abc import ABC, abstractmethod

from hn_watch.models import ListingEntry


class FetchError(RuntimeError):
    """Raised when the listing page cannot be retrieved."""


class ParseError(RuntimeError):
    """Raised when the listing page cannot be parsed."""


class ItemExtractor(ABC):
    @abstractmethod
    def extract_item_url(self, entry: ListingEntry) -> str:
        """Return the discussion URL for an entry, or an empty string."""


class Source(ABC):
    def __init__(self, source_id: str) -> None:
        self.source_id = source_id

    @property
    @abstractmethod
    def item_extractor(self) -> ItemExtractor:
        """Extractor that understands this source's listing entries."""

    @abstractmethod
    def fetch(self) -> list[ListingEntry]:
        """Fetch the listing page and return its entries.

        Raises FetchError when the page cannot be retrieved and ParseError
        when it cannot be parsed.
        """
