from __future__ import annotations

import logging

import requests
from bs4 import BeautifulSoup, Tag

from hn_watch.config import SourceSettings
from hn_watch.models import ListingEntry

from .base import FetchError, ItemExtractor, ParseError, Source

logger = logging.getLogger(__name__)

ITEM_HREF_PREFIX = "item?id="

# Older markup puts the story anchor directly in td.title; current markup wraps
# it in span.titleline.
_TITLE_ANCHOR_SELECTOR = "td.title > a, td.title > span.titleline > a"


class HackerNewsItemExtractor(ItemExtractor):
    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def extract_item_url(self, entry: ListingEntry) -> str:
        anchor = entry.element
        if not isinstance(anchor, Tag):
            return ""

        row = anchor.find_parent("tr")
        if row is None:
            return ""
        metadata_row = row.find_next_sibling("tr")
        if metadata_row is None:
            return ""

        item_url = ""
        for link in metadata_row.find_all("a", href=True):
            href = str(link["href"])
            if href.startswith(ITEM_HREF_PREFIX):
                item_url = self.base_url + href
        return item_url


class HackerNewsSource(Source):
    def __init__(self, settings: SourceSettings) -> None:
        super().__init__(source_id=settings.type)
        self.url = settings.url
        self.timeout_seconds = settings.timeout_seconds
        self.user_agent = settings.user_agent
        self._extractor = HackerNewsItemExtractor(settings.base_url)

    @property
    def item_extractor(self) -> ItemExtractor:
        return self._extractor

    def fetch(self) -> list[ListingEntry]:
        return parse_listing(self.fetch_page())

    def fetch_page(self) -> str:
        headers = {"User-Agent": self.user_agent}
        try:
            response = requests.get(self.url, timeout=self.timeout_seconds, headers=headers)
        except requests.RequestException as exc:
            raise FetchError(f"GET {self.url} failed: {exc}") from exc

        if response.status_code != 200:
            raise FetchError(f"GET {self.url} returned {response.status_code} {response.reason}")

        logger.debug("Fetched %s (%d bytes)", self.url, len(response.content))
        return response.text


def parse_listing(html: str) -> list[ListingEntry]:
    try:
        soup = BeautifulSoup(html, "html.parser")
        anchors = soup.select(_TITLE_ANCHOR_SELECTOR)
    except Exception as exc:  # noqa: BLE001
        raise ParseError(f"could not parse listing page: {exc}") from exc

    entries: list[ListingEntry] = []
    for anchor in anchors:
        entries.append(
            ListingEntry(
                title=anchor.get_text(),
                url=str(anchor.get("href", "")),
                element=anchor,
            )
        )
    return entries
