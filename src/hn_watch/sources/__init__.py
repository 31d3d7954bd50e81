"""Listing sources."""

from .base import FetchError, ItemExtractor, ParseError, Source
from .hacker_news import HackerNewsItemExtractor, HackerNewsSource, parse_listing

__all__ = [
    "FetchError",
    "HackerNewsItemExtractor",
    "HackerNewsSource",
    "ItemExtractor",
    "ParseError",
    "Source",
    "parse_listing",
]
