"""Title filter implementations."""

from .base import Filter, FilterResult
from .keyword_filter import TitleKeywordFilter, find_keyword, match_title

__all__ = ["Filter", "FilterResult", "TitleKeywordFilter", "find_keyword", "match_title"]
