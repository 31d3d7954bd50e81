from __future__ import annotations

from typing import Iterable

from hn_watch.config import FilterSettings

from .base import Filter, FilterResult


class TitleKeywordFilter(Filter):
    def __init__(self, settings: FilterSettings) -> None:
        self.keywords = frozenset(
            keyword.strip().lower() for keyword in settings.keywords if keyword.strip()
        )

    def evaluate(self, title: str) -> FilterResult:
        return FilterResult(title=title, keyword=find_keyword(title, self.keywords))


def match_title(title: str, keywords: Iterable[str]) -> bool:
    """Report whether any whitespace-separated word of ``title`` is a keyword.

    Words are compared after trimming non-letter characters from both ends and
    lowercasing. A word with inner punctuation is also tried on the letters
    after its last non-letter character, so ``"foo.golang!"`` matches
    ``golang`` but ``"golanguage"`` does not. Keywords are expected in
    lowercase.
    """
    return find_keyword(title, keywords) is not None


def find_keyword(title: str, keywords: Iterable[str]) -> str | None:
    wanted = keywords if isinstance(keywords, (set, frozenset)) else set(keywords)
    for word in (title or "").split():
        for token in _candidate_tokens(word):
            if token in wanted:
                return token
    return None


def _candidate_tokens(word: str) -> list[str]:
    trimmed = _strip_non_letters(word).lower()
    if not trimmed:
        return []
    candidates = [trimmed]
    for index in range(len(trimmed) - 1, -1, -1):
        if not trimmed[index].isalpha():
            tail = trimmed[index + 1 :]
            if tail:
                candidates.append(tail)
            break
    return candidates


def _strip_non_letters(word: str) -> str:
    start = 0
    end = len(word)
    while start < end and not word[start].isalpha():
        start += 1
    while end > start and not word[end - 1].isalpha():
        end -= 1
    return word[start:end]
