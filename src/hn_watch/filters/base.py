from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FilterResult:
    title: str
    keyword: str | None = None

    @property
    def matched(self) -> bool:
        return self.keyword is not None

    def reason_text(self) -> str:
        if self.keyword is None:
            return "no keywords matched"
        return f"keyword: {self.keyword}"


class Filter(ABC):
    @abstractmethod
    def evaluate(self, title: str) -> FilterResult:
        """Decide whether a story title is worth a notification."""

    def matches(self, title: str) -> bool:
        return self.evaluate(title).matched
