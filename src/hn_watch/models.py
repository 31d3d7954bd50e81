from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Link:
    title: str
    url: str
    item_url: str


@dataclass(slots=True)
class ListingEntry:
    title: str
    url: str
    element: Any = None
