from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterator

from ..models_listing import PageResult
from .query_key import QueryKey

logger = logging.getLogger(__name__)


class ResourceCache:
    """Insertion-ordered map of query key to the last successful page.

    Entries are write-once: a key is only replaced after :meth:`clear`. When
    ``max_entries`` is set the oldest insertion is evicted first.
    """

    def __init__(self, max_entries: int = 0) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._entries: OrderedDict[QueryKey, PageResult] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[QueryKey]:
        return iter(self._entries)

    def get(self, key: QueryKey) -> PageResult | None:
        return self._entries.get(key)

    def set(self, key: QueryKey, result: PageResult) -> bool:
        if key in self._entries:
            logger.debug("cache entry already present, keeping first write")
            return False
        self._entries[key] = result
        if self.max_entries and len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return True

    def clear(self) -> None:
        if self._entries:
            logger.debug("clearing %d cached pages", len(self._entries))
        self._entries.clear()

    def keys(self) -> list[QueryKey]:
        return list(self._entries)
