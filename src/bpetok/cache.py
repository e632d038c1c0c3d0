"""Least-recently-used memo of chunk text -> merged symbols."""

from collections import OrderedDict
from contextlib import nullcontext
import logging
import threading

from .errors import ConfigError, InternalInvariantError
from .types import Symbol, SymbolList

log = logging.getLogger(__name__)

# small enough for mobile targets, large enough for repeated sub-words in a document
DEFAULT_CAPACITY = 500


class LRUCache:
    """
    Bounded cache of merge results keyed by the raw chunk text.

    Recency is refreshed by :meth:`get_output` and :meth:`add`. When an
    insert would exceed ``capacity`` the least recently used entry is evicted.

    Instances are meant for a single caller. Pass ``thread_safe=True`` to
    guard every method with one lock when a cache is shared between threads.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, thread_safe: bool = False) -> None:
        if capacity <= 0:
            raise ConfigError(
                f"cache capacity must be positive, got {capacity}", field="capacity"
            )
        self.capacity = capacity
        self._entries: OrderedDict[str, tuple[Symbol, ...]] = OrderedDict()
        self._lock = threading.Lock() if thread_safe else nullcontext()
        self.hits = 0
        self.misses = 0

    def already_tokenized(self, key: str) -> bool:
        """Return ``True`` when ``key`` has a cached merge result."""
        with self._lock:
            found = key in self._entries
            if found:
                self.hits += 1
            else:
                self.misses += 1
            return found

    def get_output(self, key: str) -> SymbolList:
        """
        Return a copy of the cached symbols for ``key`` and mark it as used.

        :raises InternalInvariantError: If ``key`` is not cached; callers must
            check :meth:`already_tokenized` first.
        """
        with self._lock:
            try:
                value = self._entries[key]
            except KeyError:
                raise InternalInvariantError(
                    "cache output requested for a key that is not cached", key=key
                ) from None
            self._entries.move_to_end(key)
            return list(value)

    def lookup(self, key: str) -> SymbolList | None:
        """
        Return a copy of the cached symbols for ``key``, or ``None`` on a miss.

        Check and read happen under one lock acquisition, so a shared cache
        cannot evict the entry in between.
        """
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self.hits += 1
            self._entries.move_to_end(key)
            return list(value)

    def add(self, key: str, value: SymbolList) -> None:
        """Store ``value`` under ``key``, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                log.debug(f"evicted {evicted!r} from bpe cache")
            self._entries[key] = tuple(value)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
