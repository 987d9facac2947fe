"""
Run-scoped memoization of probe results.

One :class:`RunCache` lives for exactly one assessment run and is handed to
every criterion. For a given key the computation runs once; concurrent
callers of the same key block until the first caller has stored its value.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _normalize(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_normalize(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(_normalize(v) for v in value))
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


@dataclass(frozen=True)
class CacheKey:
    """Probe name plus a normalized, hashable parameter record."""

    name: str
    params: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, name: str, params: Mapping[str, Any] | None = None) -> "CacheKey":
        params = {k: v for k, v in (params or {}).items() if v is not None}
        return cls(name=name, params=_normalize(params))


class RunCache:
    """Memoizes ``(name, params) -> value`` for the lifetime of one run."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._locks: dict[CacheKey, threading.Lock] = {}
        self._guard = threading.Lock()
        self.hits = 0
        self.misses = 0

    def memoize(
        self,
        name: str,
        params: Mapping[str, Any] | None,
        compute: Callable[[], T],
    ) -> T:
        """Return the stored value for the key, computing it on first use.

        Parameters whose value is ``None`` are dropped from the key, so
        ``{"graph": None}`` and ``{}`` address the same entry.
        """
        key = CacheKey.of(name, params)
        with self._guard:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
            lock = self._locks.setdefault(key, threading.Lock())

        with lock:
            with self._guard:
                if key in self._entries:
                    self.hits += 1
                    return self._entries[key]
                self.misses += 1
            logger.debug("Computing %s %s", key.name, dict(key.params))
            value = compute()
            with self._guard:
                self._entries[key] = value
            return value

    def __contains__(self, key: CacheKey) -> bool:
        with self._guard:
            return key in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
