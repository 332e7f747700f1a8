"""Explicit per-scheme cache of built sanctions trees."""

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from ..documents.schemes import DocumentScheme
from .tree import SanctionsTreePair

logger = logging.getLogger(__name__)

TreeLoader = Callable[[DocumentScheme], SanctionsTreePair]


class SanctionsTreeCache:
    """
    Holds built sanctions trees keyed by scheme.

    The cache is passed explicitly to the flows that need it. Disabling it
    only costs rebuilds: ``get_or_build`` then always calls the loader.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._trees: "OrderedDict[DocumentScheme, SanctionsTreePair]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, scheme: DocumentScheme) -> Optional[SanctionsTreePair]:
        with self._lock:
            if self.enabled and scheme in self._trees:
                self._hits += 1
                return self._trees[scheme]
            self._misses += 1
            return None

    def set(self, scheme: DocumentScheme, trees: SanctionsTreePair) -> None:
        with self._lock:
            if self.enabled:
                self._trees[scheme] = trees

    def get_or_build(self, scheme: DocumentScheme, loader: TreeLoader) -> SanctionsTreePair:
        """Return the cached trees for ``scheme``, loading them on a miss."""
        trees = self.get(scheme)
        if trees is None:
            trees = loader(scheme)
            self.set(scheme, trees)
            logger.debug("loaded sanctions trees for %s", scheme.value)
        return trees

    def invalidate(self, scheme: DocumentScheme) -> None:
        """Drop one scheme so its trees are refetched on next use."""
        with self._lock:
            self._trees.pop(scheme, None)

    def reset(self) -> None:
        """Drop everything and zero the statistics."""
        with self._lock:
            self._trees.clear()
            self._hits = 0
            self._misses = 0

    def __contains__(self, scheme: DocumentScheme) -> bool:
        with self._lock:
            return scheme in self._trees

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._trees),
                "enabled": self.enabled,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0.0,
            }
