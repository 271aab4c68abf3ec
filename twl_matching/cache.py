"""
Term index cache.

Holds built TermIndex objects for the lifetime of a batch so a
dictionary used for many books is indexed only once. The cache is an
ordinary object owned by the caller and passed to each per-book call.
"""

import hashlib
import json
from collections import OrderedDict
from typing import Any, Dict, Mapping, Optional, Sequence

from .term_index import TermIndex, build_term_index
from config import settings
from logger import get_logger

logger = get_logger(__name__)


def dictionary_fingerprint(dictionary: Mapping[str, Sequence[str]]) -> str:
    """Stable hash of a term dictionary, sensitive to entry order"""
    payload = json.dumps(
        [[term, articles] for term, articles in dictionary.items()],
        ensure_ascii=False,
        default=str
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class TermIndexCache:
    """LRU cache of term indexes keyed by dictionary fingerprint"""

    def __init__(self, maxsize: Optional[int] = None, skip_invalid: Optional[bool] = None):
        self._cache: OrderedDict = OrderedDict()
        self._maxsize = settings.index_cache_size if maxsize is None else maxsize
        if self._maxsize < 1:
            raise ValueError(f"Cache size must be at least 1, got {self._maxsize}")
        self._skip_invalid = skip_invalid
        self._hits = 0
        self._misses = 0

    def get_or_build(self, dictionary: Mapping[str, Sequence[str]]) -> TermIndex:
        """Return the cached index for a dictionary, building it on a miss"""
        key = dictionary_fingerprint(dictionary)

        if key in self._cache:
            self._cache.move_to_end(key)
            self._hits += 1
            logger.debug(f"Term index cache hit ({key[:12]})")
            return self._cache[key]

        self._misses += 1
        logger.debug(f"Term index cache miss ({key[:12]})")
        index = build_term_index(dictionary, skip_invalid=self._skip_invalid)

        if len(self._cache) >= self._maxsize:
            # Remove least recently used
            self._cache.popitem(last=False)
        self._cache[key] = index
        return index

    def clear(self) -> None:
        """Clear entire cache"""
        self._cache.clear()

    def __contains__(self, dictionary: Mapping[str, Sequence[str]]) -> bool:
        return dictionary_fingerprint(dictionary) in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        total = self._hits + self._misses
        hit_rate = self._hits / total if total > 0 else 0
        return {
            "size": len(self._cache),
            "maxsize": self._maxsize,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": hit_rate
        }
