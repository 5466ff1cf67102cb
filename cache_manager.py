"""
In-memory mirror of the catalog.

The cache holds the last known list of book records. It is replaced wholesale
after every successful read of the books file and after every mutation, so it
stays usable when the filesystem is read-only or broken.
"""

import copy
import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class CatalogCache:
    """Thread-safe holder for the in-memory copy of the catalog."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records: List[Dict[str, Any]] = copy.deepcopy(records or [])
        self._lock = threading.RLock()
        self.cache_stats = {
            'replacements': 0,
            'last_replaced_at': None,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def is_empty(self) -> bool:
        return len(self) == 0

    def snapshot(self) -> List[Dict[str, Any]]:
        """Return a deep copy so callers can mutate it freely."""
        with self._lock:
            return copy.deepcopy(self._records)

    def replace(self, records: List[Dict[str, Any]]) -> None:
        """Swap the cached catalog for ``records``."""
        with self._lock:
            self._records = copy.deepcopy(records)
            self.cache_stats['replacements'] += 1
            self.cache_stats['last_replaced_at'] = datetime.now().isoformat()
        logger.debug("Catalog cache now holds %d books", len(records))

    def clear(self) -> None:
        with self._lock:
            self._records = []

    def get_stats(self) -> Dict[str, Any]:
        """Cache statistics."""
        with self._lock:
            stats = self.cache_stats.copy()
            stats['size'] = len(self._records)
        return stats
