"""
JSON file persistence for the catalog.

The store is a single file holding a JSON array of book records. It knows
nothing about the in-memory cache; every failure is raised as ``StoreError``
and it is up to the caller to decide how to degrade.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the books file cannot be read, parsed or written."""


class JsonFileStore:
    """Reads and writes the catalog as a JSON array on disk."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> List[Dict[str, Any]]:
        """Load every record from the file.

        Raises ``StoreError`` if the file is missing, unreadable, not valid
        JSON, or does not contain a list of objects.
        """
        if not self.exists():
            raise StoreError(f"{self.path} does not exist")
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"{self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise StoreError(f"{self.path} must contain a JSON array of objects")
        return data

    def write(self, records: List[Dict[str, Any]]) -> None:
        """Overwrite the file with ``records`` using two-space indentation."""
        try:
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e
        logger.debug("Wrote %d books to %s", len(records), self.path)
