"""Durable key-value store backed by one JSON document per key."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import STORE_DIR

logger = logging.getLogger(__name__)


class JsonKeyValueStore:
    """Whole-document JSON persistence keyed by fixed string identifiers.

    Every ``store`` fully replaces the previous document; there is no partial
    update, no transaction and no locking, so the last writer wins.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root or STORE_DIR)

    def path_for(self, key: str) -> Path:
        if not key or not key.strip():
            raise ValueError("Store key cannot be empty")
        return self.root / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str, default: Any = None) -> Any:
        """Return the stored document, or a copy of ``default`` when absent."""
        target = self.path_for(key)
        if not target.exists():
            return copy.deepcopy(default)
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read store record %r: %s", key, exc)
            return copy.deepcopy(default)

    def store(self, key: str, value: Any) -> None:
        target = self.path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open('w', encoding='utf-8') as handle:
            json.dump(value, handle, indent=2, ensure_ascii=False)
        logger.debug("Wrote store record %r to %s", key, target)

    def delete(self, key: str) -> None:
        target = self.path_for(key)
        if target.exists():
            target.unlink()
