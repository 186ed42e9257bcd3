"""
Persisted notification markers.
A small key/value surface for the daily scan marker, stored as JSON on disk
or in memory.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

LAST_SCAN_DATE = "last_scan_date"


class InMemoryMarkerStore:
    """Markers kept for the lifetime of the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._markers: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._markers.get(key)

    def set(self, key: str, value: Any) -> None:
        self._markers[key] = value


class FileMarkerStore:
    """Markers persisted to a JSON file so they survive restarts."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Marker file unreadable, treating as empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Any:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4)
