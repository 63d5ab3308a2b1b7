"""
Key-value persistence for schedules and assessment history.

Values must be JSON-serialisable. ``InMemoryStore`` is the default for tests
and the demo; ``JsonFileStore`` keeps one file per key under a directory.
"""

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

SCHEDULES_KEY = "medication_schedules:{user_id}"
HISTORY_KEY = "symptom_history:{user_id}"


class KeyValueStore:
    """Opaque key-value store interface."""

    def save(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def load(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def append(self, key: str, item: Any) -> list:
        """Append ``item`` to the list stored at ``key`` and return the new list."""
        items = list(self.load(key, []))
        items.append(item)
        self.save(key, items)
        return items


class InMemoryStore(KeyValueStore):
    def __init__(self):
        self._data: Dict[str, str] = {}

    def save(self, key: str, value: Any) -> None:
        # Serialise on write so non-JSON values fail here, as they would on disk.
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def load(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return copy.deepcopy(default)
        return json.loads(self._data[key])

    def keys(self):
        return list(self._data)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2)
        tmp.replace(path)
        logger.debug("Saved %s", path)

    def load(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return copy.deepcopy(default)
        with open(path, encoding="utf-8") as f:
            return json.load(f)
