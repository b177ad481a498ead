"""Durable key/value storage for the client session."""

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from patient_portal.core.logging import logger


# Well-known keys
TOKEN_KEY = "authToken"
USER_KEY = "user"


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Storage kept in process memory, used by tests and one-off runs."""
    
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})
    
    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)
    
    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
    
    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Storage persisted to a single JSON file.
    
    The whole file is rewritten on every change; last writer wins.
    An unreadable or corrupt file is treated as empty.
    """
    
    def __init__(self, path: str) -> None:
        self.path = Path(path).expanduser()
    
    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session file {self.path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}
    
    def _save(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items), encoding="utf-8")
    
    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)
    
    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)
    
    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)
