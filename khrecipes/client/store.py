import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


CACHE_KEY = "kh-recipes-cache"
PASSKEY_KEY = "kh-passkey"


class LocalStore:
    """Small durable key/value store. One JSON file per key.

    Every write replaces the whole value.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable %s", path)
            return None

    def set(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            json.dump(value, f)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
