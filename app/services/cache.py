"""
Local key-value cache for the last known shop/bill snapshot.
Passed into the DataStore explicitly; nothing here is module-global.
"""
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from app.core.logging import get_logger

logger = get_logger(__name__)

SHOPS_CACHE_KEY = "shops-cache"
BILLS_CACHE_KEY = "bills-cache"


class Cache(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryCache:
    """Process-local cache; contents are lost on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileCache:
    """
    One file per key under `directory`.
    Writes go to a temp file first and are swapped in with os.replace,
    so a reader never sees a half-written value.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, self._path(key))
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning("Cache write failed for %s: %s", key, e)


def cache_from_settings(cache_dir: str) -> Cache:
    if cache_dir:
        return JsonFileCache(cache_dir)
    return MemoryCache()
