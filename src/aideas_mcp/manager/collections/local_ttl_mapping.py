# -*- coding: utf-8 -*-
import hashlib
import json
import logging
import os
import time
from typing import Any, Callable, Optional

from .base_mapping import TTLMapping

logger = logging.getLogger(__name__)


class LocalTTLMapping(TTLMapping):
    """
    Durable mapping stored as one JSON file per key in a directory.

    Each file holds ``{"key", "value", "expires_at"}``. Expired entries are
    dropped lazily when read, or in bulk by :meth:`purge_expired`.
    """

    def __init__(
        self,
        directory: str,
        ttl_seconds: float,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.directory = directory
        self.ttl_seconds = ttl_seconds
        self.clock = clock or time.time
        os.makedirs(self.directory, exist_ok=True)

    def _path(self, key: str) -> str:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return os.path.join(self.directory, digest)

    def _read(self, path: str) -> Optional[dict]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Dropping unreadable entry {path}: {e}")
            self._remove(path)
            return None

    @staticmethod
    def _remove(path: str):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass

    def _is_expired(self, entry: dict) -> bool:
        expires_at = entry.get("expires_at")
        return expires_at is not None and expires_at <= self.clock()

    def set(self, key: str, value: Any):
        entry = {
            "key": key,
            "value": value,
            "expires_at": self.clock() + self.ttl_seconds,
        }
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(entry, f)
        os.replace(tmp_path, path)
        logger.debug(f"Set: {key} = {json.dumps(value)}")

    def get(self, key: str) -> Any:
        path = self._path(key)
        entry = self._read(path)
        if entry is None:
            return None
        if self._is_expired(entry):
            logger.debug(f"Expired: {key}")
            self._remove(path)
            return None
        return entry.get("value")

    def delete(self, key: str):
        self._remove(self._path(key))
        logger.debug(f"Deleted: {key}")

    def _entries(self):
        for file_name in sorted(os.listdir(self.directory)):
            if file_name.endswith(".tmp"):
                continue
            path = os.path.join(self.directory, file_name)
            entry = self._read(path)
            if entry is not None:
                yield path, entry

    def scan(self, prefix: str = ""):
        for path, entry in self._entries():
            if self._is_expired(entry):
                self._remove(path)
                continue
            key = entry.get("key", "")
            if key.startswith(prefix):
                yield key

    def purge_expired(self) -> int:
        """Remove every expired entry; return how many were removed."""
        removed = 0
        for path, entry in list(self._entries()):
            if self._is_expired(entry):
                self._remove(path)
                removed += 1
        return removed

    def clear(self):
        for path, _ in list(self._entries()):
            self._remove(path)
