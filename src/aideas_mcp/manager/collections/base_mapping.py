# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod
from typing import Any, Iterator


class TTLMapping(ABC):
    """Key-value mapping whose entries expire ``ttl_seconds`` after set."""

    ttl_seconds: float

    @abstractmethod
    def set(self, key: str, value: Any):
        pass

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the value, or None if the key is missing or expired."""

    @abstractmethod
    def delete(self, key: str):
        pass

    @abstractmethod
    def scan(self, prefix: str = "") -> Iterator[str]:
        """Yield the live keys starting with ``prefix``."""

    @abstractmethod
    def clear(self):
        pass

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
