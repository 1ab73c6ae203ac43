# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod


class Service(ABC):
    """Lifecycle interface of long-lived components of the server."""

    @abstractmethod
    async def start(self) -> None:
        """Prepare resources needed before the first request."""

    @abstractmethod
    async def stop(self) -> None:
        """Release clients and containers owned by the service."""

    @abstractmethod
    async def health(self) -> bool:
        """
        Returns:
            True if the service can handle requests, False otherwise.
        """


class ServiceWithLifecycleManager(Service):
    """Service usable as ``async with``: started on entry, stopped on exit."""

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
