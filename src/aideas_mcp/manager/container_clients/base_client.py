# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod
from typing import Optional

from ...model import ContainerRunSpec


class BaseClient(ABC):
    """Narrow async interface to a local container runtime."""

    @abstractmethod
    async def is_installed(self) -> bool:
        """Check whether the runtime binary can be invoked."""

    @abstractmethod
    async def is_daemon_up(self) -> bool:
        """Check whether the runtime daemon responds."""

    @abstractmethod
    async def is_running(self, name: str) -> bool:
        """Check whether a container with exactly this name is running."""

    @abstractmethod
    async def get_host_port(self, name: str) -> Optional[int]:
        """Get the first host port published by the named container."""

    @abstractmethod
    async def run(self, spec: ContainerRunSpec) -> bool:
        """Start a detached container; True if the runtime accepted it."""

    @abstractmethod
    async def stop(self, name: str) -> bool:
        """Stop and remove the named container; True if it is gone."""
