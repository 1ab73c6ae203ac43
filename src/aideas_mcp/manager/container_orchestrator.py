# -*- coding: utf-8 -*-
import asyncio
import logging
import traceback
from typing import Dict, Optional, Union

from .container_clients import BaseClient
from .utils import (
    CONTAINER_SUFFIX,
    create_container_name,
    find_available_port,
    is_port_available,
)
from ..enums import ErrorCode
from ..model import ContainerHandle, ContainerRunSpec

logger = logging.getLogger(__name__)

DEFAULT_VOLUMES = {
    "/etc/localtime": "/etc/localtime",
    "/var/run/docker.sock": "/var/run/docker.sock",
}

RunExtras = Union[None, str, dict, ContainerRunSpec]


class ContainerOrchestrator:
    """
    Keeps exactly one named container per image running on this host.

    The runtime is the source of truth: every call re-checks liveness
    instead of remembering handles. Failures are logged and reported as
    ``None``/``False``; nothing here raises.
    """

    def __init__(
        self,
        client: BaseClient,
        settle_seconds: float = 1.0,
        suffix: str = CONTAINER_SUFFIX,
        address_by_name: bool = False,
    ):
        """
        Args:
            client: Container runtime client.
            settle_seconds: Delay between a start/stop command and the
                verification that follows it.
            suffix: Suffix of derived container names.
            address_by_name: Address the service by container name instead
                of ``localhost``, for callers running in a sibling container.
        """
        self.client = client
        self.settle_seconds = settle_seconds
        self.suffix = suffix
        self.address_by_name = address_by_name
        self._locks: Dict[str, asyncio.Lock] = {}
        self._failures: Dict[str, ErrorCode] = {}

    def container_name(self, image_name: str) -> str:
        return create_container_name(image_name, self.suffix)

    def last_failure(self, image_name: str) -> Optional[ErrorCode]:
        """Error code of the most recent failed start for ``image_name``."""
        return self._failures.get(self.container_name(image_name))

    def _handle(self, name: str, port: int) -> ContainerHandle:
        host = name if self.address_by_name else "localhost"
        return ContainerHandle(name=name, port=port, host=host)

    async def ensure_running(
        self,
        image_name: str,
        preferred_port: int,
        runtime_extra_args: RunExtras = None,
        user: str = "0",
    ) -> Optional[ContainerHandle]:
        """
        Return the running container for ``image_name``, starting it if
        needed.

        Concurrent calls for the same image share one attempt.

        Returns:
            The container handle, or None if the container could not be
            started (no free port, runtime error, or it exited right away).
        """
        name = self.container_name(image_name)
        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            self._failures.pop(name, None)
            try:
                return await self._ensure_running(
                    name,
                    image_name,
                    preferred_port,
                    runtime_extra_args,
                    user,
                )
            except Exception as e:
                logger.error(
                    f"Error ensuring container {name} is running: {e}, "
                    f"{traceback.format_exc()}",
                )
                self._failures[name] = ErrorCode.START_FAILED
                return None

    async def _ensure_running(
        self,
        name,
        image_name,
        preferred_port,
        runtime_extra_args,
        user,
    ):
        logger.info(f"Starting container: {name} on port: {preferred_port}")

        if await self.client.is_running(name):
            port = await self.client.get_host_port(name)
            if port is None:
                port = preferred_port
            logger.info(f"Container {name} is already running on {port}")
            return self._handle(name, port)

        port = preferred_port
        if not is_port_available(preferred_port):
            logger.info(
                f"Port {preferred_port} is occupied, finding alternative "
                f"port...",
            )
            port = await find_available_port(preferred_port + 1)
            if port is None:
                logger.error("No available ports found")
                self._failures[name] = ErrorCode.PORT_EXHAUSTED
                return None
            logger.info(
                f"Using available port: {port} instead of provided port: "
                f"{preferred_port}",
            )

        spec = self._build_run_spec(
            image_name,
            name,
            port,
            user,
            runtime_extra_args,
        )
        if not await self.client.run(spec):
            logger.error(f"Failed to start container {name}")
            self._failures[name] = ErrorCode.START_FAILED
            return None

        # A container may exit right after a successful start
        await asyncio.sleep(self.settle_seconds)
        if not await self.client.is_running(name):
            logger.error(f"Container {name} is not running after start")
            self._failures[name] = ErrorCode.START_FAILED
            return None

        logger.info(f"Container {name} started successfully on port {port}")
        return self._handle(name, port)

    @staticmethod
    def _build_run_spec(image_name, name, port, user, runtime_extra_args):
        spec = ContainerRunSpec(
            image=image_name,
            name=name,
            port=port,
            user=user,
            volumes=dict(DEFAULT_VOLUMES),
            environment={"APP_PORT": str(port)},
        )

        if isinstance(runtime_extra_args, str):
            extras = ContainerRunSpec.from_cli_args(runtime_extra_args)
        elif isinstance(runtime_extra_args, dict):
            extras = ContainerRunSpec.model_validate(runtime_extra_args)
        else:
            extras = runtime_extra_args

        merged = spec.merge(extras)
        # Identity and addressing are not overridable
        merged.image = image_name
        merged.name = name
        merged.port = port
        merged.environment["APP_PORT"] = str(port)
        return merged

    async def stop_and_remove(self, image_name: str) -> bool:
        """
        Stop and remove the container for ``image_name``.

        Returns:
            True if no container is running afterwards.
        """
        name = self.container_name(image_name)
        logger.info(f"Stopping and removing container: {name}")
        try:
            if not await self.client.is_running(name):
                logger.info(
                    f"Container {name} is not running, nothing to stop.",
                )
                return True

            await self.client.stop(name)

            await asyncio.sleep(self.settle_seconds)
            stopped = not await self.client.is_running(name)
            if not stopped:
                logger.error(f"Container {name} is still running")
            return stopped
        except Exception as e:
            logger.error(f"Error stopping container {name}: {e}")
            return False
