# -*- coding: utf-8 -*-
import logging
from typing import List, Optional, Union

from .base import ServiceWithLifecycleManager
from ..client import AideasHttpClient
from ..enums import ErrorCode, TaskStatus
from ..exception import (
    InvalidArgumentError,
    PortExhaustedError,
    RemoteError,
    RuntimeUnavailableError,
    ServiceUnreachableError,
    StaleReferenceError,
    StartFailedError,
)
from ..manager import ContainerOrchestrator, check_runtime_status
from ..manager.collections import LocalTTLMapping, RedisTTLMapping, TTLMapping
from ..manager.container_clients import BaseClient, DockerClient
from ..model import (
    AgentConfig,
    RuntimeStatus,
    Settings,
    Task,
    TaskConfig,
    build_run_extras,
    get_settings,
)

logger = logging.getLogger(__name__)


def create_task_store(settings: Settings) -> TTLMapping:
    """Redis-backed store when enabled, otherwise a directory on disk."""
    if settings.REDIS_ENABLED:
        import redis

        redis_client = redis.Redis(
            host=settings.REDIS_SERVER,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            username=settings.REDIS_USER,
            password=settings.REDIS_PASSWORD,
            decode_responses=True,
        )
        try:
            redis_client.ping()
        except redis.exceptions.ConnectionError as e:
            raise RuntimeError(
                "Unable to connect to the Redis server.",
            ) from e

        return RedisTTLMapping(
            redis_client,
            settings.TASK_TTL,
            prefix=settings.REDIS_KEY_PREFIX,
        )
    return LocalTTLMapping(settings.TASK_STORE_DIR, settings.TASK_TTL)


class AideasService(ServiceWithLifecycleManager):
    """
    Entry points used by the MCP tools.

    Every operation first makes sure the backing service container is
    running and answering, then talks to it over HTTP. Created tasks are
    remembered in a TTL store; only tasks found there can be queried.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        runtime_client: Optional[BaseClient] = None,
        orchestrator: Optional[ContainerOrchestrator] = None,
        task_store: Optional[TTLMapping] = None,
    ):
        self.settings = settings or get_settings()
        self.runtime_client = runtime_client or DockerClient()
        self.orchestrator = orchestrator or ContainerOrchestrator(
            self.runtime_client,
            settle_seconds=self.settings.SETTLE_SECONDS,
            suffix=self.settings.CONTAINER_SUFFIX,
            address_by_name=self.settings.runs_in_docker,
        )
        self.task_store = task_store or create_task_store(self.settings)
        self.run_extras = build_run_extras(self.settings)
        self._http_client: Optional[AideasHttpClient] = None

    @property
    def image_name(self) -> str:
        return self.settings.IMAGE_NAME

    async def start(self) -> None:
        if isinstance(self.task_store, LocalTTLMapping):
            removed = self.task_store.purge_expired()
            if removed:
                logger.info(f"Removed {removed} expired task configs")

    async def stop(self) -> None:
        if self._http_client is not None:
            await self._http_client.close()
            self._http_client = None
        await self.remove_backing_service()

    async def health(self) -> bool:
        status = await self.validate_setup()
        return status.ok

    async def validate_setup(self) -> RuntimeStatus:
        return await check_runtime_status(self.runtime_client)

    async def remove_backing_service(self) -> bool:
        return await self.orchestrator.stop_and_remove(self.image_name)

    async def _client_for(self, endpoint: str) -> AideasHttpClient:
        if self._http_client is not None:
            if self._http_client.base_url == endpoint:
                return self._http_client
            await self._http_client.close()

        self._http_client = AideasHttpClient(
            endpoint,
            timeout=self.settings.REQUEST_TIMEOUT,
            retries=self.settings.REQUEST_RETRIES,
            retry_interval=self.settings.RETRY_INTERVAL,
        )
        return self._http_client

    async def ensure_backing_service(
        self,
        timeout: Optional[int] = None,
    ) -> AideasHttpClient:
        """
        Make sure the backing service is running and answering.

        Args:
            timeout: Readiness budget in seconds; ``STARTUP_TIMEOUT`` when
                None.

        Returns:
            A client bound to the running service.

        Raises:
            RuntimeUnavailableError: Docker is missing or not running.
            PortExhaustedError: No free host port was found.
            StartFailedError: The container could not be started.
            ServiceUnreachableError: The service did not answer in time.
        """
        status = await check_runtime_status(self.runtime_client)
        if not status.ok:
            raise RuntimeUnavailableError(
                status.message,
                details={"reason": status.reason.value},
            )

        port = self.settings.APP_PORT
        handle = await self.orchestrator.ensure_running(
            self.image_name,
            port,
            self.run_extras,
            user=self.settings.CONTAINER_USER,
        )
        if handle is None:
            message = (
                f"Failed to run container for image: {self.image_name} "
                f"on port: {port}"
            )
            failure = self.orchestrator.last_failure(self.image_name)
            if failure == ErrorCode.PORT_EXHAUSTED:
                raise PortExhaustedError(message)
            raise StartFailedError(message)

        client = await self._client_for(handle.endpoint)
        if timeout is None:
            timeout = self.settings.STARTUP_TIMEOUT
        if not await client.is_up(timeout):
            raise ServiceUnreachableError(
                f"Server at {handle.endpoint} is not up, even after waiting "
                f"{timeout} seconds",
            )
        return client

    async def list_agents(self, tag: Optional[str] = None) -> List[str]:
        client = await self.ensure_backing_service()
        return await client.get_agent_names(tag)

    async def get_agent_config(self, agent_name: str) -> AgentConfig:
        if not agent_name:
            raise InvalidArgumentError("Agent name is required")
        client = await self.ensure_backing_service()
        return await client.get_agent_config(agent_name)

    async def create_task(self, task_config: Union[TaskConfig, dict]) -> str:
        """
        Create a task for known agents and remember its config.

        Returns:
            The id of the created task.

        Raises:
            InvalidArgumentError: No agents, or agents unknown to the service.
            RemoteError: The service failed or returned no task id.
        """
        if not isinstance(task_config, TaskConfig):
            task_config = TaskConfig.model_validate(task_config)
        if not task_config.agents:
            raise InvalidArgumentError("At least one agent is required")

        client = await self.ensure_backing_service()

        available = await client.get_agent_names()
        if not available:
            raise InvalidArgumentError(
                "No agents available. Please ensure agents are configured.",
            )
        invalid = [a for a in task_config.agents if a not in available]
        if invalid:
            raise InvalidArgumentError(
                f"Invalid agents: {', '.join(invalid)}. "
                f"Available agents: {', '.join(available)}",
                details={"invalid": invalid, "available": available},
            )

        task_id = await client.create_task(task_config)
        if not task_id:
            raise RemoteError(
                "Error creating automation task. No task ID was returned.",
            )

        self.task_store.set(task_id, task_config.to_payload())
        logger.info(f"Created task: {task_id}")
        return task_id

    async def get_task(self, task_id: str) -> Task:
        """
        Raises:
            StaleReferenceError: The task was not created here, or its
                record has expired.
        """
        if not task_id:
            raise InvalidArgumentError("Task ID is required")
        if self.task_store.get(task_id) is None:
            raise StaleReferenceError(
                f"Task '{task_id}' not found. It may have expired, or was "
                f"not created by this server.",
                details={"task_id": task_id},
            )
        client = await self.ensure_backing_service()
        return await client.get_task(task_id)

    async def list_tasks(self, status: Optional[str] = None) -> List[Task]:
        task_status = None
        if status:
            task_status = TaskStatus.parse(status)
            if task_status is None:
                raise InvalidArgumentError(
                    f"Invalid status: {status}. Valid values: "
                    f"{', '.join(s.value for s in TaskStatus)}",
                )

        client = await self.ensure_backing_service()
        tasks = await client.get_tasks()
        if task_status is not None:
            tasks = [t for t in tasks if t.status == task_status]
        return tasks
