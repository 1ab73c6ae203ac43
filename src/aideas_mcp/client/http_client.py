# -*- coding: utf-8 -*-
import asyncio
import json
import logging
from typing import Any, List, Optional, Union
from urllib.parse import quote

import aiohttp

from .converters import to_agent_config, to_map, to_task
from ..exception import InvalidArgumentError, RemoteError
from ..model import AgentConfig, GatewayResponse, Task, TaskConfig

DEFAULT_TIMEOUT = 60

logger = logging.getLogger(__name__)


class AideasHttpClient:
    """
    Async client for the automation service running in the container.

    Every call resolves to a :class:`GatewayResponse` first; the typed
    accessors raise :class:`RemoteError` when that response is a failure.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        retries: int = 2,
        retry_interval: float = 5.0,
        health_path: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Args:
            base_url: Endpoint of the service, e.g. ``http://localhost:5001``.
            timeout: Total timeout of a single HTTP attempt, in seconds.
            retries: Default number of additional attempts per request.
            retry_interval: Default delay between attempts, in seconds.
            health_path: Path probed by :meth:`is_up`; the base URL itself
                when None.
            session: Optional pre-configured session; not closed by
                :meth:`close`.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.retry_interval = retry_interval
        self.health_path = health_path
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _send(
        self,
        method: str,
        path: Optional[str] = None,
        body: Any = None,
    ) -> GatewayResponse:
        """Perform a single attempt; never raises on transport errors."""
        url = f"{self.base_url}{path}" if path else self.base_url
        kwargs = {}
        if body is not None and method.upper() != "GET":
            kwargs["json"] = body

        try:
            async with self._get_session().request(
                method,
                url,
                **kwargs,
            ) as response:
                text = await response.text(errors="replace")
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return GatewayResponse(
                success=False,
                error=f"Request error: {str(e) or type(e).__name__}",
            )

        if 200 <= status < 300:
            try:
                data = json.loads(text)
            except ValueError:
                # Keep non-JSON bodies as text
                data = text
            return GatewayResponse(
                success=True,
                data=data,
                status_code=status,
            )

        return GatewayResponse(
            success=False,
            error=f"HTTP {status}: {text}",
            status_code=status,
        )

    @staticmethod
    def _has_content(response: GatewayResponse) -> bool:
        return response.data is not None and response.data != ""

    async def request(
        self,
        method: str,
        path: Optional[str] = None,
        body: Any = None,
        retries: Optional[int] = None,
        retry_interval: Optional[float] = None,
    ) -> GatewayResponse:
        """
        Perform a request, retrying failed and empty responses.

        Args:
            method: HTTP method.
            path: Path appended to the base URL, including any query string.
            body: JSON body, sent for non-GET requests.
            retries: Additional attempts after the first one.
            retry_interval: Delay between attempts, in seconds.

        Returns:
            The first successful response with a body, otherwise the last
            response received.
        """
        retries = self.retries if retries is None else retries
        if retry_interval is None:
            retry_interval = self.retry_interval

        response = None
        for attempt in range(retries + 1):
            logger.info(
                f"Sending {method} to {path or '/'} with data: "
                f"{json.dumps(body) if body is not None else body}",
            )
            response = await self._send(method, path, body)
            if response.success and self._has_content(response):
                logger.debug(f"Request successful: {response.data}")
                return response

            if attempt < retries:
                logger.info(
                    f"Retrying request. Retries left: {retries - attempt}, "
                    f"last error: {response.error}",
                )
                await asyncio.sleep(retry_interval)

        if response is None:
            logger.info("No response.")
            return GatewayResponse(success=False, error="No response")
        return response

    async def _is_up(self) -> bool:
        try:
            response = await self.request(
                "GET",
                self.health_path,
                retries=0,
            )
            return response.success
        except Exception as e:
            logger.error(f"Error checking API health: {e}")
            return False

    async def is_up(self, timeout_seconds: int = 30) -> bool:
        """
        Poll the service once per second until it answers.

        ``is_up(0)`` probes exactly once without sleeping.

        Raises:
            InvalidArgumentError: If ``timeout_seconds`` is negative.
        """
        if timeout_seconds < 0:
            raise InvalidArgumentError(
                "Timeout must be a non-negative number",
            )
        logger.info(
            f"Checking if server is up, timeout: {timeout_seconds} seconds",
        )
        remaining = timeout_seconds
        while True:
            if await self._is_up():
                return True
            if remaining <= 0:
                break
            remaining -= 1
            await asyncio.sleep(1)

        logger.info(
            f"Server is not up, even after waiting {timeout_seconds} seconds",
        )
        return False

    @staticmethod
    def _require_success(response: GatewayResponse, message: str):
        if not response.success:
            raise RemoteError(
                f"{message}: {response.error}",
                status_code=response.status_code,
            )

    @staticmethod
    def _to_map(response: GatewayResponse, message: str) -> dict:
        try:
            return to_map(response.data)
        except ValueError as e:
            raise RemoteError(
                f"{message}: {e}",
                status_code=response.status_code,
            ) from e

    async def get_agent_names(self, tag: Optional[str] = None) -> List[str]:
        """GET /api/agents, optionally filtered by tag on the server."""
        logger.info(f"Getting agent names for tag: {tag}")
        path = "/api/agents"
        if tag:
            path = f"{path}?tag={quote(tag, safe='')}"
        response = await self.request("GET", path)

        message = "Failed to get agents"
        self._require_success(response, message)
        agents = self._to_map(response, message).get("agents")
        if not isinstance(agents, (list, tuple)):
            return []
        return [str(agent) for agent in agents]

    async def get_agent_config(self, agent_name: str) -> AgentConfig:
        """GET /api/agents/<agent-name>"""
        logger.info(f"Getting agent config for agent: {agent_name}")
        response = await self.request(
            "GET",
            f"/api/agents/{quote(agent_name, safe='')}",
        )

        message = f"Failed to get agent {agent_name}"
        self._require_success(response, message)
        data = self._to_map(response, message).get("agent")
        try:
            return to_agent_config(data)
        except ValueError as e:
            raise RemoteError(f"{message}: {e}") from e

    async def create_task(
        self,
        task_config: Union[TaskConfig, dict],
    ) -> Optional[str]:
        """
        POST /api/tasks

        Not retried, so a slow answer cannot create the task twice.

        Returns:
            The id of the created task.
        """
        if isinstance(task_config, TaskConfig):
            payload = task_config.to_payload()
        else:
            payload = dict(task_config)
        logger.info(f"Creating task with data: {json.dumps(payload)}")
        response = await self.request(
            "POST",
            "/api/tasks",
            payload,
            retries=0,
        )

        message = "Failed to create task"
        self._require_success(response, message)
        task_id = self._to_map(response, message).get("id")
        return str(task_id) if task_id is not None else None

    async def get_tasks(self) -> List[Task]:
        """GET /api/tasks"""
        logger.info("Getting all tasks")
        response = await self.request("GET", "/api/tasks")

        message = "Failed to get tasks"
        self._require_success(response, message)
        tasks = self._to_map(response, message).get("tasks") or []
        try:
            return [to_task(task) for task in tasks]
        except (TypeError, ValueError) as e:
            raise RemoteError(f"{message}: {e}") from e

    async def get_task(self, task_id: str) -> Task:
        """GET /api/tasks/<task-id>"""
        logger.info(f"Getting task with ID: {task_id}")
        response = await self.request(
            "GET",
            f"/api/tasks/{quote(task_id, safe='')}",
        )

        message = f"Failed to get task {task_id}"
        self._require_success(response, message)
        try:
            return to_task(response.data)
        except ValueError as e:
            raise RemoteError(f"{message}: {e}") from e
