# -*- coding: utf-8 -*-
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Annotated, Any, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .exception import AideasException
from .model import TaskConfig, get_settings
from .services import AideasService
from .utils import LogBuffer, setup_logging

logger = logging.getLogger(__name__)

SERVER_NAME = "automate-idea-to-social-mcp"

LOGS_HEADER = "- - - - - - - - - - logs - - - - - - - - - -"
LOGS_FOOTER = "- - - - - - - - - - - - - - - - - - - - - - -"


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2)


class AideasTools:
    """
    Implementation of the MCP tools.

    Tools return pretty-printed JSON. Failures raise :class:`ToolError`
    carrying the error message and the logs of the failed call, which the
    MCP server reports as an ``isError`` result.
    """

    def __init__(self, service: AideasService, log_buffer: LogBuffer):
        self.service = service
        self.log_buffer = log_buffer

    def with_logs(self, message: str) -> str:
        logs = self.log_buffer.get_logs()
        return "\n".join([message, LOGS_HEADER, *logs, LOGS_FOOTER])

    def _fail(self, message: str, error: Exception) -> ToolError:
        if isinstance(error, AideasException):
            detail = error.message
        else:
            detail = str(error)
        logger.error(f"{message}: {error}")
        return ToolError(self.with_logs(f"{message}: {detail}"))

    async def list_agents(self, filter_by_tag: Optional[str] = None) -> str:
        self.log_buffer.clear()
        try:
            agents = await self.service.list_agents(filter_by_tag)
        except Exception as e:
            raise self._fail("Error listing agents", e) from e
        return _to_json(
            {
                "agents": agents,
                "total": len(agents),
                "filter_applied": filter_by_tag,
            },
        )

    async def get_agent_config(self, agent_name: str) -> str:
        self.log_buffer.clear()
        try:
            config = await self.service.get_agent_config(agent_name)
        except Exception as e:
            raise self._fail(
                f"Error getting config for agent '{agent_name}'",
                e,
            ) from e
        return _to_json(config.model_dump(mode="json", by_alias=True))

    async def create_automation_task(
        self,
        agents: List[str],
        text_content: Optional[str] = None,
        text_title: Optional[str] = None,
        language_codes: Optional[str] = None,
        image_file_landscape: Optional[str] = None,
        image_file_square: Optional[str] = None,
        share_cover_image: bool = True,
    ) -> str:
        self.log_buffer.clear()
        try:
            task_config = TaskConfig(
                agents=agents or [],
                text_content=text_content,
                text_title=text_title,
                language_codes=language_codes,
                image_file_landscape=image_file_landscape,
                image_file_square=image_file_square,
                share_cover_image=share_cover_image,
            )
            task_id = await self.service.create_task(task_config)
        except Exception as e:
            raise self._fail("Error creating automation task", e) from e
        return _to_json(
            {
                "task_id": task_id,
                "status": "PENDING",
                "agents": task_config.agents,
                "message": "Task created and started",
            },
        )

    async def get_task_status(self, task_id: str) -> str:
        self.log_buffer.clear()
        try:
            task = await self.service.get_task(task_id)
        except Exception as e:
            raise self._fail(
                f"Error getting status of task '{task_id}'",
                e,
            ) from e
        return _to_json(task.model_dump(mode="json"))

    async def list_tasks(self, filter_by_status: Optional[str] = None) -> str:
        self.log_buffer.clear()
        try:
            tasks = await self.service.list_tasks(filter_by_status)
        except Exception as e:
            raise self._fail("Error listing tasks", e) from e
        return _to_json(
            {
                "tasks": [task.model_dump(mode="json") for task in tasks],
                "total": len(tasks),
                "filter_applied": filter_by_status,
            },
        )

    async def validate_setup(self) -> str:
        self.log_buffer.clear()
        status = await self.service.validate_setup()
        text = _to_json(
            {"setup": {"valid": status.ok, "reason": status.message}},
        )
        if not status.ok:
            raise ToolError(self.with_logs(text))
        return text

    async def get_logs(self) -> str:
        logs = self.log_buffer.get_logs()
        return _to_json({"logs": logs, "total": len(logs)})


def create_mcp_server(
    service: AideasService,
    log_buffer: LogBuffer,
) -> FastMCP:
    """Create the MCP server with all tools bound to ``service``."""
    mcp = FastMCP(SERVER_NAME)
    tools = AideasTools(service, log_buffer)

    @mcp.tool(
        name="list_agents",
        description="List the available automation agents.",
    )
    async def list_agents(
        filter_by_tag: Annotated[
            Optional[str],
            Field(description="Only list agents having this tag"),
        ] = None,
    ) -> str:
        return await tools.list_agents(filter_by_tag)

    @mcp.tool(
        name="get_agent_config",
        description="Get the configuration of an agent.",
    )
    async def get_agent_config(
        agent_name: Annotated[str, Field(description="Name of the agent")],
    ) -> str:
        return await tools.get_agent_config(agent_name)

    @mcp.tool(
        name="create_automation_task",
        description=(
            "Create and start a task which runs the given agents on the "
            "given content, e.g. to publish it to social media."
        ),
    )
    async def create_automation_task(
        agents: Annotated[
            List[str],
            Field(description="Names of the agents to run"),
        ],
        text_content: Annotated[
            Optional[str],
            Field(description="Text content to process"),
        ] = None,
        text_title: Annotated[
            Optional[str],
            Field(description="Title of the content"),
        ] = None,
        language_codes: Annotated[
            Optional[str],
            Field(description="Language codes, e.g. 'en' or 'en,es,fr'"),
        ] = None,
        image_file_landscape: Annotated[
            Optional[str],
            Field(description="Path to a landscape image file"),
        ] = None,
        image_file_square: Annotated[
            Optional[str],
            Field(description="Path to a square image file"),
        ] = None,
        share_cover_image: Annotated[
            bool,
            Field(description="Whether to share the cover image"),
        ] = True,
    ) -> str:
        return await tools.create_automation_task(
            agents,
            text_content=text_content,
            text_title=text_title,
            language_codes=language_codes,
            image_file_landscape=image_file_landscape,
            image_file_square=image_file_square,
            share_cover_image=share_cover_image,
        )

    @mcp.tool(
        name="get_task_status",
        description="Get the status and progress of a task.",
    )
    async def get_task_status(
        task_id: Annotated[str, Field(description="ID of the task")],
    ) -> str:
        return await tools.get_task_status(task_id)

    @mcp.tool(name="list_tasks", description="List automation tasks.")
    async def list_tasks(
        filter_by_status: Annotated[
            Optional[str],
            Field(
                description=(
                    "Only list tasks with this status, e.g. RUNNING or "
                    "SUCCESS"
                ),
            ),
        ] = None,
    ) -> str:
        return await tools.list_tasks(filter_by_status)

    @mcp.tool(
        name="validate_setup",
        description="Check that Docker is installed and running.",
    )
    async def validate_setup() -> str:
        return await tools.validate_setup()

    @mcp.tool(
        name="get_logs",
        description="Get the logs of the most recent tool call.",
    )
    async def get_logs() -> str:
        return await tools.get_logs()

    return mcp


def _exit_on_signal(signum, _frame):
    logger.info(f"Received signal {signum}, shutting down")
    sys.exit(0)


def main():
    parser = argparse.ArgumentParser(
        description="Run the automate-idea-to-social MCP Server.",
    )
    parser.add_argument(
        "--config-file",
        required=False,
        default=None,
        help="Path to a dotenv file with AIDEAS settings",
    )
    parser.add_argument(
        "--transport",
        required=False,
        default="stdio",
        choices=["stdio", "sse", "streamable-http"],
        help="Transport of the MCP server",
    )

    args = parser.parse_args()

    settings = get_settings(args.config_file)
    log_buffer = LogBuffer(capacity=settings.LOG_BUFFER_SIZE)
    setup_logging(settings.LOG_LEVEL, log_buffer)

    service = AideasService(settings)
    mcp = create_mcp_server(service, log_buffer)

    signal.signal(signal.SIGTERM, _exit_on_signal)

    logger.info(f"Running {SERVER_NAME} over {args.transport}")
    try:
        asyncio.run(service.start())
        mcp.run(transport=args.transport)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        # The server's event loop is gone, so only the container is cleaned
        asyncio.run(service.remove_backing_service())


if __name__ == "__main__":
    main()
