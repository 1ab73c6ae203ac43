# -*- coding: utf-8 -*-
import logging

from .container_clients import BaseClient
from ..enums import RuntimeStatusReason
from ..model import RuntimeStatus

logger = logging.getLogger(__name__)

NOT_INSTALLED_MESSAGE = (
    "Docker is not installed on this system. "
    "Please install Docker to continue."
)
NOT_RUNNING_MESSAGE = (
    "Docker is installed but not running. Please start the Docker daemon "
    "(try: sudo systemctl start docker or sudo service docker start)."
)
OK_MESSAGE = "Docker is installed and running successfully."


async def check_runtime_status(client: BaseClient) -> RuntimeStatus:
    """
    Check that the container runtime is installed and its daemon is up.

    Never raises: unexpected errors are reported with reason ``UNEXPECTED``.
    """
    try:
        if not await client.is_installed():
            return RuntimeStatus(
                ok=False,
                reason=RuntimeStatusReason.NOT_INSTALLED,
                message=NOT_INSTALLED_MESSAGE,
            )

        if not await client.is_daemon_up():
            return RuntimeStatus(
                ok=False,
                reason=RuntimeStatusReason.NOT_RUNNING,
                message=NOT_RUNNING_MESSAGE,
            )

        return RuntimeStatus(
            ok=True,
            reason=RuntimeStatusReason.OK,
            message=OK_MESSAGE,
        )
    except Exception as e:
        logger.error(f"Unexpected error while checking Docker status: {e}")
        return RuntimeStatus(
            ok=False,
            reason=RuntimeStatusReason.UNEXPECTED,
            message=f"Unexpected error while checking Docker status: {e}",
        )
