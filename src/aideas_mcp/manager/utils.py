# -*- coding: utf-8 -*-
import asyncio
import logging
import socket
from typing import Optional

logger = logging.getLogger(__name__)

MAX_PORT = 65535
CONTAINER_SUFFIX = "-mcp-container"


def create_container_name(
    image_name: str,
    suffix: str = CONTAINER_SUFFIX,
) -> str:
    """
    Derive the container name from a docker image name.

    The version tag is dropped and every ``/`` is replaced with ``-``, e.g.
    ``acme/svc:1.2`` -> ``acme-svc-mcp-container``.
    """
    name_without_version = image_name.split(":")[0]
    return f"{name_without_version.replace('/', '-')}{suffix}"


def is_port_available(port):
    """
    Check if a given port is available (not in use) on the local system.

    Args:
        port (int): The port number to check.

    Returns:
        bool: True if the port is available, False if it is in use.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind(("", port))
            return True
        except OSError:
            return False


async def find_available_port(
    start_port: int,
    max_port: int = MAX_PORT,
) -> Optional[int]:
    """
    Find the lowest available port in ``[start_port, max_port]``.

    Returns:
        The first available port, or None if every port in range is taken.
    """
    max_port = min(max_port, MAX_PORT)
    for port in range(start_port, max_port + 1):
        if is_port_available(port):
            return port
        # Let other tasks run during long scans
        await asyncio.sleep(0)
    return None
