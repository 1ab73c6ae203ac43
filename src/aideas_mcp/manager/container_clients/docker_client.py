# -*- coding: utf-8 -*-
import asyncio
import logging
import traceback
from typing import Optional

import docker
from dotenv import dotenv_values

from .base_client import BaseClient
from ...model import ContainerRunSpec


logger = logging.getLogger(__name__)


class DockerClient(BaseClient):
    """
    Docker implementation of the runtime client.

    The installation check shells out to ``docker --version``; everything
    else goes through the docker SDK, run in a worker thread.
    """

    def __init__(self, binary: str = "docker", stop_timeout: int = 10):
        self.binary = binary
        self.stop_timeout = stop_timeout
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = docker.from_env()
        return self._client

    async def is_installed(self) -> bool:
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            logger.error(f"Docker is not installed: {e}")
            return False

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            logger.error(
                f"Docker is not installed: {stderr.decode().strip()}",
            )
            return False
        logger.debug(stdout.decode().strip())
        return True

    async def is_daemon_up(self) -> bool:
        try:
            return bool(
                await asyncio.to_thread(lambda: self._get_client().ping()),
            )
        except docker.errors.DockerException as e:
            logger.error(f"Docker is not running: {e}")
            return False

    async def is_running(self, name: str) -> bool:
        try:
            containers = await asyncio.to_thread(
                self._get_client().containers.list,
                filters={"name": name, "status": "running"},
            )
        except docker.errors.DockerException as e:
            logger.error(f"Error checking container status: {e}")
            return False
        # The name filter matches substrings
        return any(container.name == name for container in containers)

    async def get_host_port(self, name: str) -> Optional[int]:
        try:
            container = await asyncio.to_thread(
                self._get_client().containers.get,
                name,
            )
        except docker.errors.DockerException as e:
            logger.error(f"Error inspecting container {name}: {e}")
            return None

        port_mapping = container.attrs["NetworkSettings"]["Ports"] or {}
        for _, mappings in port_mapping.items():
            if not mappings:
                continue
            for mapping in mappings:
                host_port = mapping.get("HostPort")
                if host_port:
                    return int(host_port)
        return None

    async def run(self, spec: ContainerRunSpec) -> bool:
        try:
            await asyncio.to_thread(self._run, spec)
            return True
        except Exception as e:
            logger.error(
                f"Error running container: {e}, {traceback.format_exc()}",
            )
            return False

    def _run(self, spec: ContainerRunSpec):
        client = self._get_client()
        self._ensure_image(spec.image)
        self._remove_stale(spec.name)

        environment = {}
        if spec.env_file:
            environment.update(
                {
                    k: v
                    for k, v in dotenv_values(spec.env_file).items()
                    if v is not None
                },
            )
        environment.update(spec.environment)

        runtime_config = dict(spec.extra)
        if spec.shm_size:
            runtime_config["shm_size"] = spec.shm_size

        ports = {f"{spec.port}/tcp": spec.port} if spec.port else None

        container = client.containers.run(
            spec.image,
            detach=True,
            name=spec.name,
            user=spec.user,
            ports=ports,
            volumes=[
                f"{host_path}:{container_path}"
                for host_path, container_path in spec.volumes.items()
            ],
            environment=environment,
            **runtime_config,
        )
        logger.info(f"Started container {spec.name} ({container.short_id})")

    def _ensure_image(self, image):
        client = self._get_client()
        try:
            client.images.get(image)
            logger.debug(f"Image '{image}' found locally.")
        except docker.errors.ImageNotFound:
            logger.info(
                f"Image '{image}' not found locally. Attempting to pull: "
                f"{image}, it might take several minutes.",
            )
            client.images.pull(image)
            logger.info(f"Image '{image}' successfully pulled.")

    def _remove_stale(self, name):
        """Remove a stopped container holding the name we need."""
        if not name:
            return
        client = self._get_client()
        try:
            container = client.containers.get(name)
        except docker.errors.NotFound:
            return
        if container.status != "running":
            logger.info(
                f"Removing stale container {name} "
                f"(status: {container.status})",
            )
            container.remove(force=True)

    async def stop(self, name: str) -> bool:
        try:
            await asyncio.to_thread(self._stop, name)
            return True
        except Exception as e:
            logger.error(
                f"Error stopping container {name}: {e}, "
                f"{traceback.format_exc()}",
            )
            return False

    def _stop(self, name):
        client = self._get_client()
        try:
            container = client.containers.get(name)
            container.stop(timeout=self.stop_timeout)
            container.remove()
        except docker.errors.NotFound:
            logger.debug(f"Container {name} is already gone.")
