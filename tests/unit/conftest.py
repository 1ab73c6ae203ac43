# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
import asyncio

import pytest

from aideas_mcp.manager.container_clients import BaseClient


class FakeRuntimeClient(BaseClient):
    """In-memory container runtime recording every run and stop."""

    def __init__(self):
        self.installed = True
        self.daemon_up = True
        self.run_result = True
        self.exits_after_start = False
        self.run_delay = 0.0
        self.running = set()
        self.ports = {}
        self.run_calls = []
        self.stop_calls = []

    async def is_installed(self) -> bool:
        return self.installed

    async def is_daemon_up(self) -> bool:
        return self.daemon_up

    async def is_running(self, name: str) -> bool:
        return name in self.running

    async def get_host_port(self, name: str):
        return self.ports.get(name)

    async def run(self, spec) -> bool:
        self.run_calls.append(spec)
        await asyncio.sleep(self.run_delay)
        if not self.run_result:
            return False
        if not self.exits_after_start:
            self.running.add(spec.name)
            self.ports[spec.name] = spec.port
        return True

    async def stop(self, name: str) -> bool:
        self.stop_calls.append(name)
        self.running.discard(name)
        self.ports.pop(name, None)
        return True


@pytest.fixture
def runtime_client() -> FakeRuntimeClient:
    return FakeRuntimeClient()
