# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name, protected-access
import asyncio
from unittest.mock import patch

import pytest

from aideas_mcp.enums import ErrorCode
from aideas_mcp.manager import ContainerOrchestrator
from aideas_mcp.model import ContainerRunSpec

IMAGE = "acme/svc:1.2"
NAME = "acme-svc-mcp-container"


@pytest.fixture
def orchestrator(runtime_client) -> ContainerOrchestrator:
    return ContainerOrchestrator(runtime_client, settle_seconds=0)


@pytest.fixture
def free_ports():
    with patch(
        "aideas_mcp.manager.container_orchestrator.is_port_available",
        return_value=True,
    ):
        yield


@pytest.mark.asyncio
async def test_starts_container_on_preferred_port(
    orchestrator,
    runtime_client,
    free_ports,
):
    handle = await orchestrator.ensure_running(IMAGE, 5001)

    assert handle.name == NAME
    assert handle.port == 5001
    assert handle.endpoint == "http://localhost:5001"
    assert len(runtime_client.run_calls) == 1
    spec = runtime_client.run_calls[0]
    assert spec.image == IMAGE
    assert spec.name == NAME
    assert spec.port == 5001
    assert spec.environment["APP_PORT"] == "5001"
    assert spec.volumes["/var/run/docker.sock"] == "/var/run/docker.sock"
    assert spec.volumes["/etc/localtime"] == "/etc/localtime"


@pytest.mark.asyncio
async def test_ensure_running_is_idempotent(
    orchestrator,
    runtime_client,
    free_ports,
):
    first = await orchestrator.ensure_running(IMAGE, 5001)
    second = await orchestrator.ensure_running(IMAGE, 5001)

    assert first == second
    assert len(runtime_client.run_calls) == 1


@pytest.mark.asyncio
async def test_running_container_reports_its_published_port(
    orchestrator,
    runtime_client,
):
    runtime_client.running.add(NAME)
    runtime_client.ports[NAME] = 5004

    handle = await orchestrator.ensure_running(IMAGE, 5001)

    assert handle.port == 5004
    assert runtime_client.run_calls == []


@pytest.mark.asyncio
async def test_running_container_without_port_uses_preferred_port(
    orchestrator,
    runtime_client,
):
    runtime_client.running.add(NAME)

    handle = await orchestrator.ensure_running(IMAGE, 5001)

    assert handle.port == 5001


@pytest.mark.asyncio
async def test_occupied_port_falls_back_to_next_free_port(
    orchestrator,
    runtime_client,
):
    taken = {5001, 5002, 5003}
    with patch(
        "aideas_mcp.manager.container_orchestrator.is_port_available",
        side_effect=lambda port: port not in taken,
    ), patch(
        "aideas_mcp.manager.utils.is_port_available",
        side_effect=lambda port: port not in taken,
    ):
        handle = await orchestrator.ensure_running(IMAGE, 5001)

    assert handle.port == 5004
    spec = runtime_client.run_calls[0]
    assert spec.port == 5004
    assert spec.environment["APP_PORT"] == "5004"


@pytest.mark.asyncio
async def test_no_free_port(orchestrator, runtime_client):
    with patch(
        "aideas_mcp.manager.container_orchestrator.is_port_available",
        return_value=False,
    ), patch(
        "aideas_mcp.manager.container_orchestrator.find_available_port",
        return_value=None,
    ):
        handle = await orchestrator.ensure_running(IMAGE, 5001)

    assert handle is None
    assert runtime_client.run_calls == []
    assert orchestrator.last_failure(IMAGE) == ErrorCode.PORT_EXHAUSTED


@pytest.mark.asyncio
async def test_run_failure(orchestrator, runtime_client, free_ports):
    runtime_client.run_result = False

    assert await orchestrator.ensure_running(IMAGE, 5001) is None
    assert orchestrator.last_failure(IMAGE) == ErrorCode.START_FAILED


@pytest.mark.asyncio
async def test_container_exiting_right_after_start(
    orchestrator,
    runtime_client,
    free_ports,
):
    runtime_client.exits_after_start = True

    assert await orchestrator.ensure_running(IMAGE, 5001) is None
    assert len(runtime_client.run_calls) == 1
    assert orchestrator.last_failure(IMAGE) == ErrorCode.START_FAILED


@pytest.mark.asyncio
async def test_runtime_exception_is_reported_as_start_failure(
    orchestrator,
    runtime_client,
    free_ports,
):
    async def broken(_name):
        raise RuntimeError("daemon went away")

    runtime_client.is_running = broken

    assert await orchestrator.ensure_running(IMAGE, 5001) is None
    assert orchestrator.last_failure(IMAGE) == ErrorCode.START_FAILED


@pytest.mark.asyncio
async def test_success_clears_previous_failure(
    orchestrator,
    runtime_client,
    free_ports,
):
    runtime_client.run_result = False
    await orchestrator.ensure_running(IMAGE, 5001)
    runtime_client.run_result = True

    assert await orchestrator.ensure_running(IMAGE, 5001) is not None
    assert orchestrator.last_failure(IMAGE) is None


@pytest.mark.asyncio
async def test_concurrent_calls_start_a_single_container(
    orchestrator,
    runtime_client,
    free_ports,
):
    runtime_client.run_delay = 0.05

    handles = await asyncio.gather(
        *[orchestrator.ensure_running(IMAGE, 5001) for _ in range(5)],
    )

    assert len(runtime_client.run_calls) == 1
    assert all(handle.port == 5001 for handle in handles)


@pytest.mark.asyncio
async def test_address_by_name(runtime_client, free_ports):
    orchestrator = ContainerOrchestrator(
        runtime_client,
        settle_seconds=0,
        address_by_name=True,
    )
    handle = await orchestrator.ensure_running(IMAGE, 5001)
    assert handle.endpoint == f"http://{NAME}:5001"


@pytest.mark.asyncio
async def test_extras_from_cli_string(
    orchestrator,
    runtime_client,
    free_ports,
):
    await orchestrator.ensure_running(
        IMAGE,
        5001,
        "-v /data:/app/data -e MODE=test --shm-size=1g -e APP_PORT=1",
    )

    spec = runtime_client.run_calls[0]
    assert spec.volumes["/data"] == "/app/data"
    assert spec.volumes["/etc/localtime"] == "/etc/localtime"
    assert spec.environment["MODE"] == "test"
    assert spec.environment["APP_PORT"] == "5001"
    assert spec.shm_size == "1g"


@pytest.mark.asyncio
async def test_extras_cannot_override_identity(
    orchestrator,
    runtime_client,
    free_ports,
):
    await orchestrator.ensure_running(
        IMAGE,
        5001,
        ContainerRunSpec(image="other", name="other", port=9999, user="1000"),
    )

    spec = runtime_client.run_calls[0]
    assert spec.image == IMAGE
    assert spec.name == NAME
    assert spec.port == 5001
    assert spec.user == "1000"


@pytest.mark.asyncio
async def test_extras_from_dict(orchestrator, runtime_client, free_ports):
    await orchestrator.ensure_running(
        IMAGE,
        5001,
        {"environment": {"A": "1"}, "extra": {"network": "host"}},
    )

    spec = runtime_client.run_calls[0]
    assert spec.environment["A"] == "1"
    assert spec.extra == {"network": "host"}


@pytest.mark.asyncio
async def test_invalid_extras_are_a_start_failure(
    orchestrator,
    runtime_client,
    free_ports,
):
    assert await orchestrator.ensure_running(IMAGE, 5001, "--bogus x") is None
    assert runtime_client.run_calls == []
    assert orchestrator.last_failure(IMAGE) == ErrorCode.START_FAILED


@pytest.mark.asyncio
async def test_stop_without_running_container(orchestrator, runtime_client):
    assert await orchestrator.stop_and_remove(IMAGE) is True
    assert runtime_client.stop_calls == []


@pytest.mark.asyncio
async def test_stop_running_container(
    orchestrator,
    runtime_client,
    free_ports,
):
    await orchestrator.ensure_running(IMAGE, 5001)

    assert await orchestrator.stop_and_remove(IMAGE) is True
    assert runtime_client.stop_calls == [NAME]
    assert NAME not in runtime_client.running


@pytest.mark.asyncio
async def test_stop_reports_container_still_running(
    orchestrator,
    runtime_client,
):
    runtime_client.running.add(NAME)

    async def stop_ignored(name):
        runtime_client.stop_calls.append(name)
        return True

    runtime_client.stop = stop_ignored

    assert await orchestrator.stop_and_remove(IMAGE) is False
