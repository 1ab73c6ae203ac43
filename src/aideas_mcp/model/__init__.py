# -*- coding: utf-8 -*-
from .api import AgentConfig, GatewayResponse, Task, TaskConfig
from .config import Settings, build_run_extras, get_settings
from .container import ContainerHandle, ContainerRunSpec, RuntimeStatus

__all__ = [
    "AgentConfig",
    "GatewayResponse",
    "Task",
    "TaskConfig",
    "Settings",
    "build_run_extras",
    "get_settings",
    "ContainerHandle",
    "ContainerRunSpec",
    "RuntimeStatus",
]
