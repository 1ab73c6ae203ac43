# -*- coding: utf-8 -*-
from .container_orchestrator import ContainerOrchestrator
from .runtime_probe import check_runtime_status
from .utils import (
    create_container_name,
    find_available_port,
    is_port_available,
)

__all__ = [
    "ContainerOrchestrator",
    "check_runtime_status",
    "create_container_name",
    "find_available_port",
    "is_port_available",
]
