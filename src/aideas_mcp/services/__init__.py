# -*- coding: utf-8 -*-
from .base import Service, ServiceWithLifecycleManager
from .aideas_service import AideasService, create_task_store

__all__ = [
    "Service",
    "ServiceWithLifecycleManager",
    "AideasService",
    "create_task_store",
]
