# -*- coding: utf-8 -*-
from .base_client import BaseClient
from .docker_client import DockerClient

__all__ = [
    "BaseClient",
    "DockerClient",
]
