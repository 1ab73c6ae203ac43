# -*- coding: utf-8 -*-
from .base_mapping import TTLMapping
from .local_ttl_mapping import LocalTTLMapping
from .redis_ttl_mapping import RedisTTLMapping

__all__ = [
    "TTLMapping",
    "LocalTTLMapping",
    "RedisTTLMapping",
]
