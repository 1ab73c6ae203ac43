# -*- coding: utf-8 -*-
from .log_buffer import LogBuffer, setup_logging

__all__ = ["LogBuffer", "setup_logging"]
