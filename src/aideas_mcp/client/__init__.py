# -*- coding: utf-8 -*-
from .http_client import AideasHttpClient

__all__ = ["AideasHttpClient"]
