# -*- coding: utf-8 -*-
import logging
import os
from typing import Optional

from dotenv import dotenv_values
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .container import ContainerRunSpec

logger = logging.getLogger(__name__)

# Environment variables with this prefix configure the server and are
# forwarded to the backing container.
ENV_PREFIX = "AIDEAS_"


class Settings(BaseSettings):
    """Orchestration settings, read from ``AIDEAS_*`` variables"""

    # Backing service container
    APP_PORT: int = 5001
    APP_VERSION: str = "0.3.4"
    APP_PROFILES: str = "default"
    IMAGE_NAME: Optional[str] = None
    CONTAINER_USER: str = "0"
    CONTAINER_SUFFIX: str = "-mcp-container"
    SETTLE_SECONDS: float = 1.0
    ENV_FILE: Optional[str] = None

    # HTTP client
    STARTUP_TIMEOUT: int = 30
    REQUEST_RETRIES: int = 2
    RETRY_INTERVAL: float = 5.0
    REQUEST_TIMEOUT: int = 60

    # Task store
    TASK_STORE_DIR: str = "storage.task-configs"
    TASK_TTL: int = 30 * 60

    # Redis settings
    REDIS_ENABLED: bool = False
    REDIS_SERVER: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_USER: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None
    REDIS_KEY_PREFIX: str = "aideas_mcp:task_configs"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_BUFFER_SIZE: int = 1000

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_settings(self):
        if not self.IMAGE_NAME:
            self.IMAGE_NAME = f"poshjosh/aideas:{self.APP_VERSION}"
        if self.TASK_TTL <= 0:
            raise ValueError("TASK_TTL must be a positive number of seconds")
        if self.REQUEST_RETRIES < 0:
            raise ValueError("REQUEST_RETRIES must not be negative")
        return self

    @property
    def runs_in_docker(self) -> bool:
        return "docker" in self.APP_PROFILES.lower()


_settings: Optional[Settings] = None


def _read_env_file(env_file: str) -> dict:
    if not os.path.isfile(env_file):
        raise ValueError(f"File not found: {env_file}")

    values = {}
    for key, value in dotenv_values(env_file).items():
        if value is None or key not in Settings.model_fields:
            continue
        # The process environment wins over the env file
        if f"{ENV_PREFIX}{key}" in os.environ:
            continue
        values[key] = value
    return values


def get_settings(
    config_file: Optional[str] = None,
    reload: bool = False,
) -> Settings:
    """
    Return the process-wide settings, creating them on first use.

    Values come from ``AIDEAS_*`` environment variables first, then from the
    un-prefixed keys of the dotenv file named by ``config_file`` or by
    ``AIDEAS_ENV_FILE``, then from the defaults.
    """
    global _settings

    if _settings is None or reload:
        env_file = config_file or os.getenv(f"{ENV_PREFIX}ENV_FILE")
        file_values = {}
        if env_file:
            file_values = _read_env_file(env_file)
            file_values["ENV_FILE"] = env_file
            logger.info(f"Read settings from: {env_file}")
        _settings = Settings(**file_values)
        logger.debug(str(_settings))
    return _settings


def build_run_extras(settings: Settings) -> ContainerRunSpec:
    """Default run options for the backing service container."""
    environment = {
        "APP_PROFILES": f"docker,{settings.APP_PROFILES}",
    }
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            environment[key] = value

    return ContainerRunSpec(
        volumes={
            os.path.join(os.path.expanduser("~"), ".aideas"): "/root/.aideas",
        },
        environment=environment,
        env_file=settings.ENV_FILE,
        shm_size="2g",
    )
