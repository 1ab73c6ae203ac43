# -*- coding: utf-8 -*-
import os
import shlex
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import RuntimeStatusReason


class ContainerHandle(BaseModel):
    """A container believed to be running; re-verified on every request."""

    name: str = Field(
        ...,
        description="Container name derived from the image name",
    )
    port: int = Field(
        ...,
        description="Host port the backing service is published on",
        ge=1,
        le=65535,
    )
    host: str = Field(
        "localhost",
        description="Host at which the published port is reachable",
    )

    @property
    def endpoint(self) -> str:
        return f"http://{self.host}:{self.port}"


class RuntimeStatus(BaseModel):
    ok: bool
    reason: RuntimeStatusReason
    message: str


class ContainerRunSpec(BaseModel):
    """Options for starting a detached container."""

    model_config = ConfigDict(extra="forbid")

    image: Optional[str] = None
    name: Optional[str] = None
    port: Optional[int] = Field(
        None,
        description="Published as <port>:<port>",
    )
    user: str = "0"
    volumes: Dict[str, str] = Field(
        default_factory=dict,
        description="host_path -> container_path",
    )
    environment: Dict[str, str] = Field(default_factory=dict)
    env_file: Optional[str] = None
    shm_size: Optional[str] = None
    extra: Dict[str, Any] = Field(
        default_factory=dict,
        description="Passed as keyword arguments to the runtime's run call",
    )

    def merge(self, other: Optional["ContainerRunSpec"]) -> "ContainerRunSpec":
        """Return a copy where values set on ``other`` take precedence."""
        if other is None:
            return self.model_copy(deep=True)
        merged = self.model_copy(deep=True)
        for field_name in other.model_fields_set:
            value = getattr(other, field_name)
            if isinstance(value, dict):
                getattr(merged, field_name).update(value)
            else:
                setattr(merged, field_name, value)
        return merged

    @classmethod
    def from_cli_args(cls, args: Optional[str]) -> "ContainerRunSpec":
        """
        Parse docker-CLI style run options.

        Supported flags: ``-v/--volume``, ``-e/--env``, ``--env-file``,
        ``--shm-size`` and ``-u/--user``. Both ``--flag value`` and
        ``--flag=value`` forms are accepted.

        Raises:
            ValueError: On an unsupported flag or a missing flag value.
        """
        if not args or not args.strip():
            return cls()

        values: Dict[str, Any] = {"volumes": {}, "environment": {}}

        tokens = shlex.split(args)
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if "=" in token and token.startswith("--"):
                flag, value = token.split("=", 1)
            else:
                flag = token
                i += 1
                if i >= len(tokens):
                    raise ValueError(f"Missing value for option: {flag}")
                value = tokens[i]

            if flag in ("-v", "--volume"):
                host_path, sep, container_path = value.partition(":")
                if not sep or not container_path:
                    raise ValueError(f"Invalid volume: {value}")
                values["volumes"][host_path] = container_path
            elif flag in ("-e", "--env"):
                key, sep, env_value = value.partition("=")
                if not sep:
                    env_value = os.environ.get(key, "")
                values["environment"][key] = env_value
            elif flag == "--env-file":
                values["env_file"] = value
            elif flag == "--shm-size":
                values["shm_size"] = value
            elif flag in ("-u", "--user"):
                values["user"] = value
            else:
                raise ValueError(f"Unsupported container run option: {flag}")
            i += 1
        return cls(**values)
