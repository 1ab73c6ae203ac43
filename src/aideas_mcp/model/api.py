# -*- coding: utf-8 -*-
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import TaskStatus


class GatewayResponse(BaseModel):
    """Normalized outcome of a single call to the backing service."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class AgentConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    agent_type: Optional[str] = Field(None, alias="agent-type")
    agent_tags: Optional[str] = Field(None, alias="agent-tags")
    sort_order: int = Field(0, alias="sort-order")
    stages: Dict[str, Any] = Field(default_factory=dict)


class TaskConfig(BaseModel):
    """Request body of ``POST /api/tasks``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    agents: List[str] = Field(
        ...,
        description="Names of the agents to run",
    )
    tag: Optional[str] = None
    language_codes: Optional[str] = Field(
        None,
        alias="language-codes",
        description="Language codes, e.g. 'en' or 'en,es,fr'",
    )
    text_file: Optional[str] = Field(None, alias="text-file")
    text_title: Optional[str] = Field(None, alias="text-title")
    text_content: Optional[str] = Field(None, alias="text-content")
    image_file_landscape: Optional[str] = Field(
        None,
        alias="image-file-landscape",
    )
    image_file_square: Optional[str] = Field(
        None,
        alias="image-file-square",
    )
    share_cover_image: Optional[bool] = Field(
        None,
        alias="share-cover-image",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Task(BaseModel):
    id: Optional[str] = None
    agents: List[str] = Field(default_factory=list)
    links: Dict[str, Any] = Field(default_factory=dict)
    progress: Dict[str, Any] = Field(default_factory=dict)
    status: TaskStatus = TaskStatus.PENDING
