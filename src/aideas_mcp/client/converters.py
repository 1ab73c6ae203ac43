# -*- coding: utf-8 -*-
"""
Coercion of loosely-typed JSON from the backing service into entities.

The remote schema is not guaranteed to be complete, so every expected
field falls back to a default instead of failing:

=============  ==============  ===========================================
Entity         Field           Default
=============  ==============  ===========================================
AgentConfig    agent-type      None
AgentConfig    agent-tags      None (a list is joined with ``,``)
AgentConfig    sort-order      0
AgentConfig    stages          {}
Task           id              None
Task           agents          []
Task           links           {}
Task           progress        {}
Task           status          PENDING (also for unknown values)
=============  ==============  ===========================================
"""
from collections.abc import Mapping
from typing import Any, Dict, Optional

from ..enums import TaskStatus
from ..model import AgentConfig, Task


def to_map(data: Any) -> Dict[str, Any]:
    """
    Coerce ``data`` into a dict.

    Raises:
        ValueError: If ``data`` is neither empty nor a mapping.
    """
    if not data:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    raise ValueError(
        f"Data cannot be converted to Map - type: {type(data).__name__} "
        f"is not object: {data!r}",
    )


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def to_agent_config(data: Any) -> AgentConfig:
    m = to_map(data)
    return AgentConfig(
        agent_type=_as_str(m.get("agent-type")),
        agent_tags=_as_str(m.get("agent-tags")),
        sort_order=_as_int(m.get("sort-order"), 0),
        stages=_as_dict(m.get("stages")),
    )


def to_task(data: Any) -> Task:
    m = to_map(data)
    return Task(
        id=_as_str(m.get("id")),
        agents=[str(agent) for agent in _as_list(m.get("agents"))],
        links=_as_dict(m.get("links")),
        progress=_as_dict(m.get("progress")),
        status=TaskStatus.parse(m.get("status"), TaskStatus.PENDING),
    )
