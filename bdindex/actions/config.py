"""Configuration of the actions service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import yaml

DEFAULT_PORT = 3000
_MAX_PORT_VALUE = 2**64 - 1


@dataclass
class NodeDetails:
    """Connection settings of a remote node the actions should query."""

    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionsConfig:
    """Port the actions are served on and, optionally, the node they query."""

    port: int
    node: Optional[NodeDetails] = None


def default_config() -> ActionsConfig:
    """Return the configuration used when none is given."""
    return ActionsConfig(port=DEFAULT_PORT, node=None)


def _parse_port(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid actions port: {value!r}")
    if not 0 <= value <= _MAX_PORT_VALUE:
        raise ValueError(f"invalid actions port: {value!r}")
    return value


def _parse_node(value: Any) -> Optional[NodeDetails]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError("invalid actions node: expected a mapping")
    return NodeDetails(settings=dict(value))


def parse_config(data: Union[bytes, str]) -> Optional[ActionsConfig]:
    """Read the "actions" section of a YAML document.

    Returns None when the document has no such section.
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid actions configuration: {exc}") from exc

    if document is None:
        return None
    if not isinstance(document, dict):
        raise ValueError("invalid actions configuration: expected a mapping")

    section = document.get("actions")
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ValueError("invalid actions configuration: expected a mapping")

    return ActionsConfig(
        port=_parse_port(section.get("port")),
        node=_parse_node(section.get("node")),
    )