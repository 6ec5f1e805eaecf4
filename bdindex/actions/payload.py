"""Request payloads sent to the actions service."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

_INT64_RANGE = (-(2**63), 2**63 - 1)
_UINT64_RANGE = (0, 2**64 - 1)

_ARG_FIELDS = {
    "address": "str",
    "height": "int64",
    "offset": "uint64",
    "limit": "uint64",
    "count_total": "bool",
}
_PAYLOAD_FIELDS = ("session_variables", "input")


@dataclass(frozen=True)
class PageRequest:
    """Pagination of a query."""

    offset: int = 0
    limit: int = 0
    count_total: bool = False


@dataclass
class PayloadArgs:
    """The input arguments of an action."""

    address: str = ""
    height: int = 0
    offset: int = 0
    limit: int = 0
    count_total: bool = False


def _field_for(key: str, names) -> Optional[str]:
    if key in names:
        return key
    folded = key.casefold()
    for name in names:
        if name.casefold() == folded:
            return name
    return None


def _convert(name: str, kind: str, raw: Any) -> Any:
    if kind == "str":
        if not isinstance(raw, str):
            raise ValueError(f"invalid payload: {name} must be a string")
        return raw
    if kind == "bool":
        if not isinstance(raw, bool):
            raise ValueError(f"invalid payload: {name} must be a boolean")
        return raw
    low, high = _INT64_RANGE if kind == "int64" else _UINT64_RANGE
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"invalid payload: {name} must be an integer")
    if not low <= raw <= high:
        raise ValueError(f"invalid payload: {name} is out of range")
    return raw


def _parse_args(obj: Any) -> PayloadArgs:
    if obj is None:
        return PayloadArgs()
    if not isinstance(obj, dict):
        raise ValueError("invalid payload: input must be an object")
    values: dict[str, Any] = {}
    for key, raw in obj.items():
        name = _field_for(key, _ARG_FIELDS)
        if name is None or raw is None:
            continue
        values[name] = _convert(name, _ARG_FIELDS[name], raw)
    return PayloadArgs(**values)


@dataclass
class Payload:
    """The body of an action request."""

    session_variables: dict[str, Any] = field(default_factory=dict)
    input: PayloadArgs = field(default_factory=PayloadArgs)

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> Payload:
        """Decode a JSON request body; raises ValueError if it is not valid."""
        try:
            document = json.loads(data)
        except ValueError as exc:
            raise ValueError(f"invalid payload: {exc}") from exc
        if document is None:
            return cls()
        if not isinstance(document, dict):
            raise ValueError("invalid payload: expected an object")

        payload = cls()
        for key, raw in document.items():
            name = _field_for(key, _PAYLOAD_FIELDS)
            if name is None or raw is None:
                continue
            if name == "input":
                payload.input = _parse_args(raw)
            else:
                if not isinstance(raw, dict):
                    raise ValueError("invalid payload: session_variables must be an object")
                payload.session_variables = raw
        return payload

    @property
    def address(self) -> str:
        """The address the action refers to, if any."""
        return self.input.address

    @property
    def pagination(self) -> PageRequest:
        """The pagination requested with this payload."""
        return PageRequest(
            offset=self.input.offset,
            limit=self.input.limit,
            count_total=self.input.count_total,
        )