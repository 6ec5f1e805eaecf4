"""Shared state handed to every action handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from bdindex.actions.payload import Payload


class _Node(Protocol):
    def latest_height(self) -> int: ...


@dataclass
class Sources:
    """Where the handlers read chain data from."""

    bank_source: Any = None
    distr_source: Any = None
    staking_source: Any = None


@dataclass
class Context:
    """The node and data sources of an actions worker."""

    node: _Node
    sources: Sources

    def get_height(self, payload: Optional[Payload]) -> int:
        """Return the payload height, or the latest chain height if none is given."""
        if payload is None or payload.input.height == 0:
            try:
                return self.node.latest_height()
            except Exception as exc:
                raise RuntimeError(
                    f"error while getting chain latest block height: {exc}"
                ) from exc
        return payload.input.height