"""Response bodies returned by the actions service."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from bdindex.db import coins as dbcoins
from bdindex.db.coins import format_dec

_OMIT_EMPTY = {"omitempty": True}
_AS_STRING = {"string": True}


@dataclass
class Coin:
    """An amount of a denomination, with the amount written as a string."""

    amount: str
    denom: str


def convert_coins(coins: Iterable[dbcoins.Coin]) -> list[Coin]:
    """Turn whole-number coins into response coins."""
    return [Coin(amount=str(coin.amount), denom=coin.denom) for coin in coins]


def convert_dec_coins(coins: Iterable[dbcoins.DecCoin]) -> list[Coin]:
    """Turn decimal coins into response coins with 18 fractional digits."""
    return [Coin(amount=format_dec(coin.amount), denom=coin.denom) for coin in coins]


@dataclass
class Address:
    address: str


@dataclass
class Balance:
    coins: list[Coin]


@dataclass
class PageResponse:
    """Pagination data of a query result."""

    next_key: bytes = field(default=b"", metadata=_OMIT_EMPTY)
    total: int = field(default=0, metadata=_OMIT_EMPTY)


@dataclass
class Delegation:
    delegator_address: str
    validator_address: str
    coins: list[Coin]


@dataclass
class DelegationResponse:
    delegations: list[Delegation]
    pagination: Optional[PageResponse] = None


@dataclass
class DelegationReward:
    coins: list[Coin]
    validator_address: str


@dataclass
class ValidatorCommissionAmount:
    coins: list[Coin]


@dataclass
class UnbondingDelegationEntry:
    """A single entry of an unbonding delegation."""

    creation_height: int = field(metadata=_OMIT_EMPTY)
    completion_time: datetime
    initial_balance: int = field(metadata=_AS_STRING)
    balance: int = field(metadata=_AS_STRING)


@dataclass
class UnbondingDelegation:
    delegator_address: str
    validator_address: str
    entries: list[UnbondingDelegationEntry]


@dataclass
class UnbondingDelegationResponse:
    unbonding_delegations: list[UnbondingDelegation]
    pagination: Optional[PageResponse] = None


@dataclass
class RedelegationEntry:
    completion_time: datetime
    balance: int = field(metadata=_AS_STRING)


@dataclass
class Redelegation:
    delegator_address: str
    validator_src_address: str
    validator_dst_address: str
    entries: list[RedelegationEntry] = field(default_factory=list)


@dataclass
class RedelegationResponse:
    redelegations: list[Redelegation]
    pagination: Optional[PageResponse] = None


@dataclass
class GraphQLError:
    message: str


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    seconds = int(offset.total_seconds())
    sign = "+" if seconds >= 0 else "-"
    seconds = abs(seconds)
    return text + f"{sign}{seconds // 3600:02d}:{seconds % 3600 // 60:02d}"


def to_jsonable(value: Any) -> Any:
    """Turn a response value into plain JSON data.

    Bytes become base64 text, datetimes RFC 3339 text, and exceptions an
    empty object; anything else that JSON cannot hold raises TypeError.
    """
    if value is None or isinstance(value, (bool, str, int, float)):
        return value
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, BaseException):
        return {}
    if is_dataclass(value) and not isinstance(value, type):
        result: dict[str, Any] = {}
        for item in fields(value):
            current = getattr(value, item.name)
            if item.metadata.get("omitempty") and not current:
                continue
            if item.metadata.get("string"):
                result[item.name] = str(current)
            else:
                result[item.name] = to_jsonable(current)
        return result
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    raise TypeError(f"cannot encode value of type {type(value).__name__} as JSON")