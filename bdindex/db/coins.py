"""Coin values as they are stored in, and read back from, the database."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Iterable, Optional, Union

DEC_PRECISION = 18
_DEC_QUANTUM = Decimal(1).scaleb(-DEC_PRECISION)

Raw = Union[bytes, bytearray, str]


def format_dec(value: Union[Decimal, int, str]) -> str:
    """Render a decimal with exactly 18 fractional digits."""
    try:
        number = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal value: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"invalid decimal value: {value!r}")
    with localcontext() as ctx:
        ctx.prec = max(100, len(number.as_tuple().digits) + DEC_PRECISION + 2)
        quantized = number.quantize(_DEC_QUANTUM, rounding=ROUND_HALF_EVEN)
    if quantized == 0:
        quantized = abs(quantized)
    return f"{quantized:f}"


def to_string(value: Optional[str]) -> str:
    """Return the value of a nullable string, or an empty string for NULL."""
    return value if value is not None else ""


def to_null_string(value: str) -> Optional[str]:
    """Strip the value and turn an empty result into NULL."""
    value = value.strip()
    return value or None


def remove_empty(values: Iterable[str]) -> list[str]:
    """Drop the empty strings from the given values."""
    return [value for value in values if value != ""]


def _decode(raw: Raw) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode()
    if isinstance(raw, str):
        return raw
    raise TypeError(f"cannot parse coin value of type {type(raw).__name__}")


def _strip_markup(text: str, *, keep_separators: bool = False) -> str:
    for token in ('"', "{", "}"):
        text = text.replace(token, "")
    if keep_separators:
        text = text.replace("),(", ") (")
    return text.replace("(", "").replace(")", "")


def _split_pair(value: str) -> tuple[str, str]:
    parts = value.split(",")
    if len(parts) < 2:
        raise ValueError(f"invalid coin value: {value!r}")
    return parts[0], parts[1]


@dataclass(frozen=True)
class Coin:
    """A whole-number amount of a denomination."""

    denom: str
    amount: int


@dataclass(frozen=True)
class DecCoin:
    """A decimal amount of a denomination."""

    denom: str
    amount: Decimal


@dataclass(frozen=True)
class DbCoin:
    """A single coin as stored inside the database."""

    denom: str
    amount: str

    @classmethod
    def from_coin(cls, coin: Coin) -> DbCoin:
        return cls(denom=coin.denom, amount=str(coin.amount))

    def to_sql(self) -> str:
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, raw: Raw) -> DbCoin:
        denom, amount = _split_pair(_strip_markup(_decode(raw)))
        return cls(denom=denom, amount=amount)

    def to_coin(self) -> Coin:
        try:
            amount = int(self.amount)
        except ValueError as exc:
            raise ValueError(f"invalid coin amount: {self.amount!r}") from exc
        return Coin(denom=self.denom, amount=amount)


class DbCoins(list):
    """An ordered list of DbCoin values."""

    @classmethod
    def from_coins(cls, coins: Iterable[Coin]) -> DbCoins:
        return cls(DbCoin.from_coin(coin) for coin in coins)

    @classmethod
    def parse(cls, raw: Raw) -> DbCoins:
        text = _strip_markup(_decode(raw), keep_separators=True)
        return cls(
            DbCoin(*_split_pair(value)) for value in remove_empty(text.split(" "))
        )

    def to_coins(self) -> list[Coin]:
        return [coin.to_coin() for coin in self]


@dataclass(frozen=True)
class DbDecCoin:
    """A single decimal coin as stored inside the database."""

    denom: str
    amount: str

    @classmethod
    def from_dec_coin(cls, coin: DecCoin) -> DbDecCoin:
        return cls(denom=coin.denom, amount=format_dec(coin.amount))

    def to_sql(self) -> str:
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, raw: Raw) -> DbDecCoin:
        denom, amount = _split_pair(_strip_markup(_decode(raw)))
        return cls(denom=denom, amount=amount)

    def to_dec_coin(self) -> DecCoin:
        try:
            amount = Decimal(self.amount)
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal amount: {self.amount!r}") from exc
        if not amount.is_finite():
            raise ValueError(f"invalid decimal amount: {self.amount!r}")
        return DecCoin(denom=self.denom, amount=amount)


class DbDecCoins(list):
    """An ordered list of DbDecCoin values."""

    @classmethod
    def from_dec_coins(cls, coins: Iterable[DecCoin]) -> DbDecCoins:
        return cls(DbDecCoin.from_dec_coin(coin) for coin in coins)

    @classmethod
    def parse(cls, raw: Raw) -> DbDecCoins:
        text = _strip_markup(_decode(raw), keep_separators=True)
        return cls(
            DbDecCoin(*_split_pair(value)) for value in remove_empty(text.split(" "))
        )

    def to_dec_coins(self) -> list[DecCoin]:
        return [coin.to_dec_coin() for coin in self]