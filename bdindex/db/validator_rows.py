"""Rows of the validator related tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from bdindex.db.coins import to_null_string

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_int64(value: str) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid integer value: {value!r}")
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"integer value out of range: {value!r}")
    return number


def _nullable(value: Optional[str]) -> Optional[str]:
    return None if value is None else to_null_string(value)


@dataclass
class ValidatorData:
    """All the stored data of a single validator."""

    consensus_address: str
    operator_address: str
    consensus_pubkey: str
    self_delegate_address: str
    max_rate: str
    max_change_rate: str
    height: int = 0

    def max_rate_dec(self) -> Decimal:
        """The max rate as a decimal; it must be stored as a whole number."""
        return Decimal(_parse_int64(self.max_rate))

    def max_change_rate_dec(self) -> Decimal:
        """The max change rate as a decimal; it must be stored as a whole number."""
        return Decimal(_parse_int64(self.max_change_rate))


@dataclass
class ValidatorRow:
    """A row of the validator table."""

    consensus_address: str
    consensus_pubkey: str


@dataclass
class ValidatorInfoRow:
    """A row of the validator_info table."""

    consensus_address: str
    operator_address: str
    self_delegate_address: str
    max_rate: str
    max_change_rate: str
    height: int


@dataclass
class ValidatorDescriptionRow:
    """A row of the validator_description table.

    Text fields are stripped and empty ones become None; the avatar URL is
    not part of equality.
    """

    validator_address: str
    moniker: Optional[str]
    identity: Optional[str]
    avatar_url: Optional[str] = field(compare=False)
    website: Optional[str]
    security_contact: Optional[str]
    details: Optional[str]
    height: int

    def __post_init__(self) -> None:
        self.moniker = _nullable(self.moniker)
        self.identity = _nullable(self.identity)
        self.avatar_url = _nullable(self.avatar_url)
        self.website = _nullable(self.website)
        self.security_contact = _nullable(self.security_contact)
        self.details = _nullable(self.details)


@dataclass
class ValidatorCommissionRow:
    """A row of the validator_commission table."""

    validator_address: str
    commission: Optional[str]
    min_self_delegation: Optional[str]
    height: int

    def __post_init__(self) -> None:
        self.commission = _nullable(self.commission)
        self.min_self_delegation = _nullable(self.min_self_delegation)


@dataclass
class ValidatorVotingPowerRow:
    """A row of the validator_voting_power table."""

    validator_address: str
    voting_power: int
    height: int


@dataclass
class ValidatorStatusRow:
    """A row of the validator_status table."""

    status: int
    jailed: bool
    tombstoned: bool
    validator_address: str
    height: int


@dataclass
class DoubleSignVoteRow:
    """A row of the double_sign_vote table."""

    id: int
    vote_type: int
    height: int
    round: int
    block_id: str
    validator_address: str
    validator_index: int
    signature: str


@dataclass
class DoubleSignEvidenceRow:
    """A row of the double_sign_evidence table."""

    height: int
    vote_a_id: int
    vote_b_id: int