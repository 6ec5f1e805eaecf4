"""Rows of the governance, price feed and slashing tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from bdindex.db.coins import DbCoins


@dataclass
class GovParamsRow:
    """The single row of the gov_params table."""

    deposit_params: str
    voting_params: str
    tally_params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class ProposalRow:
    """A row of the proposal table.

    The raw content is not part of equality.
    """

    proposal_id: int
    proposal_route: str
    proposal_type: str
    title: str
    description: str
    content: str = field(compare=False)
    submit_time: datetime
    deposit_end_time: datetime
    voting_start_time: datetime
    voting_end_time: datetime
    proposer: str
    status: str


@dataclass
class TallyResultRow:
    """A row of the proposal_tally_result table."""

    proposal_id: int
    yes: str
    abstain: str
    no: str
    no_with_veto: str
    height: int


@dataclass
class VoteRow:
    """A row of the proposal_vote table."""

    proposal_id: int
    voter: str
    option: str
    height: int


@dataclass
class DepositRow:
    """A row of the proposal_deposit table."""

    proposal_id: int
    depositor: str
    amount: DbCoins
    height: int


@dataclass
class ProposalStakingPoolSnapshotRow:
    """The staking pool as it was when a proposal entered voting."""

    proposal_id: int
    bonded_tokens: int
    not_bonded_tokens: int
    height: int


@dataclass
class ProposalValidatorVotingPowerSnapshotRow:
    """A validator's voting power as it was when a proposal entered voting."""

    id: int
    proposal_id: int
    validator_address: str
    voting_power: int
    status: int
    jailed: bool
    height: int


@dataclass
class TokenUnitRow:
    """A row of the token_unit table."""

    token_name: str
    denom: str
    exponent: int
    aliases: list[str] = field(default_factory=list)
    price_id: Optional[str] = None


@dataclass
class TokenRow:
    """A row of the token table."""

    name: str
    traded_unit: str


@dataclass
class TokenPriceRow:
    """A row of the token_price table.

    The row id is not part of equality.
    """

    name: str
    price: float
    market_cap: int
    timestamp: datetime
    id: str = field(default="", compare=False)


@dataclass
class ValidatorSigningInfoRow:
    """A row of the validator_signing_info table."""

    validator_address: str
    start_height: int
    index_offset: int
    jailed_until: datetime
    tombstoned: bool
    missed_blocks_counter: int
    height: int


@dataclass
class SlashingParamsRow:
    """The single row of the slashing_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)