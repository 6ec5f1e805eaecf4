"""Rows of the general purpose database tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from bdindex.db.coins import DbCoins, DbDecCoins


@dataclass
class AccountRow:
    """A row of the account table."""

    address: str


@dataclass
class GenesisRow:
    """The single row of the genesis table."""

    chain_id: str
    time: datetime
    initial_height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class ConsensusRow:
    """The single row of the consensus table."""

    height: int
    round: int
    step: str
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class AverageTimeRow:
    """The average block time over a period."""

    average_time: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class BlockRow:
    """A block stored inside the database."""

    height: int
    hash: str
    tx_num: int
    total_gas: int
    proposer_address: Optional[str]
    pre_commits_num: int
    timestamp: datetime


@dataclass
class DistributionParamsRow:
    """The single row of the distribution_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class CommunityPoolRow:
    """The single row of the community_pool table."""

    coins: DbDecCoins
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class FeeAllowanceRow:
    """A row of the fee_grant_allowance table."""

    id: int
    grantee: str
    granter: str
    allowance: str
    height: int


@dataclass
class InflationRow:
    """The single row of the inflation table."""

    value: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class MintParamsRow:
    """The single row of the mint_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class StakingParamsRow:
    """The single row of the staking_params table."""

    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class StakingPoolRow:
    """The single row of the staking_pool table."""

    bonded_tokens: int
    not_bonded_tokens: int
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class SupplyRow:
    """The single row of the supply table."""

    coins: DbCoins
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass
class ModuleRow:
    """A row of the modules table."""

    module: str


def module_rows(names: Iterable[str]) -> list[ModuleRow]:
    """Build one ModuleRow for each module name, keeping the order."""
    return [ModuleRow(module=name) for name in names]