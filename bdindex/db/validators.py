"""Storage of validators and enabled modules in a SQL database."""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional, Sequence, Union

from bdindex.db.coins import format_dec, to_string
from bdindex.db.staking_inputs import (
    DO_NOT_MODIFY,
    Description,
    DoubleSignEvidence,
    DoubleSignVote,
    Validator,
    ValidatorCommission,
    ValidatorDescription,
    ValidatorStatus,
    ValidatorVotingPower,
)
from bdindex.db.validator_rows import ValidatorData

_SCHEMA = """
CREATE TABLE IF NOT EXISTS account (address TEXT PRIMARY KEY);
CREATE TABLE IF NOT EXISTS validator (
    consensus_address TEXT PRIMARY KEY,
    consensus_pubkey TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS validator_info (
    consensus_address TEXT PRIMARY KEY REFERENCES validator (consensus_address),
    operator_address TEXT NOT NULL UNIQUE,
    self_delegate_address TEXT REFERENCES account (address),
    max_change_rate TEXT NOT NULL,
    max_rate TEXT NOT NULL,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_description (
    validator_address TEXT PRIMARY KEY REFERENCES validator (consensus_address),
    moniker TEXT, identity TEXT, avatar_url TEXT, website TEXT,
    security_contact TEXT, details TEXT,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_commission (
    validator_address TEXT PRIMARY KEY REFERENCES validator (consensus_address),
    commission TEXT, min_self_delegation TEXT,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_voting_power (
    validator_address TEXT PRIMARY KEY REFERENCES validator (consensus_address),
    voting_power INTEGER NOT NULL,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_status (
    validator_address TEXT PRIMARY KEY REFERENCES validator (consensus_address),
    status INTEGER NOT NULL,
    jailed BOOLEAN NOT NULL,
    tombstoned BOOLEAN NOT NULL DEFAULT FALSE,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS double_sign_vote (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type INTEGER NOT NULL,
    height INTEGER NOT NULL,
    round INTEGER NOT NULL,
    block_id TEXT NOT NULL,
    validator_address TEXT NOT NULL REFERENCES validator (consensus_address),
    validator_index INTEGER NOT NULL,
    signature TEXT NOT NULL,
    UNIQUE (block_id, validator_address)
);
CREATE TABLE IF NOT EXISTS double_sign_evidence (
    height INTEGER NOT NULL,
    vote_a_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    vote_b_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    UNIQUE (vote_a_id, vote_b_id)
);
CREATE TABLE IF NOT EXISTS modules (module_name TEXT NOT NULL UNIQUE);
"""

_VALIDATOR_COLUMNS = """
SELECT validator.consensus_address, validator.consensus_pubkey,
       validator_info.operator_address, validator_info.self_delegate_address,
       validator_info.max_rate, validator_info.max_change_rate
FROM validator INNER JOIN validator_info
    ON validator.consensus_address = validator_info.consensus_address"""


def _placeholders(count: int, width: int) -> str:
    group = "(" + ",".join("?" * width) + ")"
    return ",".join([group] * count)


def _as_validator(value: Union[Validator, ValidatorData]) -> Validator:
    if isinstance(value, Validator):
        return value
    return Validator(
        consensus_address=value.consensus_address,
        consensus_pubkey=value.consensus_pubkey,
        operator_address=value.operator_address,
        self_delegate_address=value.self_delegate_address,
        max_change_rate=value.max_change_rate_dec(),
        max_rate=value.max_rate_dec(),
        height=value.height,
    )


class Database:
    """Validator storage on top of a DB-API connection using qmark parameters."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def _exec(self, stmt: str, params: Sequence = (), what: str = "") -> sqlite3.Cursor:
        try:
            with self.connection:
                return self.connection.execute(stmt, params)
        except sqlite3.Error as exc:
            raise RuntimeError(f"error while storing {what}: {exc}") from exc

    def _fetch(self, stmt: str, params: Sequence = ()) -> list:
        return self.connection.execute(stmt, params).fetchall()

    def create_schema(self) -> None:
        """Create the tables used by this class, if missing."""
        with self.connection:
            self.connection.executescript(_SCHEMA)

    def save_validator_data(self, validator) -> None:
        self.save_validators_data([validator])

    def save_validators_data(self, validators: Iterable) -> None:
        """Store validators, updating the info only for equal or newer heights."""
        items = [_as_validator(v) for v in validators]
        if not items:
            return
        n = len(items)
        self._exec(
            f"INSERT INTO account (address) VALUES {_placeholders(n, 1)} "
            "ON CONFLICT DO NOTHING",
            [v.self_delegate_address for v in items],
            "accounts",
        )
        params: list = []
        for v in items:
            params += [v.consensus_address, v.consensus_pubkey]
        self._exec(
            f"INSERT INTO validator (consensus_address, consensus_pubkey) "
            f"VALUES {_placeholders(n, 2)} ON CONFLICT DO NOTHING",
            params,
            "validators",
        )
        params = []
        for v in items:
            params += [
                v.consensus_address, v.operator_address, v.self_delegate_address,
                format_dec(v.max_change_rate), format_dec(v.max_rate), v.height,
            ]
        self._exec(
            "INSERT INTO validator_info (consensus_address, operator_address, "
            "self_delegate_address, max_change_rate, max_rate, height) "
            f"VALUES {_placeholders(n, 6)} "
            """ON CONFLICT (consensus_address) DO UPDATE
    SET consensus_address = excluded.consensus_address,
        operator_address = excluded.operator_address,
        self_delegate_address = excluded.self_delegate_address,
        max_change_rate = excluded.max_change_rate,
        max_rate = excluded.max_rate,
        height = excluded.height
WHERE validator_info.height <= excluded.height""",
            params,
            "validator infos",
        )

    def get_validator_consensus_address(self, address: str) -> str:
        rows = self._fetch(
            "SELECT consensus_address FROM validator_info WHERE operator_address = ?",
            (address,),
        )
        if not rows:
            raise LookupError(
                "cannot find the consensus address of validator having "
                f"operator address {address}"
            )
        return rows[0][0]

    def get_validator_operator_address(self, cons_addr: str) -> str:
        rows = self._fetch(
            "SELECT operator_address FROM validator_info WHERE consensus_address = ?",
            (cons_addr,),
        )
        if not rows:
            raise LookupError(
                "cannot find the operator address of validator having "
                f"consensus address {cons_addr}"
            )
        return rows[0][0]

    @staticmethod
    def _data(row, height: int = 0) -> ValidatorData:
        return ValidatorData(
            consensus_address=row[0], consensus_pubkey=row[1],
            operator_address=row[2], self_delegate_address=row[3],
            max_rate=row[4], max_change_rate=row[5], height=height,
        )

    def get_validator(self, val_address: str) -> ValidatorData:
        rows = self._fetch(
            _VALIDATOR_COLUMNS + " WHERE validator_info.operator_address = ?",
            (val_address,),
        )
        if not rows:
            raise LookupError(f"no validator with validator address {val_address} could be found")
        return self._data(rows[0])

    def get_validators(self) -> list[ValidatorData]:
        rows = self._fetch(
            _VALIDATOR_COLUMNS.replace(
                "validator_info.max_change_rate",
                "validator_info.max_change_rate, validator_info.height",
            )
            + " ORDER BY validator.consensus_address"
        )
        result: list[ValidatorData] = []
        seen: set = set()
        for row in rows:
            if row[0] in seen:
                continue
            seen.add(row[0])
            result.append(self._data(row, row[6]))
        return result

    def get_validator_by_self_delegate_address(self, address: str) -> ValidatorData:
        rows = self._fetch(
            _VALIDATOR_COLUMNS + " WHERE validator_info.self_delegate_address = ?",
            (address,),
        )
        if not rows:
            raise LookupError(f"no validator with self delegate address {address} could be found")
        return self._data(rows[0])

    def _get_description(self, cons_addr: str) -> Optional[ValidatorDescription]:
        try:
            rows = self._fetch(
                "SELECT validator_address, moniker, identity, website, "
                "security_contact, details, avatar_url, height "
                "FROM validator_description WHERE validator_address = ?",
                (cons_addr,),
            )
        except sqlite3.Error:
            return None
        if not rows:
            return None
        row = rows[0]
        return ValidatorDescription(
            operator_address=row[0],
            description=Description(*(to_string(v) for v in row[1:6])),
            avatar_url=to_string(row[6]),
            height=row[7],
        )

    def save_validator_description(self, description: ValidatorDescription) -> None:
        """Store a description, merging it with the one already stored."""
        cons_addr = self.get_validator_consensus_address(description.operator_address)
        des = description.description.ensure_length()
        avatar_url = description.avatar_url
        existing = self._get_description(cons_addr)
        if existing is not None:
            des = existing.description.update(des)
            if description.avatar_url == DO_NOT_MODIFY:
                avatar_url = existing.avatar_url

        def nullable(value: str) -> Optional[str]:
            return value.strip() or None

        self._exec(
            """INSERT INTO validator_description (
    validator_address, moniker, identity, avatar_url, website, security_contact, details, height
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET moniker = excluded.moniker,
        identity = excluded.identity,
        avatar_url = excluded.avatar_url,
        website = excluded.website,
        security_contact = excluded.security_contact,
        details = excluded.details,
        height = excluded.height
WHERE validator_description.height <= excluded.height""",
            [
                nullable(cons_addr), nullable(des.moniker), nullable(des.identity),
                nullable(avatar_url), nullable(des.website),
                nullable(des.security_contact), nullable(des.details),
                description.height,
            ],
            "validator description",
        )

    def save_validator_commission(self, data: ValidatorCommission) -> None:
        """Store a commission, keeping stored values for fields left as None."""
        if data.commission is None and data.min_self_delegation is None:
            return
        cons_addr = self.get_validator_consensus_address(data.validator_address)
        commission = min_self_delegation = ""
        try:
            rows = self._fetch(
                "SELECT commission, min_self_delegation FROM validator_commission "
                "WHERE validator_address = ?",
                (cons_addr,),
            )
        except sqlite3.Error:
            rows = []
        if rows:
            commission = to_string(rows[0][0])
            min_self_delegation = to_string(rows[0][1])
        if data.commission is not None:
            commission = format_dec(data.commission)
        if data.min_self_delegation is not None:
            min_self_delegation = str(data.min_self_delegation)
        self._exec(
            """INSERT INTO validator_commission (validator_address, commission, min_self_delegation, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET commission = excluded.commission,
        min_self_delegation = excluded.min_self_delegation,
        height = excluded.height
WHERE validator_commission.height <= excluded.height""",
            [cons_addr, commission, min_self_delegation, data.height],
            "validator commission",
        )

    def save_validators_voting_powers(self, entries: Iterable[ValidatorVotingPower]) -> None:
        items = list(entries)
        if not items:
            return
        params: list = []
        for e in items:
            params += [e.consensus_address, e.voting_power, e.height]
        self._exec(
            "INSERT INTO validator_voting_power (validator_address, voting_power, height) "
            f"VALUES {_placeholders(len(items), 3)} "
            """ON CONFLICT (validator_address) DO UPDATE
    SET voting_power = excluded.voting_power,
        height = excluded.height
WHERE validator_voting_power.height <= excluded.height""",
            params,
            "validators voting power",
        )

    def save_validators_statuses(self, statuses: Iterable[ValidatorStatus]) -> None:
        items = list(statuses)
        if not items:
            return
        val_params: list = []
        status_params: list = []
        for s in items:
            val_params += [s.consensus_address, s.consensus_pubkey]
            status_params += [s.consensus_address, s.status, s.jailed, s.tombstoned, s.height]
        self._exec(
            "INSERT INTO validator (consensus_address, consensus_pubkey) "
            f"VALUES {_placeholders(len(items), 2)} ON CONFLICT DO NOTHING",
            val_params,
            "validators",
        )
        self._exec(
            "INSERT INTO validator_status (validator_address, status, jailed, tombstoned, height) "
            f"VALUES {_placeholders(len(items), 5)} "
            """ON CONFLICT (validator_address) DO UPDATE
    SET status = excluded.status,
        jailed = excluded.jailed,
        tombstoned = excluded.tombstoned,
        height = excluded.height
WHERE validator_status.height <= excluded.height""",
            status_params,
            "validators statuses",
        )

    def _save_double_sign_vote(self, vote: DoubleSignVote) -> int:
        cursor = self._exec(
            "INSERT INTO double_sign_vote (type, height, round, block_id, "
            "validator_address, validator_index, signature) "
            "VALUES (?, ?, ?, ?, ?, ?, ?) ON CONFLICT DO NOTHING",
            [vote.type, vote.height, vote.round, vote.block_id,
             vote.validator_address, vote.validator_index, vote.signature],
            "double sign vote",
        )
        if cursor.rowcount == 0:
            raise RuntimeError("error while storing double sign vote: no rows in result set")
        return cursor.lastrowid

    def save_double_sign_evidence(self, evidence: DoubleSignEvidence) -> None:
        vote_a = self._save_double_sign_vote(evidence.vote_a)
        vote_b = self._save_double_sign_vote(evidence.vote_b)
        self._exec(
            "INSERT INTO double_sign_evidence (height, vote_a_id, vote_b_id) "
            "VALUES (?, ?, ?) ON CONFLICT DO NOTHING",
            [evidence.height, vote_a, vote_b],
            "double sign evidence",
        )

    def insert_enable_modules(self, modules: Sequence[str]) -> None:
        """Replace the stored list of enabled modules."""
        if not modules:
            return
        self._exec("DELETE FROM modules WHERE TRUE", (), "modules")
        self._exec(
            f"INSERT INTO modules (module_name) VALUES {_placeholders(len(modules), 1)} "
            "ON CONFLICT DO NOTHING",
            list(modules),
            "modules",
        )