import sqlite3
from decimal import Decimal

import pytest

from bdindex.db.rows import ModuleRow, module_rows
from bdindex.db.staking_inputs import (
    Description,
    DoubleSignEvidence,
    DoubleSignVote,
    ValidatorCommission,
    ValidatorDescription,
    ValidatorStatus,
    ValidatorVotingPower,
)
from bdindex.db.validator_rows import (
    DoubleSignEvidenceRow,
    DoubleSignVoteRow,
    ValidatorCommissionRow,
    ValidatorData,
    ValidatorDescriptionRow,
    ValidatorInfoRow,
    ValidatorRow,
    ValidatorStatusRow,
    ValidatorVotingPowerRow,
)
from bdindex.db.validators import Database

CONS1 = "cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl"
OPER1 = "cosmosvaloper1rcp29q3hpd246n6qak7jluqep4v006cdsc2kkl"
PUB1 = "cosmosvalconspub1zcjduepq7mft6gfls57a0a42d7uhx656cckhfvtrlmw744jv4q0mvlv0dypskehfk8"
ACC1 = "cosmos1z4hfrxvlgl4s8u4n5ngjcw8kdqrcv43599amxs"
CONS2 = "cosmosvalcons1qq92t2l4jz5pt67tmts8ptl4p0jhr6utx5xa8y"
OPER2 = "cosmosvaloper1000ya26q2cmh399q4c5aaacd9lmmdqp90kw2jn"
PUB2 = "cosmosvalconspub1zcjduepqe93asg05nlnj30ej2pe3r8rkeryyuflhtfw3clqjphxn4j3u27msrr63nk"
ACC2 = "cosmos184ma3twcfjqef6k95ne8w2hk80x2kah7vcwy4a"

ONE = "1.000000000000000000"
TWO = "2.000000000000000000"


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    database = Database(conn)
    database.create_schema()
    yield database
    conn.close()


def q(db, stmt):
    return db.connection.execute(stmt).fetchall()


def add_validator(db, cons, oper, pub, acc=ACC1):
    data = ValidatorData(cons, oper, pub, acc, "1", "2", 1)
    db.save_validator_data(data)
    return data


def info_rows(db):
    return [ValidatorInfoRow(*r) for r in q(db,
        "SELECT consensus_address, operator_address, self_delegate_address, "
        "max_rate, max_change_rate, height FROM validator_info ORDER BY rowid")]


def test_save_validator(db):
    v = ValidatorData(CONS1, OPER1, PUB1, ACC1, "1", "2", 1)
    db.save_validator_data(v)
    db.save_validator_data(v)
    assert [ValidatorRow(*r) for r in q(db, "SELECT * FROM validator")] == [ValidatorRow(CONS1, PUB1)]
    assert info_rows(db) == [ValidatorInfoRow(CONS1, OPER1, ACC1, ONE, TWO, 1)]


def test_save_validators(db):
    db.save_validators_data([
        ValidatorData(CONS1, OPER1, PUB1, ACC1, "1", "2", 10),
        ValidatorData(CONS2, OPER2, PUB2, ACC2, "1", "2", 10),
    ])
    assert info_rows(db) == [
        ValidatorInfoRow(CONS1, OPER1, ACC1, ONE, TWO, 10),
        ValidatorInfoRow(CONS2, OPER2, ACC2, ONE, TWO, 10),
    ]
    db.save_validators_data([
        ValidatorData(CONS1, OPER1, PUB1, ACC1, "100", "200", 9),
        ValidatorData(CONS2, OPER2, PUB2, ACC2, "10", "5", 11),
    ])
    assert len(q(db, "SELECT * FROM validator")) == 2
    assert info_rows(db) == [
        ValidatorInfoRow(CONS1, OPER1, ACC1, ONE, TWO, 10),
        ValidatorInfoRow(CONS2, OPER2, ACC2, "10.000000000000000000", "5.000000000000000000", 11),
    ]


def test_get_validator(db):
    db.connection.execute("INSERT INTO validator VALUES (?, ?)", (CONS1, PUB1))
    db.connection.execute(
        "INSERT INTO validator_info (consensus_address, operator_address, self_delegate_address, "
        "max_change_rate, max_rate, height) VALUES (?, ?, ?, '2', '1', 1)",
        (CONS1, OPER1, ACC2),
    )
    v = db.get_validator(OPER1)
    assert v.consensus_address == CONS1
    assert v.operator_address == OPER1
    assert v.consensus_pubkey == PUB1
    assert v.self_delegate_address == ACC2
    assert v.max_change_rate_dec() == Decimal(2)
    assert v.max_rate_dec() == Decimal(1)
    assert db.get_validator_by_self_delegate_address(ACC2).operator_address == OPER1
    with pytest.raises(LookupError):
        db.get_validator("missing")


def test_get_validators(db):
    for cons, pub in ((CONS1, PUB1), (CONS2, PUB2)):
        db.connection.execute("INSERT INTO validator VALUES (?, ?)", (cons, pub))
    for cons, oper, acc in ((CONS1, OPER1, ACC1), (CONS2, OPER2, ACC2)):
        db.connection.execute(
            "INSERT INTO validator_info (consensus_address, operator_address, self_delegate_address, "
            "max_rate, max_change_rate, height) VALUES (?, ?, ?, '1', '2', 1)",
            (cons, oper, acc),
        )
    assert db.get_validators() == [
        ValidatorData(CONS2, OPER2, PUB2, ACC2, "1", "2", 1),
        ValidatorData(CONS1, OPER1, PUB1, ACC1, "1", "2", 1),
    ]


def test_address_lookups(db):
    add_validator(db, CONS1, OPER1, PUB1)
    assert db.get_validator_consensus_address(OPER1) == CONS1
    assert db.get_validator_operator_address(CONS1) == OPER1
    with pytest.raises(LookupError):
        db.get_validator_operator_address("missing")


def desc_rows(db):
    return [ValidatorDescriptionRow(*r) for r in q(db,
        "SELECT validator_address, moniker, identity, avatar_url, website, "
        "security_contact, details, height FROM validator_description")]


def test_save_validator_description(db):
    add_validator(db, CONS1, OPER1, PUB1)
    db.save_validator_description(ValidatorDescription(
        OPER1, Description("moniker", "identity", "", "securityContact", "details"), "avatar-url", 10))
    first = [ValidatorDescriptionRow(CONS1, "moniker", "identity", "avatar-url", "", "securityContact", "details", 10)]
    assert desc_rows(db) == first

    db.save_validator_description(ValidatorDescription(OPER1, Description("moniker"), "lower-avatar-url", 9))
    assert desc_rows(db) == first

    db.save_validator_description(ValidatorDescription(OPER1, Description("moniker"), "new-avatar-url", 10))
    rows = desc_rows(db)
    assert rows == [ValidatorDescriptionRow(CONS1, "moniker", "", "new-avatar-url", "", "", "", 10)]
    assert rows[0].avatar_url == "new-avatar-url"

    db.save_validator_description(ValidatorDescription(
        OPER1, Description("moniker", "higher-identity", "higher-website"), "higher-avatar-url", 11))
    assert desc_rows(db) == [ValidatorDescriptionRow(
        CONS1, "moniker", "higher-identity", "higher-avatar-url", "higher-website", "", "", 11)]


def comm_rows(db):
    return [ValidatorCommissionRow(*r) for r in q(db,
        "SELECT validator_address, commission, min_self_delegation, height FROM validator_commission")]


def test_save_validator_commission(db):
    add_validator(db, CONS1, OPER1, PUB1)
    db.save_validator_commission(ValidatorCommission(OPER1, Decimal("0.011"), 12, 10))
    first = [ValidatorCommissionRow(CONS1, "0.011000000000000000", "12", 10)]
    assert comm_rows(db) == first
    db.save_validator_commission(ValidatorCommission(OPER1, Decimal("0.050"), 100, 9))
    assert comm_rows(db) == first
    db.save_validator_commission(ValidatorCommission(OPER1, Decimal("0.050"), 100, 10))
    assert comm_rows(db) == [ValidatorCommissionRow(CONS1, "0.050000000000000000", "100", 10)]
    db.save_validator_commission(ValidatorCommission(OPER1, Decimal("0.70"), 200, 11))
    assert comm_rows(db) == [ValidatorCommissionRow(CONS1, "0.700000000000000000", "200", 11)]


def test_save_validators_voting_powers(db):
    add_validator(db, CONS1, OPER1, PUB1)
    add_validator(db, CONS2, OPER2, PUB2, ACC2)
    db.save_validators_voting_powers([
        ValidatorVotingPower(CONS1, 1000, 10), ValidatorVotingPower(CONS2, 2000, 10)])
    sel = "SELECT * FROM validator_voting_power ORDER BY rowid"
    assert [ValidatorVotingPowerRow(*r) for r in q(db, sel)] == [
        ValidatorVotingPowerRow(CONS1, 1000, 10), ValidatorVotingPowerRow(CONS2, 2000, 10)]
    db.save_validators_voting_powers([
        ValidatorVotingPower(CONS1, 5, 9), ValidatorVotingPower(CONS2, 10, 11)])
    assert [ValidatorVotingPowerRow(*r) for r in q(db, sel)] == [
        ValidatorVotingPowerRow(CONS1, 1000, 10), ValidatorVotingPowerRow(CONS2, 10, 11)]


def status_rows(db):
    return [ValidatorStatusRow(r[0], bool(r[1]), bool(r[2]), r[3], r[4]) for r in q(db,
        "SELECT status, jailed, tombstoned, validator_address, height FROM validator_status ORDER BY rowid")]


def test_save_validator_status(db):
    add_validator(db, CONS1, OPER1, PUB1)
    add_validator(db, CONS2, OPER2, PUB2, ACC2)
    db.save_validators_statuses([
        ValidatorStatus(CONS1, PUB1, 1, False, False, 10),
        ValidatorStatus(CONS2, PUB2, 2, True, True, 10)])
    assert status_rows(db) == [
        ValidatorStatusRow(1, False, False, CONS1, 10), ValidatorStatusRow(2, True, True, CONS2, 10)]
    db.save_validators_statuses([
        ValidatorStatus(CONS1, PUB1, 3, True, True, 9),
        ValidatorStatus(CONS2, PUB2, 3, True, True, 11)])
    assert status_rows(db) == [
        ValidatorStatusRow(1, False, False, CONS1, 10), ValidatorStatusRow(3, True, True, CONS2, 11)]


def test_save_double_vote_evidence(db):
    add_validator(db, CONS1, OPER1, PUB1)
    a = DoubleSignVote(1, 10, 1, "A42C9492F5DE01BFA6117137102C3EF909F1A46C2F56915F542D12AC2D0A5BCA", CONS1, 1,
                       "1qwPQjPrc7DH7+f6YAE3fOkq6phDAJ60dEyhmcZ7dx2ZgGvi9DbVLsn4leYqRNA/63ZeeH5kVly8zI1jCh4iBg==")
    b = DoubleSignVote(1, 10, 1, "418A20D12F45FC9340BE0CD2EDB0FFA1E4316176B8CE11E123EF6CBED23C8423", CONS1, 1,
                       "A5m7SVuvZ8YNXcUfBKLgkeV+Vy5ea+7rPfzlbkEvHOPPce6B7A2CwOIbCmPSVMKUarUdta+HiyTV+IELaOYyDA==")
    db.save_double_sign_evidence(DoubleSignEvidence(10, a, b))
    assert [DoubleSignEvidenceRow(*r) for r in q(db, "SELECT * FROM double_sign_evidence")] == [
        DoubleSignEvidenceRow(10, 1, 2)]
    votes = [DoubleSignVoteRow(*r) for r in q(db, "SELECT * FROM double_sign_vote ORDER BY id")]
    assert votes == [
        DoubleSignVoteRow(1, 1, 10, 1, a.block_id, CONS1, 1, a.signature),
        DoubleSignVoteRow(2, 1, 10, 1, b.block_id, CONS1, 1, b.signature),
    ]


def test_insert_enable_modules(db):
    modules = ["auth", "bank", "consensus", "distribution", "gov", "mint", "pricefeed", "staking", "supply"]
    db.insert_enable_modules(modules)
    results = [ModuleRow(r[0]) for r in q(db, "SELECT * FROM modules ORDER BY rowid")]
    assert results == module_rows(modules)
    db.insert_enable_modules(["auth"])
    assert q(db, "SELECT module_name FROM modules") == [("auth",)]