from decimal import Decimal

import pytest

from bdindex.db.coins import (
    Coin,
    DbCoin,
    DbCoins,
    DbDecCoin,
    DbDecCoins,
    DecCoin,
    format_dec,
    remove_empty,
    to_null_string,
    to_string,
)


def test_format_dec_matches_stored_commission_strings():
    assert format_dec(Decimal("0.011")) == "0.011000000000000000"
    assert format_dec(Decimal("0.05")) == "0.050000000000000000"
    assert format_dec(Decimal("0.7")) == "0.700000000000000000"


def test_format_dec_has_eighteen_fraction_digits():
    text = format_dec(12)
    whole, fraction = text.split(".")
    assert whole == "12"
    assert len(fraction) == 18
    assert Decimal(text) == 12


def test_format_dec_rejects_garbage():
    with pytest.raises(ValueError):
        format_dec("not-a-number")


def test_to_string_and_null_string():
    assert to_string(None) == ""
    assert to_string("moniker") == "moniker"
    assert to_null_string("  moniker ") == "moniker"
    assert to_null_string("   ") is None
    assert to_string(to_null_string("")) == ""


def test_remove_empty_keeps_order():
    assert remove_empty(["a", "", "b", ""]) == ["a", "b"]


def test_db_coin_from_coin_and_sql():
    coin = DbCoin.from_coin(Coin("udaric", 100))
    assert coin == DbCoin("udaric", "100")
    assert coin.to_sql() == "(udaric,100)"


def test_db_coin_parse_round_trip():
    coin = DbCoin("uatom", "42")
    assert DbCoin.parse(coin.to_sql().encode()) == coin
    assert DbCoin.parse('"(uatom,42)"') == coin
    assert coin.to_coin() == Coin("uatom", 42)


def test_db_coin_parse_without_separator_fails():
    with pytest.raises(ValueError):
        DbCoin.parse(b"(uatom)")


def test_db_coin_to_coin_rejects_bad_amount():
    with pytest.raises(ValueError):
        DbCoin("uatom", "1.5").to_coin()


def test_db_coins_parse_postgres_array():
    parsed = DbCoins.parse(b'{"(udaric,100)","(uatom,5)"}')
    assert parsed == DbCoins([DbCoin("udaric", "100"), DbCoin("uatom", "5")])
    assert parsed.to_coins() == [Coin("udaric", 100), Coin("uatom", 5)]


def test_db_coins_parse_empty_array():
    assert DbCoins.parse(b"{}") == DbCoins()


def test_db_coins_round_trip_and_order():
    coins = [Coin("a", 1), Coin("b", 2)]
    db_coins = DbCoins.from_coins(coins)
    raw = "{" + ",".join(f'"{c.to_sql()}"' for c in db_coins) + "}"
    assert DbCoins.parse(raw).to_coins() == coins
    assert DbCoins.from_coins(reversed(coins)) != db_coins
    assert (db_coins == None) is False  # noqa: E711


def test_db_dec_coin_round_trip():
    coin = DbDecCoin.from_dec_coin(DecCoin("udaric", Decimal("0.011")))
    assert coin.amount == "0.011000000000000000"
    assert DbDecCoin.parse(coin.to_sql()) == coin
    assert coin.to_dec_coin() == DecCoin("udaric", Decimal("0.011"))


def test_db_dec_coin_rejects_bad_amount():
    with pytest.raises(ValueError):
        DbDecCoin("udaric", "abc").to_dec_coin()


def test_db_dec_coins_parse_and_convert():
    values = [DecCoin("a", Decimal("1.5")), DecCoin("b", Decimal("2"))]
    db_coins = DbDecCoins.from_dec_coins(values)
    raw = ("{" + ",".join(f'"{c.to_sql()}"' for c in db_coins) + "}").encode()
    parsed = DbDecCoins.parse(raw)
    assert parsed == db_coins
    assert parsed.to_dec_coins() == values