# bdindex

`bdindex` is the storage and query layer of a blockchain explorer index.
It keeps validators, their descriptions, commissions, voting powers,
statuses and double-sign evidence in an SQLite database, and it serves
JSON "action" endpoints that answer questions about balances,
delegations, rewards and unbonding by asking chain data sources that
you supply.

Install with `pip install .`; the tests need the `test` extra
(`pip install .[test]`, then `pytest`).

## What is inside

- `bdindex.db.coins`: coin values as stored in the database.
  `Coin` and `DecCoin` hold whole and decimal amounts; `DbCoin`,
  `DbCoins`, `DbDecCoin` and `DbDecCoins` hold the stored text form,
  with `parse`, `to_sql` and conversions back and forth.
  `format_dec` renders a decimal with exactly 18 fractional digits;
  `to_null_string` strips a string and turns an empty one into `None`,
  `to_string` does the reverse.
- `bdindex.db.rows`, `bdindex.db.gov_rows`, `bdindex.db.validator_rows`:
  one dataclass per table row, for example `ValidatorInfoRow`,
  `ValidatorCommissionRow`, `ProposalRow` and `SupplyRow`.
  `module_rows(names)` builds `ModuleRow` values in order.
- `bdindex.db.batching`: `split_accounts(accounts, params_number)` breaks
  a long list into slices that keep an insert of `params_number`
  columns per account under 65535 statement parameters.
- `bdindex.db.staking_inputs`: the values handed to the database when
  saving staking data (`Validator`, `Description`,
  `ValidatorDescription`, `ValidatorCommission`, `ValidatorVotingPower`,
  `ValidatorStatus`, `DoubleSignVote`, `DoubleSignEvidence`).
  `Description.ensure_length()` raises `ValueError` for an over-long
  field, and `Description.update(other)` applies `other` while keeping
  the fields it sets to `"[do-not-modify]"`.
- `bdindex.db.validators`: `Database`, which creates the schema and
  saves and reads validator data over an `sqlite3` connection.
- `bdindex.actions`: configuration (`config`), request payloads
  (`payload`), JSON responses (`responses`), counters and histograms
  (`metrics`), the request `Context` (`context`), the `ActionsWorker`
  (`worker`) and the handlers themselves (`handlers`).

## Storing validators

```python
import sqlite3

from bdindex.db.validators import Database
from bdindex.db.validator_rows import ValidatorData

db = Database(sqlite3.connect(":memory:"))
db.create_schema()

db.save_validator_data(
    ValidatorData(
        consensus_address="cosmosvalcons1examplecons",
        operator_address="cosmosvaloper1exampleoper",
        consensus_pubkey="cosmosvalconspub1examplepubkey",
        self_delegate_address="cosmos1exampleselfdelegate",
        max_rate="1",
        max_change_rate="2",
        height=10,
    )
)

validator = db.get_validator("cosmosvaloper1exampleoper")
```

Saving the same validator again is harmless. Info, descriptions,
commissions, voting powers and statuses only replace a stored row when
they come from the same or a higher height. Reading a validator that is
not stored raises `LookupError` naming the address asked for; a failing
write raises `RuntimeError`.

`save_validator_commission` leaves a stored commission or minimum self
delegation as it is when the new value is `None`, and does nothing when
both are `None`. `save_double_sign_evidence` stores both votes and the
evidence linking them.

```python
db.insert_enable_modules(["auth", "bank", "staking"])
```

The list replaces whatever modules were recorded before; an empty list
changes nothing.

## Action configuration

`parse_config` reads the `actions` section of a YAML document and
returns an `ActionsConfig` with a `port` and an optional `node`
(`NodeDetails`, holding the node settings as a mapping). It returns
`None` when the document has no `actions` section, and raises
`ValueError` for malformed input. `default_config()` gives port 3000 and
no node.

```python
from bdindex.actions.config import parse_config

config = parse_config(b"actions:\n  port: 3000\n")
```

## Action endpoints

A request body is a JSON payload whose `input` object holds an
`address`, an optional `height` (0 or missing means the latest height
the node reports) and optional `offset`, `limit` and `count_total` for
pagination.

A `Context` pairs a node, which must have `latest_height()`, with
`Sources`: a `bank_source`, `distr_source` and `staking_source` that the
handlers call (for example `bank_source.get_account_balance(address,
height)` or `staking_source.get_delegations_with_pagination(height,
address, pagination)`).

```python
from bdindex.actions.context import Context, Sources
from bdindex.actions.handlers import register_handlers
from bdindex.actions.worker import ActionsWorker
from bdindex.db.coins import Coin


class Node:
    def latest_height(self):
        return 100


class Bank:
    def get_account_balance(self, address, height):
        return [Coin(denom="stake", amount=10)]


worker = ActionsWorker(Context(Node(), Sources(bank_source=Bank())))
register_handlers(worker)

status, content_type, body = worker.handle(
    "/account_balance", b'{"input": {"address": "cosmos1example", "height": 5}}'
)
# 200, "application/json", b'{"coins":[{"amount":"10","denom":"stake"}]}'
```

`ActionsWorker.handle` answers 404 for an unknown path, 500 for a body
that is not valid JSON, 400 with a `{"message": ...}` body when the
handler fails, and 200 with the handler's result as JSON otherwise.
Successes, errors and response times are counted in `ActionMetrics`.

`register_handlers` attaches `/account_balance`, `/delegation_reward`,
`/delegator_withdraw_address`, `/validator_commission_amount`,
`/delegation`, `/delegation_total`, `/unbonding_delegation`,
`/unbonding_delegation_total`, `/redelegation`, `/validator_delegations`,
`/validator_redelegations_from` and `/validator_unbonding_delegations`.
`run_actions(context, port)` registers them all and serves them over
HTTP on every interface until interrupted, then calls the node's
`stop()` if it has one.

## What it does not do

- It ships no chain data sources and no node client: the bank,
  distribution and staking sources and the node given to `Context` are
  yours to provide.
- It has no command-line program; start the endpoints from Python with
  `run_actions`.
- It does not follow a chain by itself: nothing here reads blocks,
  messages or genesis files, or runs periodic jobs. `Database` stores
  only what it is handed, and only the validator and module tables.