"""Handlers of the action requests, and the wiring that serves them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from bdindex.actions.context import Context
from bdindex.actions.payload import PageRequest, Payload
from bdindex.actions.responses import (
    Address,
    Balance,
    Coin,
    Delegation,
    DelegationResponse,
    DelegationReward,
    PageResponse,
    Redelegation,
    RedelegationEntry,
    RedelegationResponse,
    UnbondingDelegation,
    UnbondingDelegationEntry,
    UnbondingDelegationResponse,
    ValidatorCommissionAmount,
    convert_coins,
    convert_dec_coins,
)
from bdindex.actions.worker import ActionsWorker
from bdindex.db import coins as dbcoins

log = logging.getLogger(__name__)

NOT_FOUND_CODE = "NotFound"


class NotFoundError(LookupError):
    """Raised by a source when the chain holds nothing for the request."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(f"code = {NOT_FOUND_CODE} desc = {message}")


@dataclass
class DelegationRecord:
    """A delegation as returned by a staking source."""

    delegator_address: str
    validator_address: str
    balance: dbcoins.Coin


@dataclass
class DelegationsPage:
    """One page of delegations."""

    delegation_responses: list[DelegationRecord] = field(default_factory=list)
    pagination: Optional[PageResponse] = None


@dataclass
class DelegatorReward:
    """The rewards a delegator earned from one validator."""

    validator_address: str
    reward: list[dbcoins.DecCoin] = field(default_factory=list)


@dataclass
class RedelegationsRequest:
    """Filter of a redelegations query."""

    delegator_addr: str = ""
    src_validator_addr: str = ""
    dst_validator_addr: str = ""
    pagination: Optional[PageRequest] = None


@dataclass
class RedelegationRecord:
    """A redelegation as returned by a staking source."""

    delegator_address: str
    validator_src_address: str
    validator_dst_address: str
    entries: list[RedelegationEntry] = field(default_factory=list)


@dataclass
class RedelegationsPage:
    """One page of redelegations."""

    redelegation_responses: list[RedelegationRecord] = field(default_factory=list)
    pagination: Optional[PageResponse] = None


@dataclass
class UnbondingRecord:
    """An unbonding delegation as returned by a staking source."""

    delegator_address: str
    validator_address: str
    entries: list[UnbondingDelegationEntry] = field(default_factory=list)


@dataclass
class UnbondingPage:
    """One page of unbonding delegations."""

    unbonding_responses: list[UnbondingRecord] = field(default_factory=list)
    pagination: Optional[PageResponse] = None


@dataclass
class StakingParams:
    """The staking parameters the handlers need."""

    bond_denom: str


def _is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, NotFoundError) or NOT_FOUND_CODE in str(exc)


def _delegation_response(page: DelegationsPage) -> DelegationResponse:
    return DelegationResponse(
        delegations=[
            Delegation(
                delegator_address=record.delegator_address,
                validator_address=record.validator_address,
                coins=convert_coins([record.balance]),
            )
            for record in page.delegation_responses
        ],
        pagination=page.pagination,
    )


def _redelegation_response(page: RedelegationsPage) -> RedelegationResponse:
    return RedelegationResponse(
        redelegations=[
            Redelegation(
                delegator_address=record.delegator_address,
                validator_src_address=record.validator_src_address,
                validator_dst_address=record.validator_dst_address,
                entries=[
                    RedelegationEntry(
                        completion_time=entry.completion_time, balance=entry.balance
                    )
                    for entry in record.entries
                ],
            )
            for record in page.redelegation_responses
        ],
        pagination=page.pagination,
    )


def _unbonding_response(page: UnbondingPage) -> UnbondingDelegationResponse:
    return UnbondingDelegationResponse(
        unbonding_delegations=[
            UnbondingDelegation(
                delegator_address=record.delegator_address,
                validator_address=record.validator_address,
                entries=list(record.entries),
            )
            for record in page.unbonding_responses
        ],
        pagination=page.pagination,
    )


def account_balance_handler(ctx: Context, payload: Payload) -> Balance:
    log.debug("executing account balance action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        balance = ctx.sources.bank_source.get_account_balance(payload.address, height)
    except Exception as exc:
        raise RuntimeError(f"error while getting account balance: {exc}") from exc
    return Balance(coins=convert_coins(balance))


def delegation_reward_handler(ctx: Context, payload: Payload) -> list[DelegationReward]:
    log.debug("executing delegation rewards action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        rewards = ctx.sources.distr_source.delegator_total_rewards(payload.address, height)
    except Exception as exc:
        raise RuntimeError(f"error while getting delegator total rewards: {exc}") from exc
    return [
        DelegationReward(
            coins=convert_dec_coins(reward.reward),
            validator_address=reward.validator_address,
        )
        for reward in rewards
    ]


def delegator_withdraw_address_handler(ctx: Context, payload: Payload) -> Address:
    log.debug("executing delegator withdraw address action for %s", payload.address)
    height = ctx.get_height(None)
    try:
        address = ctx.sources.distr_source.delegator_withdraw_address(payload.address, height)
    except Exception as exc:
        raise RuntimeError(f"error while getting delegator withdraw address: {exc}") from exc
    return Address(address=address)


def validator_commission_amount_handler(
    ctx: Context, payload: Payload
) -> ValidatorCommissionAmount:
    log.debug("executing validator commission action for %s", payload.address)
    height = ctx.get_height(None)
    try:
        commission = ctx.sources.distr_source.validator_commission(payload.address, height)
    except Exception as exc:
        raise RuntimeError(f"error while getting validator commission: {exc}") from exc
    return ValidatorCommissionAmount(coins=convert_dec_coins(commission))


def delegation_handler(ctx: Context, payload: Payload) -> Any:
    """Delegations of a delegator; a not-found error is returned, not raised."""
    log.debug("executing delegations action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        page = ctx.sources.staking_source.get_delegations_with_pagination(
            height, payload.address, payload.pagination
        )
    except Exception as exc:
        if _is_not_found(exc):
            return exc
        raise RuntimeError(f"error while getting delegator delegations: {exc}") from exc
    return _delegation_response(page)


def total_delegation_amount_handler(ctx: Context, payload: Payload) -> Any:
    """Total delegated amount per denomination; a not-found error is returned."""
    log.debug("executing total delegation amount action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        page = ctx.sources.staking_source.get_delegations_with_pagination(
            height, payload.address, None
        )
    except Exception as exc:
        if _is_not_found(exc):
            return exc
        raise RuntimeError(f"error while getting delegator delegations: {exc}") from exc

    # Each delegation is added to the totals of its denomination, and starts a
    # new total for every total already present with another denomination.
    totals: list[list] = []
    for record in page.delegation_responses:
        denom, amount = record.balance.denom, record.balance.amount
        for total in list(totals):
            if total[0] == denom:
                total[1] += amount
            else:
                totals.append([denom, amount])
        if not totals:
            totals.append([denom, amount])

    return Balance(
        coins=convert_coins(dbcoins.Coin(denom=d, amount=a) for d, a in totals)
    )


def unbonding_delegations_handler(
    ctx: Context, payload: Payload
) -> UnbondingDelegationResponse:
    log.debug("executing unbonding delegations action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        page = ctx.sources.staking_source.get_unbonding_delegations(
            height, payload.address, payload.pagination
        )
    except Exception as exc:
        raise RuntimeError(
            f"error while getting delegator unbonding delegations: {exc}"
        ) from exc
    return _unbonding_response(page)


def unbonding_delegations_total_handler(ctx: Context, payload: Payload) -> Balance:
    log.debug("executing unbonding delegation total action for %s", payload.address)
    height = ctx.get_height(payload)
    staking = ctx.sources.staking_source
    try:
        page = staking.get_unbonding_delegations(height, payload.address, None)
    except Exception as exc:
        raise RuntimeError(
            f"error while getting delegator unbonding delegations: {exc}"
        ) from exc
    try:
        params = staking.get_params(height)
    except Exception as exc:
        raise RuntimeError(f"error while getting bond denom type: {exc}") from exc

    total = sum(
        entry.balance for record in page.unbonding_responses for entry in record.entries
    )
    return Balance(coins=[Coin(amount=str(total), denom=params.bond_denom)])


def redelegation_handler(ctx: Context, payload: Payload) -> RedelegationResponse:
    log.debug("executing redelegations action for %s", payload.address)
    height = ctx.get_height(payload)
    request = RedelegationsRequest(
        delegator_addr=payload.address, pagination=payload.pagination
    )
    try:
        page = ctx.sources.staking_source.get_redelegations(height, request)
    except Exception as exc:
        raise RuntimeError(f"error while getting delegator redelegations: {exc}") from exc
    return _redelegation_response(page)


def validator_delegation_handler(ctx: Context, payload: Payload) -> DelegationResponse:
    log.debug("executing validator delegation action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        page = ctx.sources.staking_source.get_validator_delegations_with_pagination(
            height, payload.address, payload.pagination
        )
    except Exception as exc:
        raise RuntimeError(f"error while getting validator delegations: {exc}") from exc
    return _delegation_response(page)


def validator_redelegations_from_handler(
    ctx: Context, payload: Payload
) -> RedelegationResponse:
    log.debug("executing validator redelegation action for %s", payload.address)
    height = ctx.get_height(payload)
    request = RedelegationsRequest(
        src_validator_addr=payload.address, pagination=payload.pagination
    )
    try:
        page = ctx.sources.staking_source.get_redelegations(height, request)
    except Exception as exc:
        raise RuntimeError(
            f"error while getting redelegations from validator: {exc}"
        ) from exc
    return _redelegation_response(page)


def validator_unbonding_delegations_handler(
    ctx: Context, payload: Payload
) -> UnbondingDelegationResponse:
    log.debug("executing validator unbonding delegations action for %s", payload.address)
    height = ctx.get_height(payload)
    try:
        page = ctx.sources.staking_source.get_unbonding_delegations_from_validator(
            height, payload.address, payload.pagination
        )
    except Exception as exc:
        raise RuntimeError(
            "error while getting all unbonding delegations from validator "
            f"{payload.address}: {exc}"
        ) from exc
    return _unbonding_response(page)


_ROUTES = {
    "/account_balance": account_balance_handler,
    "/delegation_reward": delegation_reward_handler,
    "/delegator_withdraw_address": delegator_withdraw_address_handler,
    "/validator_commission_amount": validator_commission_amount_handler,
    "/delegation": delegation_handler,
    "/delegation_total": total_delegation_amount_handler,
    "/unbonding_delegation": unbonding_delegations_handler,
    "/unbonding_delegation_total": unbonding_delegations_total_handler,
    "/redelegation": redelegation_handler,
    "/validator_delegations": validator_delegation_handler,
    "/validator_redelegations_from": validator_redelegations_from_handler,
    "/validator_unbonding_delegations": validator_unbonding_delegations_handler,
}


def register_handlers(worker: ActionsWorker) -> None:
    """Register every action handler on its path."""
    for path, handler in _ROUTES.items():
        worker.register_handler(path, handler)


def run_actions(context: Context, port: int) -> None:
    """Serve all the actions on the given port until interrupted."""
    worker = ActionsWorker(context)
    register_handlers(worker)
    try:
        worker.serve(port)
    except KeyboardInterrupt:
        log.info("actions worker interrupted")
    finally:
        stop = getattr(context.node, "stop", None)
        if callable(stop):
            stop()