"""Splitting of bulk inserts so they stay under the database parameter limit."""

from __future__ import annotations

from typing import Sequence, TypeVar

MAX_POSTGRESQL_PARAMS = 65535

T = TypeVar("T")


def split_accounts(accounts: Sequence[T], params_number: int) -> list[list[T]]:
    """Split accounts into batches sized for inserts of params_number columns each."""
    if params_number <= 0:
        raise ValueError("params_number must be positive")
    max_per_slice = MAX_POSTGRESQL_PARAMS // params_number
    if max_per_slice < 2:
        raise ValueError(f"params_number {params_number} is too large to split accounts")

    slices: list[list[T]] = [[] for _ in range(len(accounts) // max_per_slice + 1)]
    slice_index = 0
    for index, account in enumerate(accounts):
        if slice_index == len(slices):
            slices.append([])
        slices[slice_index].append(account)
        if index > 0 and index % (max_per_slice - 1) == 0:
            slice_index += 1
    return slices