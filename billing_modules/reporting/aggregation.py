"""
Generic group-and-fold primitive shared by every summary builder.

``group_reduce`` makes one linear pass over the records and returns an
insertion-ordered ``dict`` of key -> accumulator.  Accumulators are frozen
dataclasses; ``update`` returns a new accumulator instead of mutating.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import TypeVar

from billing_kernel.domain.records import BillItem, BillRecord

R = TypeVar("R")
K = TypeVar("K", bound=Hashable)
A = TypeVar("A")


def group_reduce(
    records: Iterable[R],
    key: Callable[[R], K | None],
    initial: Callable[[K, R], A],
    update: Callable[[A, R], A],
) -> dict[K, A]:
    """
    Group ``records`` by ``key`` and fold each group with ``update``.

    Args:
        records: Input sequence, read once.
        key: Group key extractor.  A ``None`` key drops the record.
        initial: Builds the empty accumulator for a key on its first record.
        update: Returns the accumulator with one more record folded in.

    Returns:
        Mapping ordered by the first appearance of each key.  Zero records
        gives an empty mapping.
    """
    groups: dict[K, A] = {}
    for record in records:
        k = key(record)
        if k is None:
            continue
        acc = groups[k] if k in groups else initial(k, record)
        groups[k] = update(acc, record)
    return groups


def add_distinct(ids: tuple[str, ...], new_id: str) -> tuple[str, ...]:
    """Append ``new_id`` unless already present (first-seen order kept)."""
    return ids if new_id in ids else ids + (new_id,)


def iter_items(bills: Iterable[BillRecord]) -> Iterator[tuple[BillRecord, BillItem]]:
    """Flatten bills into (bill, item) pairs in bill then item order."""
    for bill in bills:
        for item in bill.items:
            yield bill, item
