"""Exact lookup and free-text search over a sequence of inventory items.

These are pure functions: they report what they found and leave it to the
caller (usually :class:`~doc_inventories.Inventory`) to emit diagnostics.
"""
from __future__ import annotations

import re
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .item import InventoryItem, show_full, spec


def _name_key(item: InventoryItem) -> str:
    return item.name


def _rank(item: InventoryItem) -> int:
    return abs(item.priority)


@dataclass
class LookupResult:
    """Outcome of :func:`lookup`.

    ``candidates`` holds every matching item ordered by ``abs(priority)``;
    ``item`` is the first of them, or None if nothing matched.
    """

    item: InventoryItem | None = None
    candidates: list[InventoryItem] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.item is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


def equal_name_run(items: Sequence[InventoryItem], name: str) -> list[InventoryItem]:
    """Return the contiguous run of items named ``name`` in a name-sorted sequence."""
    lo = bisect_left(items, name, key=_name_key)
    hi = bisect_right(items, name, lo=lo, key=_name_key)
    return list(items[lo:hi])


def lookup(
    items: Sequence[InventoryItem],
    name: str,
    domain: str = "",
    role: str = "",
    include_hidden: bool = True,
    sorted: bool = False,
) -> LookupResult:
    """Find the top-priority item with exactly the given ``name``.

    Args:
        items: The items to look through.
        name: The name to match exactly.
        domain: If not empty, only consider items in this domain.
        role: If not empty, only consider items with this role.
        include_hidden: Whether to consider items with negative priority.
        sorted: Whether ``items`` is sorted by name, which allows a binary
            search instead of a linear scan.

    Returns:
        A :class:`LookupResult`. Candidates of equal ``abs(priority)`` keep
        their order in ``items``.
    """
    if sorted:
        candidates = equal_name_run(items, name)
    else:
        candidates = [item for item in items if item.name == name]
    if domain:
        candidates = [item for item in candidates if item.domain == domain]
    if role:
        candidates = [item for item in candidates if item.role == role]
    if not include_hidden:
        candidates = [item for item in candidates if item.priority >= 0]
    candidates.sort(key=_rank)
    return LookupResult(item=candidates[0] if candidates else None, candidates=candidates)


def matches(item: InventoryItem, pattern: str | re.Pattern) -> bool:
    """Check whether ``pattern`` occurs in the spec or full representation of ``item``."""
    for text in (spec(item), show_full(item)):
        if isinstance(pattern, re.Pattern):
            if pattern.search(text):
                return True
        elif pattern in text:
            return True
    return False


def search(
    items: Iterable[InventoryItem],
    pattern: str | re.Pattern,
    include_hidden: bool = True,
) -> list[InventoryItem]:
    """Return all items matching ``pattern``, ordered by ``abs(priority)``.

    A string pattern matches as a substring, a compiled regex via
    :meth:`re.Pattern.search`.
    """
    results = [
        item
        for item in items
        if (include_hidden or item.priority >= 0) and matches(item, pattern)
    ]
    results.sort(key=_rank)
    return results
