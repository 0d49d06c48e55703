"""
Sort order helpers for reordering sibling lists.

All functions return only the items whose sort_order changes, mapped to
their new value, so callers can issue a minimal batch update.
"""

from typing import Dict, Protocol, Sequence, Optional


class Sortable(Protocol):
    id: str
    sort_order: Optional[int]


def calculate_new_sort_orders(items: Sequence[Sortable]) -> Dict[str, int]:
    """
    Renumber a reordered list sequentially (0, 1, 2, ...).

    Args:
        items: Items in their new order

    Returns:
        Mapping of item ID to new sort_order (changed items only)
    """
    updates: Dict[str, int] = {}

    for index, item in enumerate(items):
        if item.sort_order != index:
            updates[item.id] = index

    return updates


def move_issue_up(items: Sequence[Sortable], item_id: str) -> Dict[str, int]:
    """
    Swap an item's sort_order with the previous item.

    Missing sort_order values are treated as the list index.

    Args:
        items: Items sorted by sort_order
        item_id: ID of the item to move up

    Returns:
        Mapping of item ID to new sort_order (empty if already first)
    """
    index = _index_of(items, item_id)
    if index is None or index == 0:
        return {}

    return _swap(items, index, index - 1)


def move_issue_down(items: Sequence[Sortable], item_id: str) -> Dict[str, int]:
    """
    Swap an item's sort_order with the next item.

    Args:
        items: Items sorted by sort_order
        item_id: ID of the item to move down

    Returns:
        Mapping of item ID to new sort_order (empty if already last)
    """
    index = _index_of(items, item_id)
    if index is None or index >= len(items) - 1:
        return {}

    return _swap(items, index, index + 1)


def get_next_sort_order(items: Sequence[Sortable]) -> int:
    """
    Get the sort_order for an item appended to the list.

    Missing sort_order values count as 0.

    Args:
        items: Existing items

    Returns:
        max(sort_order) + 1, or 0 for an empty list
    """
    if not items:
        return 0

    return max(item.sort_order if item.sort_order is not None else 0 for item in items) + 1


def _index_of(items: Sequence[Sortable], item_id: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None


def _swap(items: Sequence[Sortable], index: int, other_index: int) -> Dict[str, int]:
    current = items[index]
    other = items[other_index]

    current_order = current.sort_order if current.sort_order is not None else index
    other_order = other.sort_order if other.sort_order is not None else other_index

    return {current.id: other_order, other.id: current_order}
