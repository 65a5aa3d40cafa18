"""
Ordered-list edits for the per-row sections of a record or quotation
(items, materials, conditions, payment terms, exclusions, areas).

Every function returns a new list and leaves its input untouched. Rows are
addressed by index, which is only meaningful while the order is stable within
one edit.
"""

from typing import Callable, List, Optional, TypeVar

T = TypeVar("T")


def _check_index(items: List[T], index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"row {index} out of range for {len(items)} rows")


def append_item(items: List[T], item: T) -> List[T]:
    return [*items, item]


def insert_item(items: List[T], index: int, item: T) -> List[T]:
    """Insert before index; an index past the end appends."""
    index = max(0, min(index, len(items)))
    return [*items[:index], item, *items[index:]]


def update_item(items: List[T], index: int, item: T) -> List[T]:
    _check_index(items, index)
    return [item if i == index else existing for i, existing in enumerate(items)]


def remove_item(items: List[T], index: int,
                placeholder: Optional[Callable[[], T]] = None) -> List[T]:
    """
    Remove one row. If that empties the list and a placeholder factory is
    given, a single fresh placeholder row is returned instead, so an editable
    section always has a row to type into.
    """
    _check_index(items, index)
    remaining = [existing for i, existing in enumerate(items) if i != index]
    if not remaining and placeholder is not None:
        return [placeholder()]
    return remaining
