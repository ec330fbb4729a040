"""Position assignment for ordered queues."""
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")


def assign_positions(items: Iterable[T], key: Callable[[T], Any]) -> List[Tuple[int, T]]:
    """Sort items ascending by key and number them from 1.

    sorted() is stable, so items with equal keys keep their input order and
    repeated calls over the same set give the same positions.
    """
    ordered = sorted(items, key=key)
    return [(index + 1, item) for index, item in enumerate(ordered)]
