"""Tie-aware ranking shared by individual, team and run scoring."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def assign_ranks(items: Iterable[T], key: Callable[[T], Optional[float]]) -> List[Tuple[T, int]]:
    """Rank items ascending by ``key`` using skip-on-tie positions.

    Items whose key is ``None`` are left out. The sort is stable; an item
    equal to its predecessor shares the predecessor's rank, any other item is
    ranked at its 1-based sorted position. Values ``[61, 61, 62, 63, 63, 64]``
    give ranks ``[1, 1, 3, 4, 4, 6]``.
    """
    valued = [item for item in items if key(item) is not None]
    valued.sort(key=key)

    ranked: List[Tuple[T, int]] = []
    last_value = None
    rank = 0
    for idx, item in enumerate(valued, start=1):
        value = key(item)
        if idx == 1 or value != last_value:
            rank = idx
            last_value = value
        ranked.append((item, rank))
    return ranked


def points_for_place(place: Optional[int], field_size: int) -> int:
    """Return ``field_size - place + 1`` for places inside the field, else 0."""
    if place is None or place <= 0 or place > field_size:
        return 0
    return field_size - place + 1


__all__ = ["assign_ranks", "points_for_place"]
