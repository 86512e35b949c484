"""
Reservation overlap check.

Intervals are half-open ``[start, end)``.  Two intervals conflict iff
``s1 < e2 and s2 < e1``; intervals that only touch at an endpoint do not.

Complexity: O(n) in the number of existing intervals.
"""

from __future__ import annotations

from typing import Iterable, Tuple, TypeVar

T = TypeVar("T")

Interval = Tuple[T, T]


def intervals_overlap(first: Interval, second: Interval) -> bool:
    (s1, e1), (s2, e2) = first, second
    return s1 < e2 and s2 < e1


def is_available(existing: Iterable[Interval], candidate: Interval) -> bool:
    """Return True iff *candidate* conflicts with none of *existing*."""
    return not any(intervals_overlap(interval, candidate) for interval in existing)
