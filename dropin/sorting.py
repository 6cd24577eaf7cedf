"""
Result ordering for display.

The query engine returns results in dataset order; this module applies the
user-selected order. Every order has a full tie-break chain, and Python's
stable sort keeps dataset order for records that are identical on all keys.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from dropin.model import SearchResult
from dropin.timeutils import duration_minutes, parse_time


SORT_ORDERS = ("location-name", "earliest", "latest", "open-longest")
DEFAULT_SORT = "location-name"

_ALIASES = {"alphabetical": "location-name"}


def _minutes(hhmm: str) -> int:
    value = parse_time(hhmm)
    return -1 if value is None else value


def _location_key(r: SearchResult) -> tuple[str, str]:
    return (r.location.lower(), r.location)


def _title_key(r: SearchResult) -> tuple[str, str]:
    return (r.course_title.lower(), r.course_title)


def _by_location(r: SearchResult) -> tuple[Any, ...]:
    return (_location_key(r), _title_key(r), _minutes(r.start_time), _minutes(r.end_time))


def _by_earliest(r: SearchResult) -> tuple[Any, ...]:
    return (_minutes(r.start_time), _location_key(r), _title_key(r), _minutes(r.end_time))


def _by_latest(r: SearchResult) -> tuple[Any, ...]:
    # latest closing time first
    return (-_minutes(r.end_time), _location_key(r), _title_key(r), _minutes(r.start_time))


def _by_longest(r: SearchResult) -> tuple[Any, ...]:
    return (
        -duration_minutes(r.start_time, r.end_time),
        _location_key(r),
        _title_key(r),
        _minutes(r.start_time),
    )


_KEYS: dict[str, Callable[[SearchResult], tuple[Any, ...]]] = {
    "location-name": _by_location,
    "earliest": _by_earliest,
    "latest": _by_latest,
    "open-longest": _by_longest,
}


def sort_results(results: Iterable[SearchResult], order: str = DEFAULT_SORT) -> list[SearchResult]:
    """
    Return a new list sorted by `order`.

    Raises ValueError for an unknown order.
    """
    name = _ALIASES.get(order, order)
    key = _KEYS.get(name)
    if key is None:
        raise ValueError(f"Unknown sort order: {order!r} (expected one of {', '.join(SORT_ORDERS)})")
    return sorted(results, key=key)
