"""
Shareable links for a search.

A FilterSpec is serialized into query-string parameters:

    category, subcategory, program, locations (comma-joined), age

Date and time are deliberately NOT part of the link: whoever opens it
gets a freshly computed "now"-relative date/time instead of a stale one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from dropin.model import FilterSpec
from dropin.timeutils import default_date, default_time


PARAM_CATEGORY = "category"
PARAM_SUBCATEGORY = "subcategory"
PARAM_PROGRAM = "program"
PARAM_LOCATIONS = "locations"
PARAM_AGE = "age"


def encode_filter_spec(spec: FilterSpec, base_url: str = "") -> str:
    """
    Return `base_url?query` (or just the query when no base URL is given).

    Empty fields are left out; with nothing to share the base URL is
    returned unchanged.
    """
    params: list[tuple[str, str]] = []
    if spec.category:
        params.append((PARAM_CATEGORY, spec.category))
    if spec.subcategory:
        params.append((PARAM_SUBCATEGORY, spec.subcategory))
    if spec.course_title:
        params.append((PARAM_PROGRAM, spec.course_title))
    locations = [x for x in spec.location if x]
    if locations:
        params.append((PARAM_LOCATIONS, ",".join(locations)))
    if spec.age:
        params.append((PARAM_AGE, spec.age))

    query = urlencode(params)
    if not base_url:
        return query
    return f"{base_url}?{query}" if query else base_url


def _query_part(url_or_query: str) -> str:
    text = (url_or_query or "").strip()
    if "?" in text or "://" in text:
        return urlsplit(text).query
    return text


def decode_filter_spec(url_or_query: str, now: Optional[datetime] = None) -> FilterSpec:
    """
    Rebuild a FilterSpec from a share link or bare query string.

    Unknown parameters are ignored; date and time come from the current
    defaults, never from the link.
    """
    qs = parse_qs(_query_part(url_or_query), keep_blank_values=False)

    def first(name: str) -> str:
        values = qs.get(name) or [""]
        return values[0]

    raw_locations = first(PARAM_LOCATIONS)
    locations = [x for x in raw_locations.split(",") if x] if raw_locations else []

    return FilterSpec(
        course_title=first(PARAM_PROGRAM),
        category=first(PARAM_CATEGORY),
        subcategory=first(PARAM_SUBCATEGORY),
        date=default_date(now),
        time=default_time(now),
        location=locations,
        age=first(PARAM_AGE),
    )


def has_shared_filters(url_or_query: str) -> bool:
    """
    Whether a link carries any parameters at all.
    """
    return bool(_query_part(url_or_query))
