"""
Query engine.

search() narrows the session snapshot with independent predicates
(category, exact program title, location, date, time, age) and projects
every surviving session into a SearchResult.

Properties:
- pure with respect to its inputs; only "this-week" reads the clock,
  and tests can pass `today` explicitly
- results keep dataset order (sorting lives in dropin/sorting.py)
- no predicate raises; malformed values degrade to permissive defaults
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable, Mapping, Optional

from dropin.classify import classify, icon_for, matches_category
from dropin.model import Category, FilterSpec, Facility, Location, SearchResult, Session, Subcategory
from dropin.taxonomy import categories_by_name, find_parent_category, get_category, subcategories_for
from dropin.timeutils import (
    NONE_SENTINEL,
    THIS_WEEK,
    day_of_week,
    format_hhmm,
    is_any_time,
    local_iso_date,
    parse_age_max,
    parse_age_min,
    parse_int_or_none,
    parse_time,
    split_date_range,
    this_week_window,
    time_to_minutes,
    today_local,
)


UNKNOWN_LOCATION = "Unknown Location"

Predicate = Callable[[Session], bool]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _category_predicate(spec: FilterSpec) -> Optional[Predicate]:
    category_id = spec.category.strip()
    subcategory_id = spec.subcategory.strip()

    if not category_id and subcategory_id:
        # subcategory picked without a category: use the category that owns it
        parent = find_parent_category(subcategory_id)
        if parent is None:
            return None
        category_id = parent.id

    if not category_id:
        return None

    def pred(s: Session) -> bool:
        if not s.course_title:
            return False
        return matches_category(s.course_title, category_id, subcategory_id or None, s.age_min, s.age_max)

    return pred


def _title_predicate(spec: FilterSpec) -> Optional[Predicate]:
    if not spec.course_title:
        return None
    wanted = spec.course_title
    return lambda s: s.course_title == wanted


def _location_predicate(spec: FilterSpec, locations: Iterable[Location]) -> Optional[Predicate]:
    names = [n for n in spec.location if n]
    if not names:
        return None

    id_by_name = {loc.name: loc.location_id for loc in locations}
    wanted = {id_by_name[n] for n in names if n in id_by_name}

    # none of the names resolve: no constraint rather than an empty result
    if not wanted:
        return None
    return lambda s: s.location_id in wanted


def session_runs_between(s: Session, window_start: str, window_end: str) -> bool:
    """
    Range overlap of [first_date, last_date] with [window_start, window_end].
    """
    first = s.first_date or ""
    last = s.last_date or ""
    if not first and not last:
        return True
    if first and first > window_end:
        return False
    if last and last < window_start:
        return False
    return True


def session_on_date(s: Session, target: str) -> bool:
    bounds = split_date_range(s.date_range)
    if bounds is None:
        # malformed range string: fall back to the recurrence bounds
        return session_runs_between(s, target, target)
    start, end = bounds
    return start <= target <= end


def _date_predicate(spec: FilterSpec, today: Optional[date]) -> Optional[Predicate]:
    target = spec.date.strip()
    if not target:
        return None

    if target == THIS_WEEK:
        window_start, window_end = this_week_window(today or today_local())
        return lambda s: session_runs_between(s, window_start, window_end)

    return lambda s: session_on_date(s, target)


def _time_predicate(spec: FilterSpec) -> Optional[Predicate]:
    if is_any_time(spec.time):
        return None
    target = parse_time(spec.time)
    if target is None:
        return None

    def pred(s: Session) -> bool:
        start = time_to_minutes(s.start_hour, s.start_minute)
        end = time_to_minutes(s.end_hour, s.end_minute)
        # half-open: inclusive start, exclusive end
        return start <= target < end

    return pred


def _age_predicate(spec: FilterSpec) -> Optional[Predicate]:
    age = parse_int_or_none(spec.age)
    if age is None:
        return None
    return lambda s: parse_age_min(s.age_min) <= age <= parse_age_max(s.age_max)


def build_predicates(
    spec: FilterSpec,
    locations: Iterable[Location],
    today: Optional[date] = None,
) -> list[Predicate]:
    """
    Active predicates for `spec`, in evaluation order.
    """
    candidates = [
        _category_predicate(spec),
        _title_predicate(spec),
        _location_predicate(spec, locations),
        _date_predicate(spec, today),
        _time_predicate(spec),
        _age_predicate(spec),
    ]
    return [p for p in candidates if p is not None]


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def age_range_display(age_min: str, age_max: str) -> str:
    if age_max == NONE_SENTINEL:
        return f"Ages {age_min}+"
    return f"Ages {age_min}-{age_max}"


def project(
    s: Session,
    spec: FilterSpec,
    location_names: Mapping[int, str],
    facilities: Mapping[str, Facility],
) -> SearchResult:
    if spec.date and spec.date != THIS_WEEK:
        display_date = spec.date
    else:
        display_date = s.first_date

    facility = facilities.get(str(s.location_id))
    labels = classify(s.course_title, s.age_min, s.age_max)
    primary = labels[0] if labels else None

    return SearchResult(
        course_title=s.course_title,
        location=location_names.get(s.location_id, UNKNOWN_LOCATION),
        location_id=s.location_id,
        day_of_week=day_of_week(display_date),
        start_time=format_hhmm(s.start_hour, s.start_minute),
        end_time=format_hhmm(s.end_hour, s.end_minute),
        date=display_date,
        location_url=facility.url if facility else None,
        location_address=facility.address if facility else None,
        category=primary.category if primary else None,
        subcategory=primary.subcategory if primary else None,
        icon=icon_for(s.course_title, s.age_min, s.age_max),
        age_range=age_range_display(s.age_min, s.age_max),
        age_min=s.age_min,
        age_max=s.age_max,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def filter_sessions(
    sessions: Iterable[Session],
    locations: Iterable[Location],
    spec: FilterSpec,
    today: Optional[date] = None,
) -> list[Session]:
    """
    Sessions matching every active predicate, in dataset order.
    """
    predicates = build_predicates(spec, locations, today)
    return [s for s in sessions if all(p(s) for p in predicates)]


def search(
    sessions: Iterable[Session],
    locations: Iterable[Location],
    spec: FilterSpec,
    facilities: Optional[Mapping[str, Facility]] = None,
    today: Optional[date] = None,
) -> list[SearchResult]:
    locations = list(locations)
    matched = filter_sessions(sessions, locations, spec, today)

    location_names = {loc.location_id: loc.name for loc in locations}
    facility_index = facilities or {}
    return [project(s, spec, location_names, facility_index) for s in matched]


# ---------------------------------------------------------------------------
# Helpers for the surrounding application
# ---------------------------------------------------------------------------


def upcoming_sessions(sessions: Iterable[Session], today: Optional[date] = None, days: int = 7) -> list[Session]:
    """
    Sessions that run at least once in [today, today + days].
    """
    start = today or today_local()
    window_start = local_iso_date(start)
    window_end = local_iso_date(start + timedelta(days=days))
    return [s for s in sessions if session_runs_between(s, window_start, window_end)]


def program_options(
    sessions: Iterable[Session],
    category: str = "",
    subcategory: str = "",
    text: str = "",
) -> list[str]:
    """
    Sorted unique program titles for autocomplete.

    Category membership is tested per session so age-gated subcategories
    only offer titles of sessions with a fitting age range.
    """
    spec = FilterSpec(category=category, subcategory=subcategory)
    pred = _category_predicate(spec)

    titles: set[str] = set()
    for s in sessions:
        if not s.course_title:
            continue
        if pred is not None and not pred(s):
            continue
        titles.add(s.course_title)

    needle = text.strip().lower()
    if needle:
        titles = {t for t in titles if needle in t.lower()}
    return sorted(titles, key=lambda t: (t.lower(), t))


def location_options(sessions: Iterable[Session], locations: Iterable[Location], text: str = "") -> list[str]:
    """
    Sorted names of locations hosting at least one session.
    """
    hosting = {s.location_id for s in sessions}
    names = {loc.name for loc in locations if loc.location_id in hosting and loc.name}

    needle = text.strip().lower()
    if needle:
        names = {n for n in names if needle in n.lower()}
    return sorted(names, key=lambda n: (n.lower(), n))


def _has_programs(
    sessions: list[Session],
    category_id: str,
    subcategory_id: Optional[str],
    window_start: str,
    window_end: str,
) -> bool:
    for s in sessions:
        if not s.course_title or not s.first_date:
            continue
        if not session_runs_between(s, window_start, window_end):
            continue
        if matches_category(s.course_title, category_id, subcategory_id, s.age_min, s.age_max):
            return True
    return False


def _next_week(today: Optional[date]) -> tuple[str, str]:
    start = today or today_local()
    return local_iso_date(start), local_iso_date(start + timedelta(days=7))


def available_categories(sessions: Iterable[Session], today: Optional[date] = None) -> list[Category]:
    """
    Categories (by display name) with at least one program in the coming week.

    With no sessions loaded yet every category is offered.
    """
    sessions = list(sessions)
    if not sessions:
        return categories_by_name()
    window_start, window_end = _next_week(today)
    return [c for c in categories_by_name() if _has_programs(sessions, c.id, None, window_start, window_end)]


def available_subcategories(
    sessions: Iterable[Session],
    category_id: str,
    today: Optional[date] = None,
) -> list[Subcategory]:
    sessions = list(sessions)
    if get_category(category_id) is None:
        return []
    subs = subcategories_for(category_id)
    if not sessions:
        return subs
    window_start, window_end = _next_week(today)
    return [sub for sub in subs if _has_programs(sessions, category_id, sub.id, window_start, window_end)]
