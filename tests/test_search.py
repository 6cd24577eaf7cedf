"""
Unit tests for the query engine.

Query contract:
- every active predicate must hold; empty fields add no constraint
- time windows are half-open (start inclusive, end exclusive)
- "this-week" is the 7-day window starting today, matched by overlap
- unresolvable location names and subcategories are ignored
- results keep dataset order
"""

import unittest
from datetime import date

from dropin.model import Facility, FilterSpec, Location, Session
from dropin.search import (
    UNKNOWN_LOCATION,
    age_range_display,
    available_categories,
    available_subcategories,
    filter_sessions,
    location_options,
    program_options,
    search,
    upcoming_sessions,
)


def _session(title: str, location_id: int = 1, **overrides) -> Session:
    fields = dict(
        course_title=title,
        location_id=location_id,
        section="A",
        age_min="18",
        age_max="None",
        date_range="2025-01-01 to 2025-12-31",
        start_hour=10,
        start_minute=0,
        end_hour=11,
        end_minute=0,
        first_date="2025-01-01",
        last_date="2025-12-31",
    )
    fields.update(overrides)
    return Session(**fields)


LOCATIONS = [
    Location(1, "Toronto Pan Am Sports Centre", street_no="875", street_name="Morningside", street_type="Ave"),
    Location(2, "Regent Park Community Centre", street_no="402", street_name="Shuter", street_type="St"),
]

TODAY = date(2025, 6, 10)


def _titles(results) -> list[str]:
    return [r.course_title for r in results]


class TestSearchEndToEnd(unittest.TestCase):
    def setUp(self) -> None:
        self.sessions = [
            _session("Lane Swim", 1, start_hour=6, end_hour=8),
            _session("Senior Swim", 1, age_min="60", start_hour=9, end_hour=10),
            _session("Basketball", 2, age_min="16", start_hour=19, end_hour=21),
            _session("Youth Drop-in Basketball", 2, age_min="13", age_max="24", start_hour=16, start_minute=30, end_hour=18),
            _session("Lunch and Learn", 2, start_hour=12, end_hour=13),
        ]
        self.facilities = {"1": Facility("1", url="https://example.org/pan-am", address="875 Morningside Ave")}

    def test_empty_spec_returns_everything_in_order(self) -> None:
        results = search(self.sessions, LOCATIONS, FilterSpec(), today=TODAY)
        self.assertEqual(_titles(results), [s.course_title for s in self.sessions])

    def test_senior_swim_found_through_senior_category(self) -> None:
        spec = FilterSpec(category="specialized", time="09:30")
        results = search(self.sessions, LOCATIONS, spec, self.facilities, today=TODAY)
        self.assertEqual(_titles(results), ["Senior Swim"])

        r = results[0]
        self.assertEqual(r.category, "specialized")
        self.assertEqual(r.subcategory, "senior")
        self.assertEqual(r.location, "Toronto Pan Am Sports Centre")
        self.assertEqual(r.start_time, "09:00")
        self.assertEqual(r.end_time, "10:00")
        self.assertEqual(r.age_range, "Ages 60+")
        self.assertEqual(r.icon, "pool")
        self.assertEqual(r.location_url, "https://example.org/pan-am")
        self.assertEqual(r.location_address, "875 Morningside Ave")

    def test_senior_swim_found_through_swimming(self) -> None:
        spec = FilterSpec(category="swimming", time="9:30 AM")
        results = search(self.sessions, LOCATIONS, spec, today=TODAY)
        self.assertEqual(_titles(results), ["Senior Swim"])

    def test_uncategorized_only_without_category(self) -> None:
        self.assertIn("Lunch and Learn", _titles(search(self.sessions, LOCATIONS, FilterSpec(), today=TODAY)))
        for category in ("sports", "swimming", "games", "fitness"):
            results = search(self.sessions, LOCATIONS, FilterSpec(category=category), today=TODAY)
            self.assertNotIn("Lunch and Learn", _titles(results))

    def test_uncategorized_projection(self) -> None:
        results = search(self.sessions, LOCATIONS, FilterSpec(course_title="Lunch and Learn"), today=TODAY)
        self.assertEqual(len(results), 1)
        self.assertIsNone(results[0].category)
        self.assertIsNone(results[0].subcategory)
        self.assertEqual(results[0].icon, "flatware")

    def test_youth_category_respects_age_range(self) -> None:
        results = search(self.sessions, LOCATIONS, FilterSpec(category="youth"), today=TODAY)
        self.assertEqual(_titles(results), ["Youth Drop-in Basketball"])

    def test_youth_subcategory_and_category_agree_on_age(self) -> None:
        sessions = [_session("Basketball", 2, age_min="6", age_max="18")]
        for spec in (FilterSpec(category="youth"), FilterSpec(category="youth", subcategory="other-youth")):
            self.assertEqual(search(sessions, LOCATIONS, spec, today=TODAY), [], spec)

    def test_older_adult_category_takes_any_senior_session(self) -> None:
        sessions = [_session("Computer Lab", 1, age_min="60"), _session("Computer Lab", 2, age_min="18")]
        results = search(sessions, LOCATIONS, FilterSpec(category="older-adult"), today=TODAY)
        self.assertEqual([r.location_id for r in results], [1])

    def test_sports_category(self) -> None:
        results = search(self.sessions, LOCATIONS, FilterSpec(category="sports", subcategory="basketball"), today=TODAY)
        self.assertEqual(_titles(results), ["Basketball", "Youth Drop-in Basketball"])


class TestPredicates(unittest.TestCase):
    def test_time_window_is_half_open(self) -> None:
        sessions = [_session("Yoga", start_hour=10, end_hour=11)]
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(time="10:00"))), 1)
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(time="10:59"))), 1)
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(time="11:00"))), 0)
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(time="09:59"))), 0)

    def test_any_time_and_garbage_time_add_no_constraint(self) -> None:
        sessions = [_session("Yoga", start_hour=10, end_hour=11)]
        for value in ("Any Time", "any time", "", "later"):
            self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(time=value))), 1, value)

    def test_this_week_overlap(self) -> None:
        before = _session("Before", date_range="2025-06-09 to 2025-06-09", first_date="2025-06-09", last_date="2025-06-09")
        edge = _session("Edge", date_range="2025-06-16 to 2025-06-20", first_date="2025-06-16", last_date="2025-06-20")
        after = _session("After", date_range="2025-06-17 to 2025-06-20", first_date="2025-06-17", last_date="2025-06-20")
        running = _session("Running")

        spec = FilterSpec(date="this-week")
        results = filter_sessions([before, edge, after, running], LOCATIONS, spec, today=TODAY)
        self.assertEqual([s.course_title for s in results], ["Edge", "Running"])

    def test_specific_date_uses_range_string(self) -> None:
        s = _session("Yoga", date_range="2025-06-10 to 2025-06-30")
        self.assertEqual(len(filter_sessions([s], LOCATIONS, FilterSpec(date="2025-06-10"))), 1)
        self.assertEqual(len(filter_sessions([s], LOCATIONS, FilterSpec(date="2025-06-30"))), 1)
        self.assertEqual(len(filter_sessions([s], LOCATIONS, FilterSpec(date="2025-07-01"))), 0)

    def test_malformed_range_falls_back_to_bounds(self) -> None:
        s = _session("Yoga", date_range="every tuesday", first_date="2025-06-01", last_date="2025-06-30")
        self.assertEqual(len(filter_sessions([s], LOCATIONS, FilterSpec(date="2025-06-10"))), 1)
        self.assertEqual(len(filter_sessions([s], LOCATIONS, FilterSpec(date="2025-07-10"))), 0)

        unknown = _session("Yoga", date_range="", first_date="", last_date="")
        self.assertEqual(len(filter_sessions([unknown], LOCATIONS, FilterSpec(date="2025-07-10"))), 1)

    def test_age(self) -> None:
        youth = _session("Youth", age_min="13", age_max="24")
        adult = _session("Adult", age_min="18", age_max="None")
        broken = _session("Broken", age_min="n/a", age_max="")
        sessions = [youth, adult, broken]

        self.assertEqual([s.course_title for s in filter_sessions(sessions, LOCATIONS, FilterSpec(age="15"))], ["Youth", "Broken"])
        self.assertEqual([s.course_title for s in filter_sessions(sessions, LOCATIONS, FilterSpec(age="90"))], ["Adult", "Broken"])
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(age="abc"))), 3)

    def test_location_names_resolve_to_ids(self) -> None:
        sessions = [_session("A", 1), _session("B", 2), _session("C", 3)]

        spec = FilterSpec(location=["Regent Park Community Centre"])
        self.assertEqual([s.course_title for s in filter_sessions(sessions, LOCATIONS, spec)], ["B"])

        spec = FilterSpec(location=["Nowhere", "Regent Park Community Centre"])
        self.assertEqual([s.course_title for s in filter_sessions(sessions, LOCATIONS, spec)], ["B"])

        # nothing resolves: the location filter is skipped
        spec = FilterSpec(location=["Nowhere"])
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, spec)), 3)

    def test_course_title_is_exact(self) -> None:
        sessions = [_session("Lane Swim"), _session("Lane Swim - Women"), _session("lane swim")]
        results = filter_sessions(sessions, LOCATIONS, FilterSpec(course_title="Lane Swim"))
        self.assertEqual([s.course_title for s in results], ["Lane Swim"])

    def test_subcategory_without_category(self) -> None:
        sessions = [_session("Lane Swim"), _session("Leisure Swim"), _session("Basketball")]
        results = filter_sessions(sessions, LOCATIONS, FilterSpec(subcategory="lane-swim"))
        self.assertEqual([s.course_title for s in results], ["Lane Swim"])

        # unknown subcategory id: no constraint
        self.assertEqual(len(filter_sessions(sessions, LOCATIONS, FilterSpec(subcategory="nope"))), 3)

    def test_unknown_category_matches_nothing(self) -> None:
        sessions = [_session("Lane Swim")]
        self.assertEqual(filter_sessions(sessions, LOCATIONS, FilterSpec(category="nope")), [])


class TestProjection(unittest.TestCase):
    def test_unknown_location(self) -> None:
        results = search([_session("Yoga", 99)], LOCATIONS, FilterSpec())
        self.assertEqual(results[0].location, UNKNOWN_LOCATION)
        self.assertIsNone(results[0].location_url)

    def test_display_date(self) -> None:
        s = _session("Yoga", first_date="2025-01-01")
        self.assertEqual(search([s], LOCATIONS, FilterSpec())[0].date, "2025-01-01")
        self.assertEqual(search([s], LOCATIONS, FilterSpec())[0].day_of_week, "Wednesday")

        r = search([s], LOCATIONS, FilterSpec(date="2025-06-12"))[0]
        self.assertEqual(r.date, "2025-06-12")
        self.assertEqual(r.day_of_week, "Thursday")

        r = search([s], LOCATIONS, FilterSpec(date="this-week"), today=TODAY)[0]
        self.assertEqual(r.date, "2025-01-01")

    def test_age_range_display(self) -> None:
        self.assertEqual(age_range_display("18", "None"), "Ages 18+")
        self.assertEqual(age_range_display("13", "24"), "Ages 13-24")


class TestHelpers(unittest.TestCase):
    def test_upcoming_sessions(self) -> None:
        past = _session("Past", first_date="2024-01-01", last_date="2024-12-31")
        soon = _session("Soon", first_date="2025-06-17", last_date="2025-06-30")
        later = _session("Later", first_date="2025-06-18", last_date="2025-06-30")
        current = _session("Current")
        results = upcoming_sessions([past, soon, later, current], today=TODAY)
        self.assertEqual([s.course_title for s in results], ["Soon", "Current"])

    def test_program_options(self) -> None:
        sessions = [_session("Lane Swim"), _session("basketball"), _session("Lane Swim"), _session("Aquafit", age_min="60")]
        self.assertEqual(program_options(sessions), ["Aquafit", "basketball", "Lane Swim"])
        self.assertEqual(program_options(sessions, category="swimming"), ["Lane Swim"])
        self.assertEqual(program_options(sessions, text="SWIM"), ["Lane Swim"])
        self.assertEqual(program_options(sessions, category="older-adult"), ["Aquafit"])

    def test_location_options(self) -> None:
        sessions = [_session("A", 2)]
        self.assertEqual(location_options(sessions, LOCATIONS), ["Regent Park Community Centre"])
        self.assertEqual(location_options(sessions, LOCATIONS, text="pan am"), [])

    def test_available_categories(self) -> None:
        sessions = [_session("Lane Swim"), _session("Basketball", age_min="16")]
        ids = [c.id for c in available_categories(sessions, today=TODAY)]
        self.assertEqual(ids, ["sports", "swimming"])
        self.assertEqual(len(available_categories([])), 10)

    def test_available_subcategories(self) -> None:
        sessions = [_session("Lane Swim"), _session("Basketball", age_min="16")]
        subs = available_subcategories(sessions, "sports", today=TODAY)
        self.assertEqual([s.id for s in subs], ["basketball"])
        self.assertEqual(available_subcategories(sessions, "nope", today=TODAY), [])


if __name__ == "__main__":
    unittest.main()
