"""
Unit tests for share links.

Link contract:
- category, subcategory, program, locations and age survive a round trip
- date and time are never carried; they are recomputed on open
"""

import unittest
from datetime import datetime
from urllib.parse import parse_qs

from dropin.model import FilterSpec
from dropin.sharing import decode_filter_spec, encode_filter_spec, has_shared_filters


NOW = datetime(2025, 6, 10, 10, 15)


class TestSharing(unittest.TestCase):
    def test_roundtrip(self) -> None:
        spec = FilterSpec(
            course_title="Lane Swim & Aquafit",
            category="swimming",
            subcategory="lane-swim",
            date="2025-06-20",
            time="18:00",
            location=["Regent Park Community Centre", "Toronto Pan Am Sports Centre"],
            age="15",
        )
        link = encode_filter_spec(spec, "https://example.org/finder")
        self.assertTrue(link.startswith("https://example.org/finder?"))

        decoded = decode_filter_spec(link, now=NOW)
        self.assertEqual(decoded.course_title, spec.course_title)
        self.assertEqual(decoded.category, spec.category)
        self.assertEqual(decoded.subcategory, spec.subcategory)
        self.assertEqual(set(decoded.location), set(spec.location))
        self.assertEqual(decoded.age, spec.age)

    def test_date_and_time_not_in_link(self) -> None:
        spec = FilterSpec(category="sports", date="2025-06-20", time="18:00")
        query = encode_filter_spec(spec)
        params = parse_qs(query)
        self.assertEqual(set(params), {"category"})

        decoded = decode_filter_spec(query, now=NOW)
        self.assertEqual(decoded.date, "2025-06-10")
        self.assertEqual(decoded.time, "10:30")

    def test_empty_spec(self) -> None:
        self.assertEqual(encode_filter_spec(FilterSpec()), "")
        self.assertEqual(encode_filter_spec(FilterSpec(), "https://example.org/"), "https://example.org/")
        self.assertFalse(has_shared_filters("https://example.org/"))
        self.assertTrue(has_shared_filters("?category=sports"))

    def test_decode_ignores_unknown_and_empty(self) -> None:
        decoded = decode_filter_spec("?category=fitness&foo=bar&locations=&age=", now=NOW)
        self.assertEqual(decoded.category, "fitness")
        self.assertEqual(decoded.location, [])
        self.assertEqual(decoded.age, "")
        self.assertEqual(decoded.course_title, "")

    def test_decode_late_evening_defaults(self) -> None:
        decoded = decode_filter_spec("category=sports", now=datetime(2025, 6, 10, 23, 30))
        self.assertEqual(decoded.date, "2025-06-11")
        self.assertEqual(decoded.time, "06:00")


if __name__ == "__main__":
    unittest.main()
