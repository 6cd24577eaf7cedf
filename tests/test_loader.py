"""
Unit tests for dataset loading.

Loader contract:
- local paths and http(s) URLs are both accepted
- missing files, HTTP errors and broken JSON raise DataLoadError
- individual records are coerced leniently
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from dropin.loader import (
    DataLoadError,
    data_dir,
    load_json,
    load_sessions,
    load_snapshot,
    location_from_record,
    session_from_record,
)


SESSION_RECORD = {
    "_id": 7,
    "Location ID": 2,
    "Course_ID": 11,
    "Course Title": "Lane Swim",
    "Section": "A",
    "Age Min": "18",
    "Age Max": "None",
    "Date Range": "2025-01-01 to 2025-12-31",
    "Start Hour": 6,
    "Start Minute": 30,
    "End Hour": 8,
    "End Min": 0,
    "First Date": "2025-01-01",
    "Last Date": "2025-12-31",
}

LOCATION_RECORD = {
    "Location ID": 2,
    "Location Name": "Regent Park Community Centre",
    "Street No": "402",
    "Street No Suffix": "None",
    "Street Name": "Shuter",
    "Street Type": "St",
    "Street Direction": "None",
    "Postal Code": "M5A 1X6",
    "District": "Toronto East York",
}

GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"LOCATIONID": 2, "URL": "https://example.org/regent", "ADDRESS": "402 Shuter St"},
            "geometry": {"type": "Point", "coordinates": [-79.36, 43.66]},
        }
    ],
}


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestRecords(unittest.TestCase):
    def test_session_from_record(self) -> None:
        s = session_from_record(SESSION_RECORD)
        self.assertEqual(s.course_title, "Lane Swim")
        self.assertEqual(s.location_id, 2)
        self.assertEqual(s.age_max, "None")
        self.assertEqual((s.start_hour, s.start_minute, s.end_hour, s.end_minute), (6, 30, 8, 0))
        self.assertEqual(s.course_id, 11)

    def test_session_from_record_is_lenient(self) -> None:
        s = session_from_record({"Course Title": "Yoga", "Start Hour": "x", "Location ID": "3"})
        self.assertEqual(s.start_hour, 0)
        self.assertEqual(s.location_id, 3)
        self.assertEqual(s.date_range, "")
        self.assertIsNone(s.course_id)

        self.assertEqual(session_from_record({}).location_id, -1)

    def test_location_from_record(self) -> None:
        loc = location_from_record(LOCATION_RECORD)
        self.assertEqual(loc.location_id, 2)
        self.assertEqual(loc.name, "Regent Park Community Centre")
        self.assertEqual(loc.postal_code, "M5A 1X6")


class TestLoadJson(unittest.TestCase):
    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(DataLoadError):
                load_json(Path(d) / "missing.json")

    def test_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "broken.json"
            p.write_text("{not json", encoding="utf-8")
            with self.assertRaises(DataLoadError):
                load_json(p)

    def test_sessions_must_be_a_list(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = _write(Path(d) / "sessions.json", {"Course Title": "Yoga"})
            with self.assertRaises(DataLoadError):
                load_sessions(p)

    def test_non_object_records_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = _write(Path(d) / "sessions.json", [SESSION_RECORD, "junk", 3])
            self.assertEqual(len(load_sessions(p)), 1)

    @mock.patch("dropin.loader.requests.get")
    def test_url_source(self, get: mock.MagicMock) -> None:
        get.return_value.json.return_value = [SESSION_RECORD]
        sessions = load_sessions("https://example.org/Drop-in.json", timeout=5)

        get.assert_called_once_with("https://example.org/Drop-in.json", timeout=5)
        get.return_value.raise_for_status.assert_called_once()
        self.assertEqual(sessions[0].course_title, "Lane Swim")

    @mock.patch("dropin.loader.requests.get")
    def test_url_http_error(self, get: mock.MagicMock) -> None:
        get.return_value.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        with self.assertRaises(DataLoadError):
            load_json("https://example.org/Drop-in.json")

    @mock.patch("dropin.loader.requests.get")
    def test_url_bad_json(self, get: mock.MagicMock) -> None:
        get.return_value.json.side_effect = ValueError("Expecting value")
        with self.assertRaises(DataLoadError):
            load_json("https://example.org/Drop-in.json")


class TestSnapshot(unittest.TestCase):
    def test_load_from_paths(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            base = Path(d)
            snapshot = load_snapshot(
                sessions_source=_write(base / "s.json", [SESSION_RECORD]),
                locations_source=_write(base / "l.json", [LOCATION_RECORD]),
                geo_source=_write(base / "g.geojson", GEOJSON),
            )
        self.assertEqual(len(snapshot.sessions), 1)
        self.assertEqual(snapshot.locations[0].name, "Regent Park Community Centre")
        self.assertEqual(snapshot.facilities["2"].url, "https://example.org/regent")

    def test_data_dir_override(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            base = Path(d)
            _write(base / "Drop-in.json", [SESSION_RECORD, SESSION_RECORD])
            _write(base / "Locations.json", [LOCATION_RECORD])

            with mock.patch.dict(os.environ, {"DROPIN_DATA_DIR": d}):
                self.assertEqual(data_dir(), base)
                snapshot = load_snapshot(with_geo=False)

        self.assertEqual(len(snapshot.sessions), 2)
        self.assertEqual(snapshot.facilities, {})

    def test_failure_propagates(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            base = Path(d)
            with self.assertRaises(DataLoadError):
                load_snapshot(
                    sessions_source=base / "missing.json",
                    locations_source=_write(base / "l.json", [LOCATION_RECORD]),
                    with_geo=False,
                )

    def test_bundled_sample_data(self) -> None:
        with mock.patch.dict(os.environ, {"DROPIN_DATA_DIR": ""}):
            snapshot = load_snapshot()
        self.assertTrue(snapshot.sessions)
        self.assertTrue(snapshot.locations)
        self.assertIn("1", snapshot.facilities)


if __name__ == "__main__":
    unittest.main()
