"""
Dataset loading (JSON -> snapshot).

Sources:
- session registry  (Drop-in.json):  list of session objects
- location registry (Locations.json): list of location objects
- facility geo layer (.geojson):     FeatureCollection

Each source may be a local path or an http(s):// URL.

Loading is the one place where errors propagate: missing files, HTTP
failures and broken JSON raise DataLoadError. Individual records are
coerced leniently instead; a bad field never drops a record.
"""

from __future__ import annotations

import json
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import requests

from dropin.geojson import facilities_from_geojson
from dropin.model import Facility, Location, Session
from dropin.timeutils import parse_int_or_none


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent

SESSIONS_FILE = "Drop-in.json"
LOCATIONS_FILE = "Locations.json"
GEO_FILE = "facilities.geojson"

HTTP_TIMEOUT = 30


def data_dir() -> Path:
    """
    Directory holding the datasets: $DROPIN_DATA_DIR, else dropin/data/.

    A function instead of a constant so tests can change the environment.
    """
    override = os.environ.get("DROPIN_DATA_DIR", "").strip()
    if override:
        return Path(override)
    return PACKAGE_DIR / "data"


class DataLoadError(Exception):
    """
    A dataset could not be read or decoded.
    """


# ---------------------------------------------------------------------------
# Raw JSON
# ---------------------------------------------------------------------------


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def load_json(source: str | Path, timeout: float = HTTP_TIMEOUT) -> Any:
    """
    Read JSON from a local file or an http(s) URL.
    """
    if _is_url(source):
        try:
            resp = requests.get(str(source), timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise DataLoadError(f"Could not fetch {source}: {exc}") from exc
        except ValueError as exc:
            raise DataLoadError(f"Invalid JSON from {source}: {exc}") from exc

    path = Path(source)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DataLoadError(f"Data file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Could not read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {path}: {exc}") from exc


def _expect_list(data: Any, source: str | Path) -> list[Any]:
    if not isinstance(data, list):
        raise DataLoadError(f"Expected a JSON array in {source}, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Record coercion
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any, default: int = 0) -> int:
    parsed = parse_int_or_none(value)
    return default if parsed is None else parsed


def session_from_record(rec: dict[str, Any]) -> Session:
    """
    Build a Session from one registry object (exact source keys).
    """
    return Session(
        course_title=_text(rec.get("Course Title")),
        location_id=_int(rec.get("Location ID"), default=-1),
        section=_text(rec.get("Section")),
        age_min=_text(rec.get("Age Min")),
        age_max=_text(rec.get("Age Max")),
        date_range=_text(rec.get("Date Range")),
        start_hour=_int(rec.get("Start Hour")),
        start_minute=_int(rec.get("Start Minute")),
        end_hour=_int(rec.get("End Hour")),
        end_minute=_int(rec.get("End Min")),
        first_date=_text(rec.get("First Date")),
        last_date=_text(rec.get("Last Date")),
        course_id=parse_int_or_none(rec.get("Course_ID")),
    )


def location_from_record(rec: dict[str, Any]) -> Location:
    return Location(
        location_id=_int(rec.get("Location ID"), default=-1),
        name=_text(rec.get("Location Name")),
        street_no=_text(rec.get("Street No")),
        street_no_suffix=_text(rec.get("Street No Suffix")),
        street_name=_text(rec.get("Street Name")),
        street_type=_text(rec.get("Street Type")),
        street_direction=_text(rec.get("Street Direction")),
        postal_code=_text(rec.get("Postal Code")),
        district=_text(rec.get("District")),
    )


def load_sessions(source: str | Path, timeout: float = HTTP_TIMEOUT) -> list[Session]:
    records = _expect_list(load_json(source, timeout), source)
    return [session_from_record(r) for r in records if isinstance(r, dict)]


def load_locations(source: str | Path, timeout: float = HTTP_TIMEOUT) -> list[Location]:
    records = _expect_list(load_json(source, timeout), source)
    return [location_from_record(r) for r in records if isinstance(r, dict)]


def load_facilities(source: str | Path, timeout: float = HTTP_TIMEOUT) -> dict[str, Facility]:
    data = load_json(source, timeout)
    if not isinstance(data, dict):
        raise DataLoadError(f"Expected a GeoJSON object in {source}")
    return facilities_from_geojson(data)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Snapshot:
    """
    Everything the engine reads, loaded once.

    Reloading builds a new Snapshot; an existing one is never mutated.
    """

    sessions: tuple[Session, ...]
    locations: tuple[Location, ...]
    facilities: dict[str, Facility] = field(default_factory=dict)


def load_snapshot(
    sessions_source: Optional[str | Path] = None,
    locations_source: Optional[str | Path] = None,
    geo_source: Optional[str | Path] = None,
    timeout: float = HTTP_TIMEOUT,
    with_geo: bool = True,
) -> Snapshot:
    """
    Load the registries and the geo layer concurrently and join.

    Missing source arguments default to files in data_dir(). The geo
    layer is optional when with_geo is False. Any failure raises
    DataLoadError once all loads have finished.
    """
    base = data_dir()
    sessions_src = sessions_source or base / SESSIONS_FILE
    locations_src = locations_source or base / LOCATIONS_FILE
    geo_src = geo_source or (base / GEO_FILE if with_geo else None)

    with ThreadPoolExecutor(max_workers=3) as pool:
        f_sessions = pool.submit(load_sessions, sessions_src, timeout)
        f_locations = pool.submit(load_locations, locations_src, timeout)
        f_geo = pool.submit(load_facilities, geo_src, timeout) if geo_src else None

        sessions = f_sessions.result()
        locations = f_locations.result()
        facilities = f_geo.result() if f_geo is not None else {}

    return Snapshot(sessions=tuple(sessions), locations=tuple(locations), facilities=facilities)
