"""
Facility geo layer (GeoJSON FeatureCollection).

Each feature's properties.LOCATIONID keys:
- properties.URL      -> public info page
- properties.ADDRESS  -> postal address
- geometry            -> first coordinate pair (Point, LineString or Polygon)

"None" strings in the source are treated as missing values.
This layer only decorates results; nothing is filtered on it.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from dropin.model import Facility, Location, MapLocation, SearchResult, Session
from dropin.timeutils import NONE_SENTINEL


DEFAULT_CITY = "Toronto, ON"


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == NONE_SENTINEL:
        return None
    return text


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def first_coordinate(coordinates: Any) -> Optional[tuple[float, float]]:
    """
    Return (lng, lat) of the first position in a GeoJSON coordinates array.

    Point:      [lng, lat]
    LineString: [[lng, lat], ...]
    Polygon:    [[[lng, lat], ...], ...]
    """
    coord = coordinates
    # descend until we reach a flat position
    while isinstance(coord, list) and coord and isinstance(coord[0], list):
        coord = coord[0]

    if not isinstance(coord, list) or len(coord) < 2:
        return None
    lng, lat = coord[0], coord[1]
    if not (_is_number(lng) and _is_number(lat)):
        return None
    return float(lng), float(lat)


def facilities_from_geojson(data: Any) -> dict[str, Facility]:
    """
    Build a LOCATIONID -> Facility index. Malformed features are skipped.
    """
    out: dict[str, Facility] = {}
    if not isinstance(data, dict):
        return out

    features = data.get("features", [])
    if not isinstance(features, list):
        return out

    for feature in features:
        if not isinstance(feature, dict):
            continue
        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            continue

        location_id = _clean(props.get("LOCATIONID"))
        if not location_id:
            continue

        geometry = feature.get("geometry") or {}
        coords = first_coordinate(geometry.get("coordinates")) if isinstance(geometry, dict) else None

        out[location_id] = Facility(
            location_id=location_id,
            url=_clean(props.get("URL")),
            address=_clean(props.get("ADDRESS")),
            lng=coords[0] if coords else None,
            lat=coords[1] if coords else None,
        )

    return out


def format_address(location: Location, city: str = DEFAULT_CITY) -> str:
    """
    Two-line display address from the location registry:

        {Street No}{Suffix} {Street Name} {Street Type} {Direction}
        {city}  {Postal Code}
    """
    parts = [
        _clean(location.street_no),
        _clean(location.street_no_suffix),
        _clean(location.street_name),
        _clean(location.street_type),
        _clean(location.street_direction),
    ]
    street = " ".join(p for p in parts if p)

    postal = _clean(location.postal_code)
    city_line = f"{city}  {postal}" if postal else city

    return f"{street}\n{city_line}" if street else city_line


def _marker(location: Location, facility: Optional[Facility], city: str) -> Optional[MapLocation]:
    if facility is None or facility.lat is None or facility.lng is None:
        return None
    return MapLocation(
        name=location.name,
        lat=facility.lat,
        lng=facility.lng,
        address=format_address(location, city) or None,
        url=facility.url,
    )


def map_locations(
    results: Iterable[SearchResult],
    locations: Iterable[Location],
    facilities: Mapping[str, Facility],
    selected: Iterable[str] = (),
    city: str = DEFAULT_CITY,
) -> list[MapLocation]:
    """
    One marker per location name: first every result's location, then any
    selected location without results. Locations without coordinates are
    left off the map.
    """
    by_name: dict[str, Location] = {}
    for loc in locations:
        by_name.setdefault(loc.name, loc)

    markers: dict[str, MapLocation] = {}

    def add(name: str) -> None:
        if name in markers:
            return
        loc = by_name.get(name)
        if loc is None:
            return
        marker = _marker(loc, facilities.get(str(loc.location_id)), city)
        if marker is not None:
            markers[name] = marker

    for r in results:
        add(r.location)
    for name in selected:
        add(name)

    return list(markers.values())


def all_program_locations(
    sessions: Iterable[Session],
    locations: Iterable[Location],
    facilities: Mapping[str, Facility],
    city: str = DEFAULT_CITY,
) -> list[MapLocation]:
    """
    Markers for every location hosting at least one session (the map shown
    before any filter is applied).
    """
    hosting = {s.location_id for s in sessions}
    markers: dict[str, MapLocation] = {}
    for loc in locations:
        if loc.location_id not in hosting or loc.name in markers:
            continue
        marker = _marker(loc, facilities.get(str(loc.location_id)), city)
        if marker is not None:
            markers[loc.name] = marker
    return list(markers.values())
