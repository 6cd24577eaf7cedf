"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects the engine works on:
- Session / Location / Facility: the read-only dataset snapshot
- Category / Subcategory / AgeRequirement: the taxonomy rule table
- Label: one (category, subcategory) classification
- FilterSpec / SearchResult / MapLocation: per-query input and output

Raw string fields keep the source data's "None" sentinel verbatim;
interpretation happens in the classifier and the query engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, List, Tuple


# ---------------------------------------------------------------------------
# Dataset records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    """
    One drop-in offering instance as stored in the session registry.
    """

    course_title: str
    location_id: int
    section: str
    age_min: str
    age_max: str
    date_range: str
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    first_date: str
    last_date: str
    course_id: Optional[int] = None


@dataclass(frozen=True)
class Location:
    """
    One facility entry from the location registry.

    Address components are only used for display.
    """

    location_id: int
    name: str
    street_no: str = ""
    street_no_suffix: str = ""
    street_name: str = ""
    street_type: str = ""
    street_direction: str = ""
    postal_code: str = ""
    district: str = ""


@dataclass(frozen=True)
class Facility:
    """
    One feature of the external GeoJSON facility layer.
    """

    location_id: str
    url: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgeRequirement:
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(frozen=True)
class Subcategory:
    id: str
    name: str
    keywords: Tuple[str, ...] = ()
    exclusions: Tuple[str, ...] = ()
    is_fallback: bool = False
    age_requirement: Optional[AgeRequirement] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    fallback_icon: str
    subcategories: Tuple[Subcategory, ...]
    age_requirement: Optional[AgeRequirement] = None


@dataclass(frozen=True)
class Label:
    """
    One classification result: a subcategory inside a category.
    """

    category: str
    subcategory: str


# ---------------------------------------------------------------------------
# Query input / output
# ---------------------------------------------------------------------------


@dataclass
class FilterSpec:
    """
    What the user is searching for. Empty fields mean "no constraint".

    date: "" | "this-week" | "YYYY-MM-DD"
    time: "" | "Any Time" | "HH:MM" | "h:MM AM/PM"
    """

    course_title: str = ""
    category: str = ""
    subcategory: str = ""
    date: str = ""
    time: str = ""
    location: List[str] = field(default_factory=list)
    age: str = ""


@dataclass
class SearchResult:
    """
    One matched session, projected for display.
    """

    course_title: str
    location: str
    location_id: int
    day_of_week: str
    start_time: str
    end_time: str
    date: str
    location_url: Optional[str]
    location_address: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    icon: str
    age_range: str
    age_min: str
    age_max: str


@dataclass
class MapLocation:
    name: str
    lat: float
    lng: float
    address: Optional[str] = None
    url: Optional[str] = None
