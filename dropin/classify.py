"""
Taxonomy classifier.

Maps a program title (plus optional age-range strings) onto the
category/subcategory labels of the rule table in dropin/taxonomy.py.

Matching rules:
- case-insensitive substring matching, no fuzzy logic
- any exclusion keyword present vetoes the subcategory
- fallback subcategories only apply when no sibling in the same
  category applies
- age-derived labels (dropin.taxonomy.AGE_LABELS) are added regardless
  of the title

classify() labels on keywords and age-derived rules only. Subcategory and
category age requirements are applied by matches_category(), the test the
query engine filters with:
- a subcategory's age requirement must hold for the course age range
- an age-gated fallback stands in for keyword matching: any course in the
  age range belongs to it unless a sibling matches

Nothing here raises on malformed input.
"""

from __future__ import annotations

from typing import Iterable, Optional

from dropin.model import AgeRequirement, Category, Label, Subcategory
from dropin.taxonomy import (
    AGE_LABELS,
    CATEGORIES,
    DEFAULT_ICON,
    KEYWORD_INDEX,
    PROGRAM_ICONS,
    get_category,
    get_subcategory,
)
from dropin.timeutils import parse_age_max, parse_age_min


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _contains_any(lower_title: str, needles: Iterable[str]) -> bool:
    return any(n.lower() in lower_title for n in needles)


def _excluded(sub: Subcategory, lower_title: str) -> bool:
    return _contains_any(lower_title, sub.exclusions)


def _meets(req: Optional[AgeRequirement], age_min: int, age_max: int) -> bool:
    if req is None:
        return True
    if req.min is not None and age_min < req.min:
        return False
    if req.max is not None and age_max > req.max:
        return False
    return True


def _age_label_applies(label: Label, age_min: int, age_max: int) -> bool:
    return any(rule.label == label and rule.applies(age_min, age_max) for rule in AGE_LABELS)


def _keyword_match(sub: Subcategory, lower_title: str) -> bool:
    """
    Inclusion keyword present and no exclusion keyword present.
    """
    return _contains_any(lower_title, sub.keywords) and not _excluded(sub, lower_title)


def _subcategory_matches(category: Category, sub: Subcategory, lower_title: str, age_min: int, age_max: int) -> bool:
    """
    Membership of one course in one subcategory, age requirements included.
    """
    if not _meets(sub.age_requirement, age_min, age_max):
        return False

    if _age_label_applies(Label(category.id, sub.id), age_min, age_max):
        return True

    if _excluded(sub, lower_title):
        return False

    if not sub.is_fallback:
        return _contains_any(lower_title, sub.keywords)

    # an age-gated fallback takes every course in its age range
    if sub.age_requirement is None and not _contains_any(lower_title, sub.keywords):
        return False

    # Re-derive the siblings instead of trusting a previous classify() call.
    for sibling in category.subcategories:
        if sibling is sub or sibling.is_fallback:
            continue
        if _subcategory_matches(category, sibling, lower_title, age_min, age_max):
            return False
    return True


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify(title: str, age_min: Optional[str] = None, age_max: Optional[str] = None) -> list[Label]:
    """
    Return every label that applies to `title`, in discovery order:
    age-derived labels, then keyword matches (longest keyword first),
    then fallbacks in table order.

    An empty list means the program is uncategorized.
    """
    lower_title = (title or "").lower()
    lo = parse_age_min(age_min)
    hi = parse_age_max(age_max)

    matches: list[Label] = []
    seen: set[Label] = set()

    def record(label: Label) -> None:
        if label not in seen:
            seen.add(label)
            matches.append(label)

    # 1) age-derived labels
    for rule in AGE_LABELS:
        if rule.applies(lo, hi):
            record(rule.label)

    # 2) keyword pass over non-fallback subcategories
    for category, sub, keyword in KEYWORD_INDEX:
        if keyword not in lower_title:
            continue
        if _excluded(sub, lower_title):
            continue
        record(Label(category.id, sub.id))

    # 3) fallbacks, only where no sibling matched
    for category in CATEGORIES:
        for sub in category.subcategories:
            if not sub.is_fallback:
                continue
            sibling_matched = any(m.category == category.id and m.subcategory != sub.id for m in matches)
            if sibling_matched:
                continue
            if _keyword_match(sub, lower_title):
                record(Label(category.id, sub.id))

    return matches


def matches_category(
    title: str,
    category_id: str,
    subcategory_id: Optional[str] = None,
    age_min: Optional[str] = None,
    age_max: Optional[str] = None,
) -> bool:
    """
    Membership test for one category, or one subcategory inside it.

    Without a subcategory the category-level age requirement is checked
    first, then any subcategory of the category must match.
    """
    category = get_category(category_id)
    if category is None:
        return False

    lower_title = (title or "").lower()
    lo = parse_age_min(age_min)
    hi = parse_age_max(age_max)

    if subcategory_id:
        sub = get_subcategory(category_id, subcategory_id)
        if sub is None:
            return False
        return _subcategory_matches(category, sub, lower_title, lo, hi)

    if not _meets(category.age_requirement, lo, hi):
        return False
    return any(_subcategory_matches(category, sub, lower_title, lo, hi) for sub in category.subcategories)


def icon_for(title: str, age_min: Optional[str] = None, age_max: Optional[str] = None) -> str:
    """
    Icon token for a program: literal activity mappings first, then the
    fallback icon of the first matching category, then DEFAULT_ICON.
    """
    lower_title = (title or "").lower()

    for keywords, icon in PROGRAM_ICONS:
        if _contains_any(lower_title, keywords):
            return icon

    lo = parse_age_min(age_min)
    hi = parse_age_max(age_max)
    for category in CATEGORIES:
        for sub in category.subcategories:
            if _subcategory_matches(category, sub, lower_title, lo, hi):
                return category.fallback_icon

    return DEFAULT_ICON


def course_titles_for_category(
    titles: Iterable[str],
    category_id: str,
    subcategory_id: str = "",
    age_min: Optional[str] = None,
    age_max: Optional[str] = None,
) -> list[str]:
    """
    Filter a list of titles down to one category (or subcategory).

    "all" or an empty category keeps every title.
    """
    titles = list(titles)
    if not category_id or category_id == "all":
        return titles

    if get_category(category_id) is None:
        return []

    if subcategory_id and get_subcategory(category_id, subcategory_id) is None:
        return []

    return [t for t in titles if matches_category(t, category_id, subcategory_id or None, age_min, age_max)]
