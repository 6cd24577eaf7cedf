"""
Static program taxonomy (rule table).

Everything the classifier knows lives here as data:
- CATEGORIES: category -> subcategories with inclusion keywords,
  exclusion keywords, fallback flag and age requirements
- AGE_LABELS: labels derived purely from a session's age range
- PROGRAM_ICONS: literal keyword -> icon token mappings

The table is built once at import time and never mutated.
Keywords are stored lowercase; matching is plain substring matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dropin.model import AgeRequirement, Category, Label, Subcategory


SENIOR = AgeRequirement(min=60)
YOUTH = AgeRequirement(min=13, max=24)
EARLY_YEARS = AgeRequirement(max=6)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

CATEGORIES: tuple[Category, ...] = (
    Category(
        id="arts-crafts",
        name="Arts & Crafts",
        fallback_icon="palette",
        subcategories=(
            Subcategory(
                "visual-arts",
                "Visual Arts",
                ("painting", "drawing", "photography", "visual art", "design", "colouring", "stained glass"),
                exclusions=("arthritis", "arthritic"),
            ),
            Subcategory(
                "crafts",
                "Crafts",
                ("craft", "sewing", "knitting", "crochet", "quilting", "decoupage", "paper tole", "bunka", "carving"),
            ),
            Subcategory(
                "music",
                "Music",
                ("music", "band", "choir", "drumming", "karaoke", "drum", "open mic"),
                exclusions=("no music",),
            ),
            Subcategory("dance", "Dance", ("dance", "tango", "ballroom", "hip hop", "line dance", "vogue")),
            Subcategory("creative-writing", "Creative Writing", ("creative writing", "writing")),
            Subcategory(
                "other-arts",
                "Other Arts Programs",
                ("art", "bunka", "colouring", "jewellery making"),
                exclusions=("arthritis", "martial arts"),
                is_fallback=True,
            ),
        ),
    ),
    Category(
        id="family",
        name="Family Programs",
        fallback_icon="family_restroom",
        age_requirement=EARLY_YEARS,
        subcategories=(
            Subcategory("family-swim", "Family Swim", ("family swim",)),
            Subcategory("family-sports", "Family Sports", ("with family",)),
            Subcategory("family-arts", "Family Arts", ("family arts",)),
            Subcategory(
                "early-years",
                "Early Years",
                ("early years", "preschool", "caregiver", "soccer"),
                exclusions=("leisure skate: child with caregiver",),
                age_requirement=EARLY_YEARS,
            ),
            Subcategory(
                "other-family-programs",
                "Other Family Programs",
                ("family",),
                is_fallback=True,
                age_requirement=EARLY_YEARS,
            ),
        ),
    ),
    Category(
        id="fitness",
        name="Fitness & Wellness",
        fallback_icon="cardio_load",
        subcategories=(
            Subcategory("yoga", "Yoga", ("yoga",)),
            Subcategory("pilates", "Pilates", ("pilates",)),
            Subcategory("cardio", "Cardio", ("cardio",)),
            Subcategory("zumba", "Zumba", ("zumba",)),
            Subcategory("strength", "Strength Training", ("strength", "weight", "gym")),
            Subcategory("hiit", "HIIT", ("hiit", "boot camp")),
            Subcategory(
                "gentle-fitness",
                "Gentle Fitness",
                ("gentle", "mobility", ": chair", "osteofit", "tai chi", "qigong"),
            ),
            Subcategory("walking", "Walking", ("walk", "running track"), exclusions=("aquatic fitness",)),
            Subcategory(
                "other-fitness",
                "Other Fitness & Wellness",
                ("fitness", "wellness", "cycle", "fit", "pedal", "meditation"),
                is_fallback=True,
            ),
        ),
    ),
    Category(
        id="games",
        name="Games & Recreation",
        fallback_icon="toys_and_games",
        subcategories=(
            Subcategory("club", "Clubs", ("club",)),
            Subcategory("board-games", "Board Games", ("board games", "games: board", "chess")),
            Subcategory("card-games", "Card Games", ("cards", "euchre", "bridge", "cribbage")),
            Subcategory("billiards", "Billiards & Pool", ("billiards", "snooker", "pool")),
            Subcategory("darts", "Darts", ("darts",)),
            Subcategory("video-games", "Video Games", ("video game", "gaming")),
            Subcategory("bingo", "Bingo", ("bingo",)),
            Subcategory(
                "other-games",
                "Other Games & Recreation",
                ("game", "archery", "bocce", "bowling"),
                is_fallback=True,
            ),
        ),
    ),
    Category(
        id="older-adult",
        name="Older Adult Programs",
        fallback_icon="group",
        age_requirement=SENIOR,
        subcategories=(
            Subcategory(
                "older-adult-arts-crafts",
                "Older Adult Arts & Crafts",
                (
                    "painting", "drawing", "photography", "visual art", "design", "colouring", "craft",
                    "sewing", "knitting", "crochet", "quilting", "decoupage", "paper tole", "bunka",
                    "stained glass", "carving", "writing", "music", "band", "choir", "drumming",
                    "karaoke", "drum", "open mic", "dance", "tango", "ballroom",
                ),
                exclusions=("dart",),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "older-adult-games",
                "Older Adult Games & Recreation",
                (
                    "club", "bingo", "bocce", "game", "cards", "bowling", "dance", "bridge", "euchre",
                    "cribbage", "billiards", "pool", "snooker", "darts", "archery", "karaoke", "tango",
                    "ballroom", "hip hop", "line dance", "vogue",
                ),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "older-adult-swimming",
                "Older Adult Swimming & Aquatics",
                ("swim", "aquatic"),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "older-adult-fitness",
                "Older Adult Fitness & Wellness",
                ("yoga", "pilates", "zumba", "tai chi", "fit", "strength", "walk", "cardio"),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "older-adult-sports",
                "Older Adult Sports",
                (
                    "pickleball", "basketball", "badminton", "volleyball", "soccer", "tennis",
                    "table tennis", "multi-sport", "hockey", "shinny", "sport", "baseball", "dodgeball",
                    "skateboarding", "cricket", "golf",
                ),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "older-adult-skating",
                "Older Adult Skating & Ice Sports",
                ("shinny", "skate", "hockey"),
                exclusions=("ball hockey", "skateboard"),
                age_requirement=SENIOR,
            ),
            Subcategory(
                "other-older-adult",
                "Other Older Adult Programs",
                ("older adult", "osteo"),
                is_fallback=True,
                age_requirement=SENIOR,
            ),
        ),
    ),
    Category(
        id="skating",
        name="Skating & Ice Sports",
        fallback_icon="ice_skating",
        subcategories=(
            Subcategory("hockey", "Hockey", ("hockey", "shinny"), exclusions=("ball hockey",)),
            Subcategory("leisure-skate", "Leisure Skate", ("leisure skate",)),
            Subcategory("figure-skating", "Figure Skating", ("figure skating",)),
            Subcategory("roller-skating", "Roller Skating", ("roller skating",)),
            Subcategory("other-skating", "Other Skating & Ice Sports", ("skate", "skating"), is_fallback=True),
        ),
    ),
    Category(
        id="specialized",
        name="Specialized Programs",
        fallback_icon="support",
        subcategories=(
            Subcategory("adapted", "Adapted Programs", ("adapted", "parasport")),
            Subcategory("lgbtq", "LGBTQ+ Programs", ("lgbtq", "2slgbtq")),
            Subcategory("women-only", "Women Only", ("women only", "(women)", "girls")),
            # age-only: matched from the session's age range, never from the title
            Subcategory("senior", "Senior Programs", (), age_requirement=SENIOR),
        ),
    ),
    Category(
        id="sports",
        name="Sports & Athletics",
        fallback_icon="sports",
        subcategories=(
            Subcategory("basketball", "Basketball", ("basketball",)),
            Subcategory("badminton", "Badminton", ("badminton",)),
            Subcategory("pickleball", "Pickleball", ("pickleball",)),
            Subcategory("soccer", "Soccer", ("soccer",)),
            Subcategory("volleyball", "Volleyball", ("volleyball",)),
            Subcategory("table-tennis", "Table Tennis", ("table tennis",)),
            Subcategory("hockey", "Hockey", ("hockey", "shinny")),
            Subcategory("multi-sport", "Multi-Sport", ("multi-sport", "multi sport")),
            Subcategory(
                "other-sports",
                "Other Sports & Athletics",
                ("sport", "baseball", "dodgeball", "tennis", "squash", "skateboarding", "cricket", "golf"),
                is_fallback=True,
            ),
        ),
    ),
    Category(
        id="swimming",
        name="Swimming & Aquatics",
        fallback_icon="pool",
        subcategories=(
            Subcategory("lane-swim", "Lane Swim", ("lane swim",)),
            Subcategory("leisure-swim", "Leisure Swim", ("leisure swim",)),
            Subcategory("family-swim", "Family Swim", ("family swim",)),
            Subcategory("aquatic-fitness", "Aquatic Fitness", ("aquatic fitness", "water fitness", "water")),
            Subcategory("other-swimming", "Other Swimming", ("swim", "aquatic"), is_fallback=True),
        ),
    ),
    Category(
        id="youth",
        name="Youth Programs",
        fallback_icon="group",
        age_requirement=YOUTH,
        subcategories=(
            Subcategory("youth-clubs", "Youth Clubs", ("club", "zone", "homework"), age_requirement=YOUTH),
            Subcategory(
                "youth-enhanced",
                "Enhanced Youth Spaces Programming",
                ("amped", "chop", "building skills", "stomp", "social environmental"),
                age_requirement=YOUTH,
            ),
            Subcategory("youth-arts", "Youth Arts", ("art", "music", "dance", "craft"), age_requirement=YOUTH),
            Subcategory(
                "youth-fitness",
                "Youth Fitness & Wellness",
                ("gym", "cardio", "wellness"),
                age_requirement=YOUTH,
            ),
            Subcategory(
                "youth-leadership",
                "Youth Leadership",
                ("youth leadership", "youth council"),
                age_requirement=YOUTH,
            ),
            Subcategory(
                "youth-sports",
                "Youth Sports",
                (
                    "sport", "baseball", "basketball", "volleyball", "badminton", "soccer", "dodgeball",
                    "tennis", "skateboarding", "cricket", "golf", "hockey", "shinny",
                ),
                age_requirement=YOUTH,
            ),
            Subcategory(
                "youth-skating",
                "Youth Skating & Ice Sports",
                ("shinny", "skate", "hockey"),
                exclusions=("ball hockey", "skateboard"),
                age_requirement=YOUTH,
            ),
            Subcategory(
                "other-youth",
                "Other Youth Programs",
                ("youth", "teen", "young"),
                is_fallback=True,
                age_requirement=YOUTH,
            ),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Age-derived labels
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgeLabel:
    """
    Emit `label` whenever the session's parsed `field` ("age_min" or
    "age_max") lies within [low, high] (high=None means unbounded).
    """

    field: str
    low: int
    high: Optional[int]
    label: Label

    def applies(self, age_min: int, age_max: int) -> bool:
        value = age_min if self.field == "age_min" else age_max
        if value < self.low:
            return False
        return self.high is None or value <= self.high


AGE_LABELS: tuple[AgeLabel, ...] = (
    AgeLabel("age_min", 60, None, Label("specialized", "senior")),
    AgeLabel("age_max", 13, 24, Label("youth", "other-youth")),
    AgeLabel("age_max", 0, 6, Label("family", "early-years")),
)


# ---------------------------------------------------------------------------
# Icons
# ---------------------------------------------------------------------------

DEFAULT_ICON = "sports"

# Checked in order; the first mapping with a keyword in the title wins.
PROGRAM_ICONS: tuple[tuple[tuple[str, ...], str], ...] = (
    # Sports
    (("basketball",), "sports_basketball"),
    (("soccer",), "sports_soccer"),
    (("volleyball",), "sports_volleyball"),
    (("badminton",), "badminton"),
    (("pickleball",), "pickleball"),
    (("table tennis",), "padel"),
    (("squash",), "sports_tennis"),
    (("hockey", "shinny"), "sports_hockey"),
    (("cricket",), "sports_cricket"),
    (("multi-sport",), "directions_run"),
    # Swimming & aquatics
    (("swimming", "swim", "aquatic fitness"), "pool"),
    # Fitness & wellness
    (("yoga",), "self_improvement"),
    (("pilates",), "self_improvement"),
    (("tai chi",), "taunt"),
    (("strength", "gym"), "fitness_center"),
    (("walk",), "directions_walk"),
    (("open space",), "crop_square"),
    # Arts
    (("dance", "zumba", "ballroom", "vogue"), "taunt"),
    (("music",), "music_note"),
    (("photography",), "photo_camera"),
    # Games & recreation
    (("archery",), "target"),
    (("club",), "groups"),
    (("bocce",), "scatter_plot"),
    (("bowling",), "circle"),
    (("bingo",), "casino"),
    (("chess",), "chess_knight"),
    (("cards",), "playing_cards"),
    (("chop it", "cooking"), "chef_hat"),
    (("snooker",), "counter_8"),
    (("darts",), "target"),
    (("game",), "Ifl"),
    (("skateboard",), "skateboarding"),
    (("lunch",), "flatware"),
    (("movie",), "movie"),
    (("study time",), "dictionary"),
    (("hair",), "self_care"),
    (("video game", "gaming"), "videogame_asset"),
)


# ---------------------------------------------------------------------------
# Precomputed keyword index
# ---------------------------------------------------------------------------


def _build_keyword_index() -> tuple[tuple[Category, Subcategory, str], ...]:
    """
    Flatten every non-fallback (category, subcategory, keyword) triple,
    longest keyword first. The sort is stable, so equal lengths keep
    table order.
    """
    triples: list[tuple[Category, Subcategory, str]] = []
    for category in CATEGORIES:
        for sub in category.subcategories:
            if sub.is_fallback:
                continue
            for keyword in sub.keywords:
                triples.append((category, sub, keyword.lower()))
    triples.sort(key=lambda t: len(t[2]), reverse=True)
    return tuple(triples)


KEYWORD_INDEX = _build_keyword_index()

_CATEGORY_BY_ID: dict[str, Category] = {c.id: c for c in CATEGORIES}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_category(category_id: str) -> Optional[Category]:
    return _CATEGORY_BY_ID.get(category_id)


def get_subcategory(category_id: str, subcategory_id: str) -> Optional[Subcategory]:
    category = get_category(category_id)
    if category is None:
        return None
    for sub in category.subcategories:
        if sub.id == subcategory_id:
            return sub
    return None


def find_parent_category(subcategory_id: str) -> Optional[Category]:
    """
    Return the first category (table order) that owns `subcategory_id`.

    Some ids exist in more than one category (e.g. "hockey", "family-swim");
    the first one wins.
    """
    for category in CATEGORIES:
        if any(sub.id == subcategory_id for sub in category.subcategories):
            return category
    return None


def _is_other(sub: Subcategory) -> bool:
    return sub.is_fallback or "other" in sub.name.lower()


def _display_key(sub: Subcategory) -> tuple[bool, str, str]:
    # specific first, then "Other ..." / fallback entries; alphabetical inside each group
    return (_is_other(sub), sub.name.lower(), sub.id)


def subcategories_for(category_id: str) -> list[Subcategory]:
    category = get_category(category_id)
    if category is None:
        return []
    return sorted(category.subcategories, key=_display_key)


def all_subcategories() -> list[Subcategory]:
    """
    Every subcategory across the taxonomy, unique by id (first wins).
    """
    seen: set[str] = set()
    out: list[Subcategory] = []
    for category in CATEGORIES:
        for sub in category.subcategories:
            if sub.id in seen:
                continue
            seen.add(sub.id)
            out.append(sub)
    return sorted(out, key=_display_key)


def categories_by_name() -> list[Category]:
    return sorted(CATEGORIES, key=lambda c: (c.name.lower(), c.id))
