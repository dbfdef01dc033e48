"""
Visibility tiers for shareable content.

Rows store one of `private`, `public`, `group` or `groups` (the last two are
synonyms from the single-group and multi-group sharing models), or nothing at
all on old rows. Everything downstream works on the three-valued `Visibility`
returned by `classify`; the raw string is only inspected here.
"""

from enum import Enum
from typing import List, Optional


class Visibility(str, Enum):
    PRIVATE = "private"
    SHARED = "shared"
    PUBLIC = "public"


class ScopeFilter(str, Enum):
    ALL = "all"
    PRIVATE = "private"
    SHARED = "shared"
    PUBLIC = "public"


SHARED_RAW_VALUES = ("group", "groups")

# Order of the listing sections
SECTION_ORDER = [Visibility.PRIVATE, Visibility.SHARED, Visibility.PUBLIC]


def classify(raw: Optional[str]) -> Visibility:
    """Normalize a stored visibility value. Unknown values are private."""
    if raw == "public":
        return Visibility.PUBLIC
    if raw in SHARED_RAW_VALUES:
        return Visibility.SHARED
    return Visibility.PRIVATE


def stored_value(visibility: Visibility) -> str:
    """Value written to the visibility column when saving"""
    if visibility == Visibility.SHARED:
        return "groups"
    return visibility.value


def raw_values_for(visibility: Visibility) -> List[str]:
    """Raw column values that classify into `visibility` (null rows aside)"""
    if visibility == Visibility.SHARED:
        return list(SHARED_RAW_VALUES)
    return [visibility.value]


def normalize_scope(raw: Optional[str]) -> ScopeFilter:
    # "group" is the value the flashcard list used to submit
    if raw == "group":
        return ScopeFilter.SHARED
    try:
        return ScopeFilter(raw)
    except ValueError:
        return ScopeFilter.ALL


def scope_includes(scope: ScopeFilter, section: Visibility) -> bool:
    return scope == ScopeFilter.ALL or scope.value == section.value


def badge_label(raw: Optional[str]) -> str:
    if raw in ("private", "public") or raw in SHARED_RAW_VALUES:
        return raw.upper()
    return "PRIVATE"
