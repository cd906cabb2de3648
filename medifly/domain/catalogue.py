"""
Medicine catalogue search.

Substring hits on name or description are returned first, in catalogue
order.  Everything else falls back to the fuzzy tier of ``match_score``
(the better of name and description) and is kept only above
``threshold``, best first.  Out-of-stock medicines never appear.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .entities import Medicine
from .matching import FUZZY_CAP, match_score

DEFAULT_FUZZY_THRESHOLD = 30.0


def search_medicines(
    medicines: Iterable[Medicine],
    text: Optional[str] = None,
    category: Optional[str] = None,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
    fuzzy_cap: float = FUZZY_CAP,
) -> list[Medicine]:
    available = [
        m
        for m in medicines
        if m.in_stock and (not category or m.category == category)
    ]
    needle = (text or "").strip().lower()
    if not needle:
        return available

    substring_hits: list[Medicine] = []
    fuzzy_hits: list[tuple[float, Medicine]] = []
    for m in available:
        if needle in m.name.lower() or needle in m.description.lower():
            substring_hits.append(m)
            continue
        score = max(
            match_score(needle, m.name, fuzzy_cap),
            match_score(needle, m.description, fuzzy_cap),
        )
        if score > threshold:
            fuzzy_hits.append((score, m))

    fuzzy_hits.sort(key=lambda item: -item[0])
    return substring_hits + [m for _, m in fuzzy_hits]


def list_categories(medicines: Iterable[Medicine]) -> list[str]:
    return sorted({m.category for m in medicines})


def duplicate_medicines(medicines: Iterable[Medicine]) -> list[Medicine]:
    """Every medicine after the first one sharing its exact name."""
    seen: set[str] = set()
    duplicates: list[Medicine] = []
    for m in medicines:
        if m.name in seen:
            duplicates.append(m)
        else:
            seen.add(m.name)
    return duplicates
