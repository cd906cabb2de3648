"""
Ranked Nearby-Pharmacy Query
============================

Composes the Haversine estimator and the tiered text matcher:

1. **Eligibility**  -- only ``active`` pharmacies are considered.
2. **Geofilter**    -- drop candidates farther than ``radius_km``.
3. **Ranking**
   * no search text -> nearest first (stable on input order);
   * search text    -> weighted score over name / address / phone,
     candidates scoring at or below the noise threshold are dropped,
     then highest score first, nearer first on ties, input order last.

Weights and thresholds live on ``SearchConfig`` and are handed in by the
caller, so two differently tuned rankers can coexist in one process.

Complexity
----------
Let N = candidates, L = field length.

* Geofilter: O(N)
* Scoring:   O(N x L^2) worst case (Levenshtein fallback)
* Sorting:   O(N log N)

The candidate set is the full pharmacy directory (tens to hundreds of
rows), so a linear scan is used instead of a spatial index.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .distance import EARTH_RADIUS_KM, distance_km
from .entities import GeoPoint, Pharmacy
from .matching import FUZZY_CAP, SUBSTRING_SCORE, match_score, phone_score


class InvalidSearchQuery(ValueError):
    """Raised for non-finite coordinates or a negative radius."""


@dataclass(frozen=True)
class SearchConfig:
    earth_radius_km: float = EARTH_RADIUS_KM
    noise_threshold: float = 25.0
    name_weight: float = 0.5
    address_weight: float = 0.35
    phone_weight: float = 0.15
    fuzzy_cap: float = FUZZY_CAP

    def __post_init__(self) -> None:
        if not 0 <= self.fuzzy_cap < SUBSTRING_SCORE:
            raise ValueError(
                f"fuzzy_cap must be in [0, {SUBSTRING_SCORE:g}), got {self.fuzzy_cap}"
            )


DEFAULT_SEARCH_CONFIG = SearchConfig()


@dataclass(frozen=True)
class SearchQuery:
    origin: GeoPoint
    radius_km: float
    text: Optional[str] = None

    def validate(self) -> None:
        lat, lng = self.origin.latitude, self.origin.longitude
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidSearchQuery("Origin coordinates must be finite")
        if not math.isfinite(self.radius_km) or self.radius_km < 0:
            raise InvalidSearchQuery("Radius must be a non-negative number")

    @property
    def normalized_text(self) -> str:
        return (self.text or "").strip()


@dataclass(frozen=True)
class RankedResult:
    pharmacy: Pharmacy
    distance_km: float
    score: float = 0.0


def pharmacy_score(
    text: str, pharmacy: Pharmacy, config: SearchConfig = DEFAULT_SEARCH_CONFIG
) -> float:
    """Weighted relevance of *pharmacy* to a non-empty search *text*."""
    return (
        config.name_weight * match_score(text, pharmacy.name, config.fuzzy_cap)
        + config.address_weight * match_score(text, pharmacy.address, config.fuzzy_cap)
        + config.phone_weight * phone_score(text, pharmacy.phone)
    )


def rank_nearby(
    query: SearchQuery,
    candidates: Iterable[Pharmacy],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[RankedResult]:
    """Return active pharmacies within the query radius, best first.

    An empty list means nothing matched; it is not an error.
    """
    query.validate()

    in_range: list[RankedResult] = []
    for pharmacy in candidates:
        if not pharmacy.active:
            continue
        d = distance_km(query.origin, pharmacy.location, config.earth_radius_km)
        if d <= query.radius_km:
            in_range.append(RankedResult(pharmacy=pharmacy, distance_km=d))

    text = query.normalized_text
    if not text:
        # sorted() is stable, so equal distances keep input order
        return sorted(in_range, key=lambda r: r.distance_km)

    scored = [
        RankedResult(r.pharmacy, r.distance_km, pharmacy_score(text, r.pharmacy, config))
        for r in in_range
    ]
    kept = [r for r in scored if r.score > config.noise_threshold]
    return sorted(kept, key=lambda r: (-r.score, r.distance_km))
