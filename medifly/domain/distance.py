"""
Distance calculation using the Haversine formula.

Assumption
----------
The Earth is treated as a sphere (no ellipsoidal correction).  Delivery
radii are at most ~100 km, where the error is well below what matters
for "nearest pharmacy first" ordering.

Inputs must be finite; callers validate coordinates before calling.

Complexity: O(1) per call.
"""

import math

from .entities import GeoPoint

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    radius_km: float = EARTH_RADIUS_KM,
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    h = min(h, 1.0)  # rounding near antipodes
    return 2 * radius_km * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_km(
    a: GeoPoint, b: GeoPoint, radius_km: float = EARTH_RADIUS_KM
) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude, radius_km)
