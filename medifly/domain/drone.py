"""
Drone Delivery Simulation
=========================

Cosmetic position model for orders that are ``in_flight``.  Each step
moves the drone a fixed share of the *remaining* offset toward the
drop-off point (exponential approach), so the drone slows as it nears
the customer and never overshoots.

Step model
----------
  ratio     = 1 - (1 - MOVE_RATIO) ** (elapsed / TICK)
  new_pos   = pos + (dest - pos) x ratio

With ``elapsed == TICK`` this is exactly ``MOVE_RATIO`` of the remaining
offset; longer or shorter gaps between scheduler runs compound correctly.
Once the remaining offset (in degree space) falls below
``arrival_tolerance_deg`` the drone snaps to the destination and the step
reports ``delivered``.

Geofences
---------
* **Departure Zone** (0.5 km around the dispatch hub) -- ``exited``
* **Midway Zone**    (2 km around the dispatch hub)   -- ``exited``
* **Arrival Zone**   (0.5 km around the drop-off)     -- ``entered``

``advance`` is a pure function of its arguments; the scheduler owns the
clock and the random source.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from .distance import EARTH_RADIUS_KM, distance_km
from .entities import GeofenceEvent, GeoPoint
from .enums import GeofenceEventType

DEPARTURE_ZONE = "Departure Zone"
MIDWAY_ZONE = "Midway Zone"
ARRIVAL_ZONE = "Arrival Zone"

ETA_MS_PER_DEGREE = 100_000


@dataclass(frozen=True)
class DroneParams:
    origin: GeoPoint
    tick_seconds: float = 300.0
    move_ratio: float = 0.02
    arrival_tolerance_deg: float = 0.001
    departure_zone_km: float = 0.5
    midway_zone_km: float = 2.0
    arrival_zone_km: float = 0.5
    earth_radius_km: float = EARTH_RADIUS_KM


@dataclass(frozen=True)
class DroneStep:
    position: GeoPoint
    altitude: float
    speed: float
    delivered: bool = False
    events: list[GeofenceEvent] = field(default_factory=list)
    estimated_delivery_at: Optional[datetime] = None


def degree_offset(a: GeoPoint, b: GeoPoint) -> float:
    """Planar distance in degrees, used only for the arrival check and ETA."""
    return math.hypot(b.latitude - a.latitude, b.longitude - a.longitude)


def geofence_events(
    previous: GeoPoint,
    current: GeoPoint,
    destination: GeoPoint,
    params: DroneParams,
    now: datetime,
) -> list[GeofenceEvent]:
    """Zone crossings between two consecutive drone positions."""
    r = params.earth_radius_km
    prev_from_hub = distance_km(previous, params.origin, r)
    curr_from_hub = distance_km(current, params.origin, r)
    prev_from_dest = distance_km(previous, destination, r)
    curr_from_dest = distance_km(current, destination, r)

    events: list[GeofenceEvent] = []
    if prev_from_hub <= params.departure_zone_km < curr_from_hub:
        events.append(GeofenceEvent(DEPARTURE_ZONE, GeofenceEventType.EXITED, now))
    if prev_from_hub <= params.midway_zone_km < curr_from_hub:
        events.append(GeofenceEvent(MIDWAY_ZONE, GeofenceEventType.EXITED, now))
    if prev_from_dest > params.arrival_zone_km >= curr_from_dest:
        events.append(GeofenceEvent(ARRIVAL_ZONE, GeofenceEventType.ENTERED, now))
    return events


def advance(
    position: Optional[GeoPoint],
    destination: GeoPoint,
    elapsed_seconds: float,
    params: DroneParams,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> DroneStep:
    """Compute the drone state after *elapsed_seconds* of flight.

    A drone with no recorded *position* starts at the dispatch hub.
    """
    rng = rng or random.Random()
    current = position or params.origin
    remaining = degree_offset(current, destination)

    if remaining < params.arrival_tolerance_deg:
        return DroneStep(
            position=destination,
            altitude=0.0,
            speed=0.0,
            delivered=True,
            events=geofence_events(current, destination, destination, params, now),
        )

    ratio = 1 - (1 - params.move_ratio) ** (max(elapsed_seconds, 0) / params.tick_seconds)
    moved = GeoPoint(
        current.latitude + (destination.latitude - current.latitude) * ratio,
        current.longitude + (destination.longitude - current.longitude) * ratio,
    )
    return DroneStep(
        position=moved,
        altitude=50 + rng.random() * 20,  # metres
        speed=40 + rng.random() * 20,  # km/h
        events=geofence_events(current, moved, destination, params, now),
        estimated_delivery_at=now
        + timedelta(milliseconds=math.ceil(remaining * ETA_MS_PER_DEGREE)),
    )
