"""
Background Drone Simulation Worker
==================================

Runs every ``DRONE_INTERVAL_SECONDS`` (default 300 s).

Concurrency safety
------------------
* **Redis distributed lock** ensures only one API process advances the
  drones per tick.
* **SELECT … FOR UPDATE** on in-flight orders keeps a concurrent status
  change from the API from interleaving with a position update.

Algorithm per cycle
-------------------
1. Fetch all ``in_flight`` orders.
2. For each, call ``advance`` with the time since the order row was last
   updated (capped at two ticks so a stalled worker does not teleport
   drones).
3. Persist position, altitude, speed, geofence events and ETA.
4. Orders whose drone arrived transition to ``delivered``.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

from medifly.config import settings
from medifly.domain.drone import DroneParams, DroneStep, advance
from medifly.domain.entities import GeoPoint
from medifly.domain.enums import OrderStatus
from medifly.infrastructure.database import async_session_factory
from medifly.infrastructure.locks import DistributedLock, LockNotAcquired
from medifly.infrastructure.redis_client import get_redis
from medifly.infrastructure.repositories import (
    OrderRepository,
    apply_order_status,
    event_to_json,
    order_from_row,
)

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_drone_loop() -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop())
    logger.info(
        "Drone simulation started (interval=%ds)", settings.drone_interval_seconds
    )


async def stop_drone_loop() -> None:
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    logger.info("Drone simulation stopped")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop() -> None:
    """Periodic loop: run a simulation cycle then sleep."""
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await run_drone_cycle()
        except Exception:
            logger.exception("Unhandled error in drone cycle")
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.drone_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # next tick


def _elapsed_seconds(row, now: datetime, params: DroneParams) -> float:
    last = row.updated_at
    if last is None:
        return params.tick_seconds
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    return min((now - last).total_seconds(), 2 * params.tick_seconds)


def apply_drone_step(row, step: DroneStep, now: datetime) -> bool:
    """Write *step* onto an order row.  Returns ``True`` when delivered."""
    row.drone_lat = step.position.latitude
    row.drone_lng = step.position.longitude
    row.drone_altitude = step.altitude
    row.drone_speed = step.speed
    if step.estimated_delivery_at is not None:
        row.estimated_delivery_at = step.estimated_delivery_at
    if step.events:
        # reassign so the JSON column is flagged dirty
        row.geofence_events = list(row.geofence_events or []) + [
            event_to_json(e) for e in step.events
        ]
    if not step.delivered:
        return False

    order = order_from_row(row)
    order.transition_to(OrderStatus.DELIVERED, now=now)
    apply_order_status(row, order)
    return True


def advance_orders(
    rows: list,
    params: DroneParams,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> tuple[int, int]:
    """Advance every in-flight *row*.  Returns ``(moved, delivered)``."""
    rng = rng or random.Random()
    moved = delivered = 0
    for row in rows:
        if row.delivery_lat is None or row.delivery_lng is None:
            logger.warning("Order %s in flight without a drop-off point", row.id)
            continue
        position = None
        if row.drone_lat is not None and row.drone_lng is not None:
            position = GeoPoint(row.drone_lat, row.drone_lng)
        step = advance(
            position,
            GeoPoint(row.delivery_lat, row.delivery_lng),
            _elapsed_seconds(row, now, params),
            params,
            now,
            rng,
        )
        moved += 1
        if apply_drone_step(row, step, now):
            delivered += 1
            logger.info("Order %s delivered by drone", row.id)
    return moved, delivered


async def run_drone_cycle() -> int:
    """Execute one simulation tick.  Returns the number of drones moved."""
    redis = await get_redis()
    lock = DistributedLock(
        redis, "drone_simulation", ttl_seconds=settings.drone_interval_seconds
    )

    moved = 0
    try:
        async with lock, async_session_factory() as session:
            rows = await OrderRepository(session).get_in_flight_for_update()
            if rows:
                now = datetime.now(timezone.utc)
                moved, delivered = advance_orders(
                    rows, settings.drone_params(), now
                )
                logger.info(
                    "Drone cycle: %d drones moved, %d delivered", moved, delivered
                )
            await session.commit()
    except LockNotAcquired:
        logger.debug("Lock held by another worker – skipping tick")
        return 0
    except Exception:
        logger.exception("Error in drone cycle")
        return 0

    return moved
