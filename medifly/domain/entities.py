"""
Domain entities with business logic.

Patterns used
-------------
- **Value Objects**: ``GeoPoint`` and ``DeliveryAddress`` are immutable.
- **State Pattern** on ``Order``: enforces valid lifecycle transitions
  (pending -> confirmed -> preparing -> in_flight | in_transit |
  ready_for_pickup -> delivered | picked_up, with cancellation allowed
  until the order leaves the pharmacy).
- ``Order.from_cart`` owns checkout pricing so totals are never trusted
  from the client.

Optional fields carry explicit defaults: pharmacies without a stored
rating report ``DEFAULT_RATING`` and ``DEFAULT_OPEN_HOURS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .enums import (
    FULFILLED_STATUSES,
    ORDER_TRANSITIONS,
    DeliveryType,
    GeofenceEventType,
    OrderStatus,
)

DEFAULT_RATING = 4.5
DEFAULT_OPEN_HOURS = "Open 24/7"
MAX_LINE_QUANTITY = 100


class InvalidStateTransition(Exception):
    """Raised when an order status change violates the state machine."""


class CartError(Exception):
    """Raised when a cart operation references unusable stock."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class GeofenceEvent:
    zone: str
    event_type: GeofenceEventType
    timestamp: datetime


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Pharmacy:
    id: Optional[int]
    name: str
    address: str
    phone: str
    location: GeoPoint
    active: bool = True
    city: str = ""
    state: str = ""
    zip_code: str = ""
    rating: float = DEFAULT_RATING
    open_hours: str = DEFAULT_OPEN_HOURS


@dataclass(frozen=True)
class Medicine:
    id: Optional[int]
    name: str
    description: str
    category: str
    price: float
    in_stock: bool = True
    requires_prescription: bool = False
    image_url: str = ""
    manufacturer: Optional[str] = None
    dosage: Optional[str] = None
    quantity: Optional[int] = None


def ensure_in_stock(medicine: Medicine) -> None:
    if not medicine.in_stock:
        raise CartError(f"{medicine.name} is out of stock")


def merged_quantity(current: int, added: int) -> int:
    """Quantity of a cart line after adding *added* more units."""
    total = current + added
    if total > MAX_LINE_QUANTITY:
        raise CartError(
            f"A cart line holds at most {MAX_LINE_QUANTITY} units (would be {total})"
        )
    return total


@dataclass
class CartLine:
    medicine: Medicine
    quantity: int

    @property
    def line_total(self) -> float:
        return self.medicine.price * self.quantity


@dataclass(frozen=True)
class OrderItem:
    medicine_id: int
    medicine_name: str
    quantity: int
    price: float


@dataclass
class Order:
    id: Optional[int] = None
    user_id: int = 0
    items: list[OrderItem] = field(default_factory=list)
    total_amount: float = 0.0
    status: OrderStatus = OrderStatus.PENDING
    delivery_type: DeliveryType = DeliveryType.DRONE
    delivery_address: Optional[DeliveryAddress] = None
    phone: str = ""
    drone_location: Optional[GeoPoint] = None
    geofence_events: list[GeofenceEvent] = field(default_factory=list)
    estimated_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @classmethod
    def from_cart(
        cls,
        user_id: int,
        lines: list[CartLine],
        *,
        delivery_type: DeliveryType,
        phone: str,
        delivery_address: Optional[DeliveryAddress] = None,
    ) -> Order:
        """Build a pending order priced from the cart at checkout time."""
        if not lines:
            raise CartError("Cart is empty")
        for line in lines:
            ensure_in_stock(line.medicine)
        if delivery_type == DeliveryType.DRONE and delivery_address is None:
            raise CartError("Drone delivery requires a delivery address")

        items = [
            OrderItem(
                medicine_id=line.medicine.id,
                medicine_name=line.medicine.name,
                quantity=line.quantity,
                price=line.medicine.price,
            )
            for line in lines
        ]
        return cls(
            user_id=user_id,
            items=items,
            total_amount=round(sum(line.line_total for line in lines), 2),
            delivery_type=delivery_type,
            delivery_address=delivery_address,
            phone=phone,
        )

    def transition_to(
        self, new_status: OrderStatus, now: Optional[datetime] = None
    ) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = ORDER_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        if new_status == OrderStatus.IN_FLIGHT and (
            self.delivery_type != DeliveryType.DRONE or self.delivery_address is None
        ):
            raise InvalidStateTransition(
                "Only drone orders with a delivery address can take flight"
            )
        if new_status == OrderStatus.READY_FOR_PICKUP and (
            self.delivery_type != DeliveryType.PICKUP
        ):
            raise InvalidStateTransition("Only pickup orders can be collected")
        self.status = new_status
        if new_status in FULFILLED_STATUSES:
            self.delivered_at = now or datetime.now(timezone.utc)
