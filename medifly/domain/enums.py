"""Domain enumerations and state-transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    IN_TRANSIT = "in_transit"
    IN_FLIGHT = "in_flight"
    DELIVERED = "delivered"
    PICKED_UP = "picked_up"
    READY_FOR_PICKUP = "ready_for_pickup"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {
        OrderStatus.IN_TRANSIT,
        OrderStatus.IN_FLIGHT,
        OrderStatus.READY_FOR_PICKUP,
        OrderStatus.CANCELLED,
    },
    OrderStatus.IN_TRANSIT: {OrderStatus.DELIVERED},
    OrderStatus.IN_FLIGHT: {OrderStatus.DELIVERED},
    OrderStatus.READY_FOR_PICKUP: {OrderStatus.PICKED_UP, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.PICKED_UP: set(),
    OrderStatus.CANCELLED: set(),
}

# Statuses that complete an order and stamp ``delivered_at``
FULFILLED_STATUSES = {OrderStatus.DELIVERED, OrderStatus.PICKED_UP}


class DeliveryType(str, enum.Enum):
    DRONE = "drone"
    PICKUP = "pickup"


class GeofenceEventType(str, enum.Enum):
    ENTERED = "entered"
    EXITED = "exited"
