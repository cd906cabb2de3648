"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  The ``*_from_row`` helpers translate ORM
rows into domain entities; they only touch plain column attributes, so
they work on any row object with the same column names.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    CartItemModel,
    MedicineModel,
    OrderModel,
    PharmacyModel,
    UserModel,
)
from medifly.domain.entities import (
    DEFAULT_OPEN_HOURS,
    DEFAULT_RATING,
    DeliveryAddress,
    GeofenceEvent,
    GeoPoint,
    Medicine,
    Order,
    OrderItem,
    Pharmacy,
)
from medifly.domain.enums import DeliveryType, GeofenceEventType, OrderStatus


# ── Row -> domain mapping ─────────────────────────────────────────────


def pharmacy_from_row(row) -> Pharmacy:
    return Pharmacy(
        id=row.id,
        name=row.name,
        address=row.address,
        phone=row.phone,
        location=GeoPoint(row.latitude, row.longitude),
        active=bool(row.is_active),
        city=row.city,
        state=row.state,
        zip_code=row.zip_code,
        rating=row.rating if row.rating is not None else DEFAULT_RATING,
        open_hours=row.open_hours or DEFAULT_OPEN_HOURS,
    )


def medicine_from_row(row) -> Medicine:
    return Medicine(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
        price=row.price,
        in_stock=bool(row.in_stock),
        requires_prescription=bool(row.requires_prescription),
        image_url=row.image_url or "",
        manufacturer=row.manufacturer,
        dosage=row.dosage,
        quantity=row.quantity,
    )


def event_to_json(event: GeofenceEvent) -> dict:
    return {
        "zone": event.zone,
        "event_type": event.event_type.value,
        "timestamp": event.timestamp.isoformat(),
    }


def event_from_json(data: dict) -> GeofenceEvent:
    return GeofenceEvent(
        zone=data["zone"],
        event_type=GeofenceEventType(data["event_type"]),
        timestamp=datetime.fromisoformat(data["timestamp"]),
    )


def order_from_row(row) -> Order:
    address = None
    if row.delivery_lat is not None and row.delivery_lng is not None:
        address = DeliveryAddress(
            street=row.delivery_street or "",
            city=row.delivery_city or "",
            state=row.delivery_state or "",
            zip_code=row.delivery_zip_code or "",
            latitude=row.delivery_lat,
            longitude=row.delivery_lng,
        )
    drone = None
    if row.drone_lat is not None and row.drone_lng is not None:
        drone = GeoPoint(row.drone_lat, row.drone_lng)

    return Order(
        id=row.id,
        user_id=row.user_id,
        items=[OrderItem(**item) for item in row.items or []],
        total_amount=row.total_amount,
        status=OrderStatus(row.status),
        delivery_type=DeliveryType(row.delivery_type),
        delivery_address=address,
        phone=row.phone,
        drone_location=drone,
        geofence_events=[event_from_json(e) for e in row.geofence_events or []],
        estimated_delivery_at=row.estimated_delivery_at,
        delivered_at=row.delivered_at,
    )


def apply_order_status(row, order: Order) -> None:
    """Copy lifecycle fields from a transitioned domain order onto its row."""
    row.status = order.status.value
    row.delivered_at = order.delivered_at


# ── Repositories ──────────────────────────────────────────────────────


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)


class PharmacyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active(self) -> list[PharmacyModel]:
        """Full active directory, in id order (the ranking tie-breaker)."""
        result = await self.session.execute(
            select(PharmacyModel)
            .where(PharmacyModel.is_active.is_(True))
            .order_by(PharmacyModel.id)
        )
        return list(result.scalars().all())


class MedicineRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, medicine_id: int) -> Optional[MedicineModel]:
        return await self.session.get(MedicineModel, medicine_id)

    async def list_all(self, category: str | None = None) -> list[MedicineModel]:
        query = select(MedicineModel).order_by(MedicineModel.id)
        if category:
            query = query.where(MedicineModel.category == category)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete_many(self, medicine_ids: list[int]) -> int:
        if not medicine_ids:
            return 0
        await self.session.execute(
            delete(CartItemModel).where(CartItemModel.medicine_id.in_(medicine_ids))
        )
        result = await self.session.execute(
            delete(MedicineModel).where(MedicineModel.id.in_(medicine_ids))
        )
        return result.rowcount or 0


class CartRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(
        self, user_id: int
    ) -> list[tuple[CartItemModel, MedicineModel]]:
        result = await self.session.execute(
            select(CartItemModel, MedicineModel)
            .join(MedicineModel, MedicineModel.id == CartItemModel.medicine_id)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
        )
        return [(item, medicine) for item, medicine in result.all()]

    async def get_by_id(self, item_id: int) -> Optional[CartItemModel]:
        return await self.session.get(CartItemModel, item_id)

    async def get_line(
        self, user_id: int, medicine_id: int
    ) -> Optional[CartItemModel]:
        result = await self.session.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.medicine_id == medicine_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, user_id: int, medicine_id: int, quantity: int) -> CartItemModel:
        item = CartItemModel(user_id=user_id, medicine_id=medicine_id, quantity=quantity)
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete(self, item: CartItemModel) -> None:
        await self.session.delete(item)
        await self.session.flush()

    async def clear(self, user_id: int) -> None:
        await self.session.execute(
            delete(CartItemModel).where(CartItemModel.user_id == user_id)
        )


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, order: Order, estimated_delivery_at: datetime | None = None
    ) -> OrderModel:
        """Persist a new order with a PostGIS drop-off point when known."""
        from geoalchemy2.functions import ST_MakePoint, ST_SetSRID

        address = order.delivery_address
        row = OrderModel(
            user_id=order.user_id,
            items=[asdict(item) for item in order.items],
            total_amount=order.total_amount,
            status=order.status.value,
            delivery_type=order.delivery_type.value,
            phone=order.phone,
            geofence_events=[],
            estimated_delivery_at=estimated_delivery_at,
        )
        if address is not None:
            row.delivery_street = address.street
            row.delivery_city = address.city
            row.delivery_state = address.state
            row.delivery_zip_code = address.zip_code
            row.delivery_lat = address.latitude
            row.delivery_lng = address.longitude
            row.dropoff_point = ST_SetSRID(
                ST_MakePoint(address.longitude, address.latitude), 4326
            )
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)  # load server-side created_at
        return row

    async def get_by_id(self, order_id: int) -> Optional[OrderModel]:
        return await self.session.get(OrderModel, order_id)

    async def list_for_user(self, user_id: int) -> list[OrderModel]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.id.desc())
        )
        return list(result.scalars().all())

    async def get_in_flight_for_update(self) -> list[OrderModel]:
        """SELECT ... FOR UPDATE so status changes from the API wait for the tick."""
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.status == OrderStatus.IN_FLIGHT)
            .order_by(OrderModel.id)
            .with_for_update()
        )
        return list(result.scalars().all())
