"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from medifly.domain.entities import MAX_LINE_QUANTITY
from medifly.domain.enums import DeliveryType, OrderStatus


# ── Requests ──────────────────────────────────────────────────────────


class CartAddRequest(BaseModel):
    user_id: int
    medicine_id: int
    quantity: int = Field(1, ge=1, le=MAX_LINE_QUANTITY)


class CartUpdateRequest(BaseModel):
    user_id: int
    quantity: int = Field(..., le=MAX_LINE_QUANTITY, description="0 or less removes the line.")


class DeliveryAddressIn(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    state: str = Field(..., min_length=1, max_length=120)
    zip_code: str = Field(..., min_length=1, max_length=16)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class CheckoutRequest(BaseModel):
    user_id: int
    delivery_type: DeliveryType = DeliveryType.DRONE
    phone: str = Field(..., min_length=3, max_length=32)
    delivery_address: Optional[DeliveryAddressIn] = None

    @model_validator(mode="after")
    def _drone_needs_address(self) -> CheckoutRequest:
        if self.delivery_type == DeliveryType.DRONE and self.delivery_address is None:
            raise ValueError("delivery_address is required for drone delivery")
        return self


class OrderStatusUpdateRequest(BaseModel):
    user_id: int
    status: OrderStatus


# ── Responses ─────────────────────────────────────────────────────────


class PharmacyResponse(BaseModel):
    id: int
    name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    latitude: float
    longitude: float
    rating: float
    open_hours: str


class RankedPharmacyResponse(BaseModel):
    pharmacy: PharmacyResponse
    distance_km: float
    score: float


class MedicineResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    price: float
    image_url: str
    in_stock: bool
    requires_prescription: bool
    manufacturer: Optional[str] = None
    dosage: Optional[str] = None
    quantity: Optional[int] = None

    model_config = {"from_attributes": True}


class CartItemResponse(BaseModel):
    id: int
    user_id: int
    medicine_id: int
    quantity: int
    medicine: Optional[MedicineResponse] = None


class CartResponse(BaseModel):
    items: list[CartItemResponse] = []
    total: float = 0.0


class OrderItemResponse(BaseModel):
    medicine_id: int
    medicine_name: str
    quantity: int
    price: float


class GeofenceEventResponse(BaseModel):
    zone: str
    event_type: str
    timestamp: datetime


class OrderResponse(BaseModel):
    id: int
    user_id: int
    items: list[OrderItemResponse]
    total_amount: float
    status: str
    delivery_type: str
    phone: str
    delivery_street: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    delivery_zip_code: Optional[str] = None
    delivery_lat: Optional[float] = None
    delivery_lng: Optional[float] = None
    drone_lat: Optional[float] = None
    drone_lng: Optional[float] = None
    drone_altitude: Optional[float] = None
    drone_speed: Optional[float] = None
    geofence_events: list[GeofenceEventResponse] = []
    estimated_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DeduplicateResponse(BaseModel):
    removed: int
    unique_remaining: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
