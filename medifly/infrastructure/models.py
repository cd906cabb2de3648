"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``users``       -- customers (identity is managed by the auth provider)
* ``pharmacies``  -- dispatch / pickup locations
* ``medicines``   -- catalogue
* ``cart_items``  -- one row per (user, medicine)
* ``orders``      -- checked-out carts with delivery and drone tracking

Indexes
-------
* **GIST** on geometry columns (``pharmacies.location``,
  ``orders.dropoff_point``) for map / radius queries outside the API.
* **B-Tree** on ``is_active``, ``city``, ``category``, ``in_stock``,
  ``status`` and ``user_id`` for the list endpoints and the drone worker.

Latitude / longitude are also stored as plain floats so the ranking code
reads them without ST_X / ST_Y.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from geoalchemy2 import Geometry

from .database import Base
from medifly.domain.enums import DeliveryType, OrderStatus


def _values(enum_cls):
    return [member.value for member in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(32), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(120), nullable=True)
    zip_code = Column(String(16), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PharmacyModel(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False)
    state = Column(String(120), nullable=False)
    zip_code = Column(String(16), nullable=False)
    phone = Column(String(32), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    location = Column(Geometry("POINT", srid=4326), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    rating = Column(Float, nullable=True)
    open_hours = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_pharmacies_location", "location", postgresql_using="gist"),
        Index("idx_pharmacies_active", "is_active"),
        Index("idx_pharmacies_city", "city"),
    )


class MedicineModel(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(120), nullable=False)
    price = Column(Float, nullable=False)
    image_url = Column(String(500), default="", nullable=False)
    in_stock = Column(Boolean, default=True, nullable=False)
    requires_prescription = Column(Boolean, default=False, nullable=False)
    manufacturer = Column(String(200), nullable=True)
    dosage = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_medicines_category", "category"),
        Index("idx_medicines_stock", "in_stock"),
    )


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "medicine_id", name="uq_cart_user_medicine"),
        Index("idx_cart_user", "user_id"),
    )


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    items = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(
        Enum(OrderStatus, name="orderstatus", values_callable=_values),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    delivery_type = Column(
        Enum(DeliveryType, name="deliverytype", values_callable=_values),
        default=DeliveryType.DRONE,
        nullable=False,
    )
    phone = Column(String(32), nullable=False)

    # Delivery address (drone orders only)
    delivery_street = Column(String(255), nullable=True)
    delivery_city = Column(String(120), nullable=True)
    delivery_state = Column(String(120), nullable=True)
    delivery_zip_code = Column(String(16), nullable=True)
    delivery_lat = Column(Float, nullable=True)
    delivery_lng = Column(Float, nullable=True)
    dropoff_point = Column(Geometry("POINT", srid=4326), nullable=True)

    # Drone tracking, written by the simulation worker
    drone_lat = Column(Float, nullable=True)
    drone_lng = Column(Float, nullable=True)
    drone_altitude = Column(Float, nullable=True)
    drone_speed = Column(Float, nullable=True)
    geofence_events = Column(JSON, nullable=True)

    estimated_delivery_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_orders_dropoff", "dropoff_point", postgresql_using="gist"),
        Index("idx_orders_user", "user_id"),
        Index("idx_orders_status", "status"),
    )
