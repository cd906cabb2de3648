"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS-specific features (Geometry columns)
are mocked by using plain String columns in the test models.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from medifly.domain.entities import GeoPoint, Pharmacy


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class TestBase(DeclarativeBase):
    pass


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).

class TestUserModel(TestBase):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(32), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class TestPharmacyModel(TestBase):
    __tablename__ = "pharmacies"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False, default="")
    state = Column(String(120), nullable=False, default="")
    zip_code = Column(String(16), nullable=False, default="")
    phone = Column(String(32), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    location = Column(String, nullable=True)  # stub for Geometry
    is_active = Column(Boolean, default=True, nullable=False)
    rating = Column(Float, nullable=True)
    open_hours = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class TestMedicineModel(TestBase):
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
    created_at = Column(DateTime, server_default=func.now())


class TestCartItemModel(TestBase):
    __tablename__ = "cart_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class TestOrderModel(TestBase):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    items = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    delivery_type = Column(String(20), default="drone", nullable=False)
    phone = Column(String(32), nullable=False)
    delivery_street = Column(String(255), nullable=True)
    delivery_city = Column(String(120), nullable=True)
    delivery_state = Column(String(120), nullable=True)
    delivery_zip_code = Column(String(16), nullable=True)
    delivery_lat = Column(Float, nullable=True)
    delivery_lng = Column(Float, nullable=True)
    dropoff_point = Column(String, nullable=True)  # stub for Geometry
    drone_lat = Column(Float, nullable=True)
    drone_lng = Column(Float, nullable=True)
    drone_altitude = Column(Float, nullable=True)
    drone_speed = Column(Float, nullable=True)
    geofence_events = Column(JSON, nullable=True)
    estimated_delivery_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory schema per test; one shared connection via StaticPool."""
    engine = create_async_engine(
        TEST_DB_URL, echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── Domain builders ───────────────────────────────────────────────────

BANGALORE = GeoPoint(12.9716, 77.5946)


def make_pharmacy(
    id: int,
    name: str = "Pharmacy",
    *,
    lat: float = BANGALORE.latitude,
    lng: float = BANGALORE.longitude,
    address: str = "1 Main Road",
    phone: str = "+91-80-0000-0000",
    active: bool = True,
) -> Pharmacy:
    return Pharmacy(
        id=id,
        name=name,
        address=address,
        phone=phone,
        location=GeoPoint(lat, lng),
        active=active,
    )


@pytest.fixture
def bangalore() -> GeoPoint:
    return BANGALORE
