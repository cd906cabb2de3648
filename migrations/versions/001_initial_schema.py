"""Initial schema with PostGIS extension and all core tables.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUSES = (
    "pending",
    "confirmed",
    "preparing",
    "in_transit",
    "in_flight",
    "delivered",
    "picked_up",
    "ready_for_pickup",
    "cancelled",
)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("email", sa.String(255), unique=True, nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(120), nullable=True),
        sa.Column("zip_code", sa.String(16), nullable=True),
        _created_at(),
    )

    # ── pharmacies ────────────────────────────────────────────────────
    op.create_table(
        "pharmacies",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("state", sa.String(120), nullable=False),
        sa.Column("zip_code", sa.String(16), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("location", Geometry("POINT", srid=4326), nullable=True),
        sa.Column("is_active", sa.Boolean, default=True, nullable=False),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("open_hours", sa.String(64), nullable=True),
        _created_at(),
    )
    op.create_index(
        "idx_pharmacies_location",
        "pharmacies",
        ["location"],
        postgresql_using="gist",
    )
    op.create_index("idx_pharmacies_active", "pharmacies", ["is_active"])
    op.create_index("idx_pharmacies_city", "pharmacies", ["city"])

    # ── medicines ─────────────────────────────────────────────────────
    op.create_table(
        "medicines",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(120), nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("image_url", sa.String(500), nullable=False, server_default=""),
        sa.Column("in_stock", sa.Boolean, default=True, nullable=False),
        sa.Column(
            "requires_prescription", sa.Boolean, default=False, nullable=False
        ),
        sa.Column("manufacturer", sa.String(200), nullable=True),
        sa.Column("dosage", sa.String(64), nullable=True),
        sa.Column("quantity", sa.Integer, nullable=True),
        _created_at(),
    )
    op.create_index("idx_medicines_category", "medicines", ["category"])
    op.create_index("idx_medicines_stock", "medicines", ["in_stock"])

    # ── cart_items ────────────────────────────────────────────────────
    op.create_table(
        "cart_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "medicine_id",
            sa.Integer,
            sa.ForeignKey("medicines.id"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer, default=1, nullable=False),
        _created_at(),
        sa.UniqueConstraint(
            "user_id", "medicine_id", name="uq_cart_user_medicine"
        ),
    )
    op.create_index("idx_cart_user", "cart_items", ["user_id"])

    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("items", sa.JSON, nullable=False),
        sa.Column("total_amount", sa.Float, nullable=False),
        sa.Column(
            "status",
            sa.Enum(*ORDER_STATUSES, name="orderstatus"),
            default="pending",
            nullable=False,
        ),
        sa.Column(
            "delivery_type",
            sa.Enum("drone", "pickup", name="deliverytype"),
            default="drone",
            nullable=False,
        ),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("delivery_street", sa.String(255), nullable=True),
        sa.Column("delivery_city", sa.String(120), nullable=True),
        sa.Column("delivery_state", sa.String(120), nullable=True),
        sa.Column("delivery_zip_code", sa.String(16), nullable=True),
        sa.Column("delivery_lat", sa.Float, nullable=True),
        sa.Column("delivery_lng", sa.Float, nullable=True),
        sa.Column(
            "dropoff_point", Geometry("POINT", srid=4326), nullable=True
        ),
        sa.Column("drone_lat", sa.Float, nullable=True),
        sa.Column("drone_lng", sa.Float, nullable=True),
        sa.Column("drone_altitude", sa.Float, nullable=True),
        sa.Column("drone_speed", sa.Float, nullable=True),
        sa.Column("geofence_events", sa.JSON, nullable=True),
        sa.Column(
            "estimated_delivery_at", sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_orders_dropoff", "orders", ["dropoff_point"], postgresql_using="gist"
    )
    op.create_index("idx_orders_user", "orders", ["user_id"])
    op.create_index("idx_orders_status", "orders", ["status"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_table("cart_items")
    op.drop_table("medicines")
    op.drop_table("pharmacies")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS orderstatus")
    op.execute("DROP TYPE IF EXISTS deliverytype")
