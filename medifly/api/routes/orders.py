"""
Order endpoints
===============

POST  /api/v1/orders                    -- check out the user's cart
GET   /api/v1/orders?user_id=           -- the user's orders, newest first
GET   /api/v1/orders/{order_id}?user_id= -- order detail and drone tracking
PATCH /api/v1/orders/{order_id}/status  -- lifecycle transition
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medifly.api.dependencies import get_db
from medifly.api.middleware import limiter
from medifly.api.schemas import (
    CheckoutRequest,
    OrderResponse,
    OrderStatusUpdateRequest,
)
from medifly.config import settings
from medifly.domain.entities import (
    CartError,
    CartLine,
    DeliveryAddress,
    InvalidStateTransition,
    Order,
)
from medifly.infrastructure.repositories import (
    CartRepository,
    OrderRepository,
    UserRepository,
    apply_order_status,
    medicine_from_row,
    order_from_row,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_response(row) -> OrderResponse:
    status = row.status.value if hasattr(row.status, "value") else row.status
    delivery_type = (
        row.delivery_type.value
        if hasattr(row.delivery_type, "value")
        else row.delivery_type
    )
    return OrderResponse(
        id=row.id,
        user_id=row.user_id,
        items=row.items or [],
        total_amount=row.total_amount,
        status=status,
        delivery_type=delivery_type,
        phone=row.phone,
        delivery_street=row.delivery_street,
        delivery_city=row.delivery_city,
        delivery_state=row.delivery_state,
        delivery_zip_code=row.delivery_zip_code,
        delivery_lat=row.delivery_lat,
        delivery_lng=row.delivery_lng,
        drone_lat=row.drone_lat,
        drone_lng=row.drone_lng,
        drone_altitude=row.drone_altitude,
        drone_speed=row.drone_speed,
        geofence_events=row.geofence_events or [],
        estimated_delivery_at=row.estimated_delivery_at,
        delivered_at=row.delivered_at,
        created_at=row.created_at,
    )


async def _owned_order(db: AsyncSession, order_id: int, user_id: int):
    row = await OrderRepository(db).get_by_id(order_id)
    if not row or row.user_id != user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    return row


@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    summary="Check out the cart",
    description=(
        "Prices every cart line at the current medicine price, creates a "
        "pending order and empties the cart."
    ),
    responses={409: {"description": "A cart medicine went out of stock."}},
)
@limiter.limit(settings.rate_limit)
async def checkout(
    request: Request,
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
):
    if not await UserRepository(db).get_by_id(body.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    cart_repo = CartRepository(db)
    pairs = await cart_repo.list_for_user(body.user_id)
    if not pairs:
        raise HTTPException(status_code=400, detail="Cart is empty")

    lines = [CartLine(medicine_from_row(m), item.quantity) for item, m in pairs]
    address = (
        DeliveryAddress(**body.delivery_address.model_dump())
        if body.delivery_address
        else None
    )
    try:
        order = Order.from_cart(
            body.user_id,
            lines,
            delivery_type=body.delivery_type,
            phone=body.phone,
            delivery_address=address,
        )
    except CartError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    eta = datetime.now(timezone.utc) + timedelta(
        minutes=settings.estimated_delivery_minutes
    )
    row = await OrderRepository(db).create(order, estimated_delivery_at=eta)
    await cart_repo.clear(body.user_id)
    logger.info(
        "Order %s created for user %s (%d items, total %.2f)",
        row.id, body.user_id, len(order.items), order.total_amount,
    )
    return _order_response(row)


@router.get("", response_model=list[OrderResponse], summary="List a user's orders")
@limiter.limit(settings.rate_limit)
async def list_orders(
    request: Request,
    user_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    rows = await OrderRepository(db).list_for_user(user_id)
    return [_order_response(r) for r in rows]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get an order with drone tracking",
)
@limiter.limit(settings.rate_limit)
async def get_order(
    request: Request,
    order_id: int,
    user_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return _order_response(await _owned_order(db, order_id, user_id))


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Move an order through its lifecycle",
    responses={409: {"description": "Transition not allowed from the current status."}},
)
@limiter.limit(settings.rate_limit)
async def update_order_status(
    request: Request,
    order_id: int,
    body: OrderStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    row = await _owned_order(db, order_id, body.user_id)
    order = order_from_row(row)
    try:
        order.transition_to(body.status)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    apply_order_status(row, order)
    logger.info("Order %s -> %s", order_id, order.status.value)
    return _order_response(row)
