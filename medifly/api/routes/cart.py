"""
Cart endpoints
==============

GET    /api/v1/cart?user_id=          -- cart lines with medicine details
POST   /api/v1/cart                   -- add a medicine (merges quantities)
PATCH  /api/v1/cart/{item_id}         -- set quantity (<= 0 removes)
DELETE /api/v1/cart/{item_id}?user_id= -- remove a line
DELETE /api/v1/cart?user_id=          -- clear the cart
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from medifly.api.dependencies import get_db
from medifly.api.middleware import limiter
from medifly.api.schemas import (
    CartAddRequest,
    CartItemResponse,
    CartResponse,
    CartUpdateRequest,
    MedicineResponse,
)
from medifly.config import settings
from medifly.domain.entities import (
    CartError,
    CartLine,
    ensure_in_stock,
    merged_quantity,
)
from medifly.infrastructure.repositories import (
    CartRepository,
    MedicineRepository,
    UserRepository,
    medicine_from_row,
)

router = APIRouter(prefix="/cart", tags=["cart"])


async def _require_user(db: AsyncSession, user_id: int) -> None:
    if not await UserRepository(db).get_by_id(user_id):
        raise HTTPException(status_code=404, detail="User not found")


async def _cart_response(db: AsyncSession, user_id: int) -> CartResponse:
    pairs = await CartRepository(db).list_for_user(user_id)
    items = [
        CartItemResponse(
            id=item.id,
            user_id=item.user_id,
            medicine_id=item.medicine_id,
            quantity=item.quantity,
            medicine=MedicineResponse.model_validate(medicine),
        )
        for item, medicine in pairs
    ]
    total = sum(
        CartLine(medicine_from_row(medicine), item.quantity).line_total
        for item, medicine in pairs
    )
    return CartResponse(items=items, total=round(total, 2))


@router.get("", response_model=CartResponse, summary="Get a user's cart")
@limiter.limit(settings.rate_limit)
async def get_cart(
    request: Request,
    user_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await _cart_response(db, user_id)


@router.post(
    "",
    status_code=201,
    response_model=CartItemResponse,
    summary="Add a medicine to the cart",
    responses={409: {"description": "Medicine is out of stock."}},
)
@limiter.limit(settings.rate_limit)
async def add_to_cart(
    request: Request,
    body: CartAddRequest,
    db: AsyncSession = Depends(get_db),
):
    await _require_user(db, body.user_id)
    row = await MedicineRepository(db).get_by_id(body.medicine_id)
    if not row:
        raise HTTPException(status_code=404, detail="Medicine not found")
    try:
        ensure_in_stock(medicine_from_row(row))
    except CartError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    repo = CartRepository(db)
    item = await repo.get_line(body.user_id, body.medicine_id)
    if item:
        try:
            item.quantity = merged_quantity(item.quantity, body.quantity)
        except CartError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
    else:
        item = await repo.add(body.user_id, body.medicine_id, body.quantity)

    return CartItemResponse(
        id=item.id,
        user_id=item.user_id,
        medicine_id=item.medicine_id,
        quantity=item.quantity,
        medicine=MedicineResponse.model_validate(row),
    )


@router.patch(
    "/{item_id}",
    response_model=CartResponse,
    summary="Change the quantity of a cart line",
)
@limiter.limit(settings.rate_limit)
async def update_cart_item(
    request: Request,
    item_id: int,
    body: CartUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = CartRepository(db)
    item = await repo.get_by_id(item_id)
    if not item or item.user_id != body.user_id:
        raise HTTPException(status_code=404, detail="Cart item not found")

    if body.quantity <= 0:
        await repo.delete(item)
    else:
        item.quantity = body.quantity
    return await _cart_response(db, body.user_id)


@router.delete("/{item_id}", status_code=204, summary="Remove a cart line")
@limiter.limit(settings.rate_limit)
async def remove_cart_item(
    request: Request,
    item_id: int,
    user_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    repo = CartRepository(db)
    item = await repo.get_by_id(item_id)
    if not item or item.user_id != user_id:
        raise HTTPException(status_code=404, detail="Cart item not found")
    await repo.delete(item)
    return Response(status_code=204)


@router.delete("", status_code=204, summary="Clear a user's cart")
@limiter.limit(settings.rate_limit)
async def clear_cart(
    request: Request,
    user_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    await CartRepository(db).clear(user_id)
    return Response(status_code=204)
