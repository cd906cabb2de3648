"""
Medicine catalogue endpoints
============================

GET /api/v1/medicines              -- in-stock catalogue, optional search
GET /api/v1/medicines/categories   -- distinct categories
GET /api/v1/medicines/{medicine_id} -- single medicine
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medifly.api.dependencies import get_db
from medifly.api.middleware import limiter
from medifly.api.schemas import MedicineResponse
from medifly.config import settings
from medifly.domain.catalogue import list_categories, search_medicines
from medifly.infrastructure.repositories import (
    MedicineRepository,
    medicine_from_row,
)

router = APIRouter(prefix="/medicines", tags=["medicines"])


@router.get(
    "",
    response_model=list[MedicineResponse],
    summary="List in-stock medicines",
    description=(
        "Substring matches on name or description come first; remaining "
        "medicines are fuzzy matched and kept above the configured threshold."
    ),
)
@limiter.limit(settings.rate_limit)
async def list_medicines(
    request: Request,
    q: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None, max_length=120),
    db: AsyncSession = Depends(get_db),
):
    rows = await MedicineRepository(db).list_all(category=category)
    by_id = {row.id: row for row in rows}
    found = search_medicines(
        (medicine_from_row(r) for r in rows),
        text=q,
        category=category,
        threshold=settings.medicine_fuzzy_threshold,
        fuzzy_cap=settings.fuzzy_cap,
    )
    return [by_id[m.id] for m in found]


@router.get(
    "/categories",
    response_model=list[str],
    summary="Distinct medicine categories",
)
@limiter.limit(settings.rate_limit)
async def medicine_categories(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    rows = await MedicineRepository(db).list_all()
    return list_categories(medicine_from_row(r) for r in rows)


@router.get(
    "/{medicine_id}",
    response_model=MedicineResponse,
    summary="Get a medicine",
)
@limiter.limit(settings.rate_limit)
async def get_medicine(
    request: Request,
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
):
    row = await MedicineRepository(db).get_by_id(medicine_id)
    if not row:
        raise HTTPException(status_code=404, detail="Medicine not found")
    return row
