"""
Pharmacy endpoints
==================

GET /api/v1/pharmacies/nearby -- active pharmacies within a radius,
                                 nearest first or best match first
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medifly.api.dependencies import get_db, get_search_config
from medifly.api.middleware import limiter
from medifly.api.schemas import PharmacyResponse, RankedPharmacyResponse
from medifly.config import settings
from medifly.domain.entities import GeoPoint
from medifly.domain.search import (
    InvalidSearchQuery,
    RankedResult,
    SearchConfig,
    SearchQuery,
    rank_nearby,
)
from medifly.infrastructure.repositories import (
    PharmacyRepository,
    pharmacy_from_row,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pharmacies", tags=["pharmacies"])


def _to_response(result: RankedResult) -> RankedPharmacyResponse:
    p = result.pharmacy
    return RankedPharmacyResponse(
        pharmacy=PharmacyResponse(
            id=p.id,
            name=p.name,
            address=p.address,
            city=p.city,
            state=p.state,
            zip_code=p.zip_code,
            phone=p.phone,
            latitude=p.location.latitude,
            longitude=p.location.longitude,
            rating=p.rating,
            open_hours=p.open_hours,
        ),
        distance_km=round(result.distance_km, 3),
        score=round(result.score, 2),
    )


@router.get(
    "/nearby",
    response_model=list[RankedPharmacyResponse],
    summary="Rank active pharmacies around a point",
    description=(
        "Without ``q`` results are sorted nearest first.  With ``q`` each "
        "pharmacy is scored on name, address and phone digits; weak matches "
        "are dropped and the rest sorted best first."
    ),
)
@limiter.limit(settings.rate_limit)
async def nearby_pharmacies(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(settings.default_radius_km, ge=0, le=20_000),
    q: Optional[str] = Query(None, max_length=200),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    config: SearchConfig = Depends(get_search_config),
):
    rows = await PharmacyRepository(db).get_active()
    query = SearchQuery(origin=GeoPoint(lat, lng), radius_km=radius_km, text=q)
    try:
        ranked = rank_nearby(query, [pharmacy_from_row(r) for r in rows], config)
    except InvalidSearchQuery as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    logger.debug(
        "Nearby query (%.4f, %.4f) r=%.1fkm q=%r -> %d hits",
        lat, lng, radius_km, q, len(ranked),
    )
    return [_to_response(r) for r in ranked[offset : offset + limit]]
