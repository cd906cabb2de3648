"""
Admin / maintenance endpoints
=============================

GET  /api/v1/admin/health                 -- simple health check
POST /api/v1/admin/medicines/deduplicate  -- drop repeated catalogue entries
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medifly.api.dependencies import get_db
from medifly.api.middleware import limiter
from medifly.api.schemas import DeduplicateResponse, HealthResponse
from medifly.config import settings
from medifly.domain.catalogue import duplicate_medicines
from medifly.infrastructure.repositories import (
    MedicineRepository,
    medicine_from_row,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/medicines/deduplicate",
    response_model=DeduplicateResponse,
    summary="Remove duplicate medicines, keeping the oldest of each name",
)
@limiter.limit(settings.rate_limit)
async def deduplicate_medicines(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    repo = MedicineRepository(db)
    medicines = [medicine_from_row(r) for r in await repo.list_all()]
    duplicates = duplicate_medicines(medicines)
    removed = await repo.delete_many([m.id for m in duplicates])
    logger.info("Removed %d duplicate medicines", removed)
    return DeduplicateResponse(
        removed=removed,
        unique_remaining=len(medicines) - len(duplicates),
    )


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
