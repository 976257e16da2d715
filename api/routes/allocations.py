"""Allocation lookups across menu items"""

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_allocation_service
from domain.schemas.allocation_schemas import AllocationByDateResponse
from services.menu_allocation_service import MenuAllocationService

router = APIRouter(prefix="/allocations", tags=["Allocations"])
logger = logging.getLogger("menualloc.api.allocations")


@router.get("", response_model=List[AllocationByDateResponse])
def list_allocations_by_date(
    alloc_date: date = Query(..., alias="date", description="Delivery date (YYYY-MM-DD)"),
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """
    All allocation rows for a date, ordered by school name.

    Each row carries its school and its menu item with the recipe.
    """
    rows = service.get_allocations_by_date(alloc_date)
    logger.info("Found %d allocations for %s", len(rows), alloc_date)
    return [AllocationByDateResponse.model_validate(r) for r in rows]
