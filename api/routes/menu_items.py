from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from api.dependencies import get_allocation_service
from app.exceptions import NotFoundError
from domain.schemas.allocation_schemas import (
    DeleteMenuItemResponse,
    MenuItemDetailResponse,
    MenuItemInput,
    MenuItemResponse,
    SchoolAllocationDisplay,
)
from services.menu_allocation_service import MenuAllocationService

router = APIRouter(prefix="/menu-plans/{menu_plan_id}/items", tags=["Menu Items"])
logger = logging.getLogger("menualloc.api.menu_items")


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    menu_plan_id: int,
    body: MenuItemInput,
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """
    Create a menu item with its school allocations.

    Each school's small/large split is stored as one row per nonzero size.
    SMP and SMA schools take large portions only, and the allocations must
    add up to the item's portions.

    Returns:
        The created menu item with allocations ordered by school name
    """
    logger.info(
        "Creating menu item in plan %s: recipe=%s, date=%s, portions=%d, schools=%d",
        menu_plan_id,
        body.recipe_id,
        body.date,
        body.portions,
        len(body.school_allocations),
    )
    item = service.create_menu_item_with_allocations(menu_plan_id, body)
    return MenuItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=MenuItemDetailResponse)
def get_menu_item(
    menu_plan_id: int,
    item_id: int,
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """
    Get a menu item with allocations grouped per school.

    Each school appears once with portions_small, portions_large and
    total_portions.
    """
    item = service.get_menu_item_with_allocations(item_id)
    if item.menu_plan_id != menu_plan_id:
        raise NotFoundError(
            f"menu item with ID {item_id} not found in menu plan {menu_plan_id}"
        )

    grouped = service.get_school_allocations_with_portion_sizes(item_id)
    summary = MenuItemResponse.model_validate(item)
    return MenuItemDetailResponse(
        **summary.model_dump(exclude={"school_allocations"}),
        school_allocations=grouped,
    )


@router.put("/{item_id}", response_model=MenuItemResponse)
def update_menu_item(
    menu_plan_id: int,
    item_id: int,
    body: MenuItemInput,
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """Replace a menu item's fields and its whole allocation set."""
    item = service.update_menu_item_with_allocations(
        item_id, body, menu_plan_id=menu_plan_id
    )
    return MenuItemResponse.model_validate(item)


@router.delete("/{item_id}", response_model=DeleteMenuItemResponse)
def delete_menu_item(
    menu_plan_id: int,
    item_id: int,
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """Delete a menu item together with its allocations."""
    service.delete_menu_item(menu_plan_id, item_id)
    return DeleteMenuItemResponse(deleted=item_id, message="Menu item deleted.")


@router.get("/{item_id}/allocations", response_model=List[SchoolAllocationDisplay])
def get_grouped_allocations(
    menu_plan_id: int,
    item_id: int,
    service: MenuAllocationService = Depends(get_allocation_service),
):
    """Allocations grouped per school; empty when the item has none."""
    return service.get_school_allocations_with_portion_sizes(
        item_id, menu_plan_id=menu_plan_id
    )
