"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.allocation_schemas import (
    SchoolAllocationInput,
    MenuItemInput,
    SchoolSummary,
    RecipeSummary,
    AllocationResponse,
    AllocationByDateResponse,
    MenuItemSummary,
    MenuItemResponse,
    SchoolAllocationDisplay,
    MenuItemDetailResponse,
    DeleteMenuItemResponse,
)

__all__ = [
    # Inputs
    "SchoolAllocationInput",
    "MenuItemInput",
    # Reference summaries
    "SchoolSummary",
    "RecipeSummary",
    # Allocation views
    "AllocationResponse",
    "AllocationByDateResponse",
    "MenuItemSummary",
    "MenuItemResponse",
    "SchoolAllocationDisplay",
    "MenuItemDetailResponse",
    "DeleteMenuItemResponse",
]
