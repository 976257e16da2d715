from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field


class SchoolAllocationInput(BaseModel):
    """Requested portions for one school, split by size"""

    school_id: int
    portions_small: int = 0
    portions_large: int = 0


class MenuItemInput(BaseModel):
    """Create/update payload for a menu item and its school allocations.

    Business rules (sums, categories, duplicates) are checked by the
    allocation validator, not here.
    """

    date: dt.date
    recipe_id: int
    portions: int
    school_allocations: List[SchoolAllocationInput] = Field(default_factory=list)


class SchoolSummary(BaseModel):
    id: int
    name: str
    category: str

    model_config = {"from_attributes": True}


class RecipeSummary(BaseModel):
    id: int
    name: str
    category: Optional[str] = None

    model_config = {"from_attributes": True}


class AllocationResponse(BaseModel):
    id: int
    menu_item_id: int
    school_id: int
    portion_size: str
    portions: int
    date: dt.date
    school: Optional[SchoolSummary] = None

    model_config = {"from_attributes": True}


class MenuItemSummary(BaseModel):
    id: int
    menu_plan_id: int
    date: dt.date
    recipe_id: int
    portions: int
    recipe: Optional[RecipeSummary] = None

    model_config = {"from_attributes": True}


class AllocationByDateResponse(AllocationResponse):
    menu_item: Optional[MenuItemSummary] = None


class MenuItemResponse(MenuItemSummary):
    """Menu item with its flat allocation rows, ordered by school name"""

    school_allocations: List[AllocationResponse] = Field(default_factory=list)


class SchoolAllocationDisplay(BaseModel):
    """One school's allocation with small and large rows folded together"""

    school_id: int
    school_name: str
    school_category: str
    portion_size_type: str  # mixed, large
    portions_small: int = 0
    portions_large: int = 0
    total_portions: int = 0


class MenuItemDetailResponse(MenuItemSummary):
    """Menu item with allocations grouped per school"""

    school_allocations: List[SchoolAllocationDisplay] = Field(default_factory=list)


class DeleteMenuItemResponse(BaseModel):
    deleted: int
    message: Optional[str] = None
