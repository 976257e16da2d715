"""Services package - Business logic layer"""

from services.allocation_validator import validate_portion_size_allocations
from services.allocation_grouping import group_allocations_by_school
from services.menu_allocation_service import MenuAllocationService

__all__ = [
    "MenuAllocationService",
    "validate_portion_size_allocations",
    "group_allocations_by_school",
]
