"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.school_repository import SchoolRepository
from repositories.menu_plan_repository import MenuPlanRepository
from repositories.menu_item_repository import MenuItemRepository
from repositories.allocation_repository import AllocationRepository

__all__ = [
    "BaseRepository",
    "SchoolRepository",
    "MenuPlanRepository",
    "MenuItemRepository",
    "AllocationRepository",
]
