"""API routes package"""

from . import health, menu_items, allocations

__all__ = ["health", "menu_items", "allocations"]
