"""
Allocation Repository - Data access layer for menu item school allocations
"""

from datetime import date
from typing import Any, Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager, joinedload

from repositories.base import BaseRepository
from domain.models import MenuItem, MenuItemSchoolAllocation, School


class AllocationRepository(BaseRepository[MenuItemSchoolAllocation]):
    """Repository for allocation rows.

    Reads join School and order by school name (id breaks ties), then
    small before large within a school.
    """

    def __init__(self, db: Session):
        super().__init__(db, MenuItemSchoolAllocation)

    def insert_allocations(
        self, menu_item_id: int, alloc_date: date, rows: List[Dict[str, Any]]
    ) -> List[MenuItemSchoolAllocation]:
        """
        Batch-insert expanded allocation rows for one menu item.

        Args:
            menu_item_id: Owning menu item
            alloc_date: Date copied onto every row
            rows: {"school_id", "portion_size", "portions"} dicts

        Returns:
            The flushed allocation objects
        """
        objs = [
            MenuItemSchoolAllocation(
                menu_item_id=menu_item_id,
                school_id=row["school_id"],
                portion_size=row["portion_size"],
                portions=row["portions"],
                date=alloc_date,
            )
            for row in rows
        ]
        self.db.add_all(objs)
        self.db.flush()
        return objs

    def delete_by_menu_item(self, menu_item_id: int) -> int:
        """Delete all allocations for a menu item"""
        count = (
            self.db.query(MenuItemSchoolAllocation)
            .filter(MenuItemSchoolAllocation.menu_item_id == menu_item_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return count

    def query_by_menu_item(self, menu_item_id: int) -> List[MenuItemSchoolAllocation]:
        """Get allocations for a menu item with School loaded"""
        return (
            self.db.query(MenuItemSchoolAllocation)
            .join(MenuItemSchoolAllocation.school)
            .options(contains_eager(MenuItemSchoolAllocation.school))
            .filter(MenuItemSchoolAllocation.menu_item_id == menu_item_id)
            .order_by(
                School.name.asc(),
                School.id.asc(),
                MenuItemSchoolAllocation.portion_size.desc(),
            )
            .all()
        )

    def query_by_date(self, alloc_date: date) -> List[MenuItemSchoolAllocation]:
        """Get all allocations on a date with School, MenuItem and Recipe loaded"""
        return (
            self.db.query(MenuItemSchoolAllocation)
            .join(MenuItemSchoolAllocation.school)
            .options(
                contains_eager(MenuItemSchoolAllocation.school),
                joinedload(MenuItemSchoolAllocation.menu_item).joinedload(
                    MenuItem.recipe
                ),
            )
            .filter(MenuItemSchoolAllocation.date == alloc_date)
            .order_by(
                School.name.asc(),
                School.id.asc(),
                MenuItemSchoolAllocation.menu_item_id.asc(),
                MenuItemSchoolAllocation.portion_size.desc(),
            )
            .all()
        )

    def exists_for_school(self, school_id: int) -> bool:
        """Check whether any allocation row points at the school"""
        row = (
            self.db.query(MenuItemSchoolAllocation.id)
            .filter(MenuItemSchoolAllocation.school_id == school_id)
            .first()
        )
        return row is not None

    def sum_portions_by_menu_item(self, menu_item_id: int) -> int:
        """Sum allocated portions for a menu item (0 when it has none)"""
        total = (
            self.db.query(func.coalesce(func.sum(MenuItemSchoolAllocation.portions), 0))
            .filter(MenuItemSchoolAllocation.menu_item_id == menu_item_id)
            .scalar()
        )
        return int(total or 0)
