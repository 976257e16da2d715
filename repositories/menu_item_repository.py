"""
Menu Item Repository - Data access layer for menu items
"""

from datetime import date
from typing import Optional
from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from domain.models import MenuItem


class MenuItemRepository(BaseRepository[MenuItem]):
    """Repository for menu item data access"""

    def __init__(self, db: Session):
        super().__init__(db, MenuItem)

    def get_by_id(self, menu_item_id: int, with_lock: bool = False) -> Optional[MenuItem]:
        """
        Get menu item by ID.

        Args:
            menu_item_id: Menu item id
            with_lock: Take a row lock (SELECT ... FOR UPDATE) for the rest of
                the transaction. Ignored by dialects without row locks.
        """
        query = self.db.query(MenuItem).filter(MenuItem.id == menu_item_id)
        if with_lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_with_recipe(self, menu_item_id: int) -> Optional[MenuItem]:
        """Get menu item with its recipe eagerly loaded"""
        return (
            self.db.query(MenuItem)
            .options(joinedload(MenuItem.recipe))
            .filter(MenuItem.id == menu_item_id)
            .first()
        )

    def insert_menu_item(
        self, menu_plan_id: int, item_date: date, recipe_id: int, portions: int
    ) -> MenuItem:
        """Insert a menu item row and flush to obtain its id"""
        item = MenuItem(
            menu_plan_id=menu_plan_id,
            date=item_date,
            recipe_id=recipe_id,
            portions=portions,
        )
        return self.add(item)

    def update_fields(
        self, item: MenuItem, item_date: date, recipe_id: int, portions: int
    ) -> MenuItem:
        """Overwrite the editable fields of a menu item"""
        item.date = item_date
        item.recipe_id = recipe_id
        item.portions = portions
        self.db.flush()
        return item

    def delete_menu_item(self, menu_item_id: int) -> int:
        """Delete a menu item row; returns the number of rows removed"""
        count = (
            self.db.query(MenuItem)
            .filter(MenuItem.id == menu_item_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return count
