from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ServiceValidationError,
    StorageError,
)
from domain.enums import MenuPlanStatus
from domain.models import MenuItem, MenuItemSchoolAllocation, MenuPlan
from domain.policies import CategoryPolicyTable
from domain.schemas.allocation_schemas import MenuItemInput, SchoolAllocationDisplay
from repositories import (
    AllocationRepository,
    MenuItemRepository,
    MenuPlanRepository,
    SchoolRepository,
)
from services.allocation_grouping import group_allocations_by_school
from services.allocation_validator import AllocationInput, validate_portion_size_allocations

logger = logging.getLogger("menualloc.allocation")


class MenuAllocationService:
    """
    Menu items and their per-school portion allocations.

    Every write runs as one transaction on the session passed in: validation
    first, then the menu item row, then the expanded allocation rows, then
    commit. Any failure rolls the whole unit back, so callers never see a menu
    item without its allocations or a partial allocation set.
    """

    def __init__(self, db: Session, policies: CategoryPolicyTable):
        self.db = db
        self.policies = policies
        self.schools = SchoolRepository(db)
        self.plans = MenuPlanRepository(db)
        self.menu_items = MenuItemRepository(db)
        self.allocations = AllocationRepository(db)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_portion_size_allocations(
        self, total_portions: int, allocations: Sequence[AllocationInput]
    ) -> Tuple[bool, str]:
        """Validate allocations against the stored school categories (read-only)."""
        categories = self._school_categories(allocations)
        return validate_portion_size_allocations(
            total_portions, allocations, categories, self.policies
        )

    def _validate_or_raise(self, data: MenuItemInput) -> None:
        categories = self._school_categories(data.school_allocations)
        ok, message = validate_portion_size_allocations(
            data.portions, data.school_allocations, categories, self.policies
        )
        if not ok:
            logger.warning("Rejected school allocations: %s", message)
            raise ServiceValidationError(
                message, details={"field": "school_allocations"}
            )

        for alloc in data.school_allocations:
            if alloc.school_id not in categories:
                logger.warning("School %s not found", alloc.school_id)
                raise NotFoundError(
                    f"school_id {alloc.school_id} not found",
                    details={"school_id": alloc.school_id},
                )

    def _school_categories(self, allocations: Sequence[AllocationInput]) -> Dict[int, str]:
        schools = self.schools.get_by_ids(a.school_id for a in allocations)
        return {school_id: school.category for school_id, school in schools.items()}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_menu_item_with_allocations(
        self, menu_plan_id: int, data: MenuItemInput
    ) -> MenuItem:
        """
        Create a menu item and its school allocations atomically.

        Steps:
        1. Validate allocations (no storage written on failure)
        2. Insert the menu item
        3. Look up every school and expand its input into small/large rows
        4. Batch-insert the rows and commit

        Returns:
            MenuItem with recipe and school_allocations loaded, allocations
            ordered by school name

        Raises:
            ServiceValidationError: Allocation rules violated
            NotFoundError: Menu plan or a school does not exist
            ConflictError: Menu plan approved, or a store constraint tripped
            StorageError: Any other database failure
        """
        self._validate_or_raise(data)
        self._get_writable_plan(menu_plan_id)

        with self._transaction("create", "menu_item"):
            item = self.menu_items.insert_menu_item(
                menu_plan_id, data.date, data.recipe_id, data.portions
            )
            rows = self._write_allocations(item, data)
            item_id = item.id

        logger.info(
            "Created menu item %s in plan %s with %d allocation rows (%d portions)",
            item_id,
            menu_plan_id,
            len(rows),
            data.portions,
        )
        return self._load_menu_item(item_id)

    def update_menu_item_with_allocations(
        self,
        menu_item_id: int,
        data: MenuItemInput,
        menu_plan_id: Optional[int] = None,
    ) -> MenuItem:
        """
        Replace a menu item's fields and its whole allocation set.

        Validation runs before anything is deleted, so a rejected update leaves
        the previous rows intact. The item row is locked for the transaction;
        concurrent updates of the same item serialise and the last commit wins.

        Args:
            menu_item_id: Item to update
            data: New item fields and allocations
            menu_plan_id: When given, the item must belong to this plan

        Raises:
            NotFoundError: Item (or a school) does not exist
            ServiceValidationError: Allocation rules violated
            ConflictError: Menu plan approved, or a store constraint tripped
            StorageError: Any other database failure
        """
        existing = self._get_menu_item_or_404(menu_item_id, menu_plan_id)
        self._validate_or_raise(data)
        self._get_writable_plan(existing.menu_plan_id)

        with self._transaction("update", "menu_item"):
            item = self.menu_items.get_by_id(menu_item_id, with_lock=True)
            if item is None:
                raise NotFoundError(f"menu item with ID {menu_item_id} not found")
            removed = self.allocations.delete_by_menu_item(menu_item_id)
            self.menu_items.update_fields(item, data.date, data.recipe_id, data.portions)
            rows = self._write_allocations(item, data)

        logger.info(
            "Updated menu item %s: replaced %d allocation rows with %d",
            menu_item_id,
            removed,
            len(rows),
        )
        return self._load_menu_item(menu_item_id)

    def delete_menu_item(self, menu_plan_id: int, menu_item_id: int) -> None:
        """
        Delete a menu item and all its allocation rows in one transaction.

        Allocations are swept explicitly before the item, so the cascade holds
        whether or not the store enforces foreign keys. Schools and the menu
        plan are left untouched.

        Raises:
            NotFoundError: Item missing, not in this plan, or plan missing
            ConflictError: Menu plan already approved
        """
        self._get_menu_item_or_404(menu_item_id, menu_plan_id)
        self._get_writable_plan(menu_plan_id)

        with self._transaction("delete", "menu_item"):
            removed = self.allocations.delete_by_menu_item(menu_item_id)
            self.menu_items.delete_menu_item(menu_item_id)

        logger.info(
            "Deleted menu item %s from plan %s with %d allocation rows",
            menu_item_id,
            menu_plan_id,
            removed,
        )

    def _write_allocations(
        self, item: MenuItem, data: MenuItemInput
    ) -> List[MenuItemSchoolAllocation]:
        schools = self.schools.get_by_ids(a.school_id for a in data.school_allocations)

        rows: List[Dict[str, Any]] = []
        for alloc in data.school_allocations:
            school = schools.get(alloc.school_id)
            if school is None:
                raise NotFoundError(
                    f"school_id {alloc.school_id} not found",
                    details={"school_id": alloc.school_id},
                )
            rows.extend(
                self.policies.expand(
                    school.category,
                    alloc.school_id,
                    alloc.portions_small,
                    alloc.portions_large,
                )
            )

        created = self.allocations.insert_allocations(item.id, data.date, rows)

        allocated = self.allocations.sum_portions_by_menu_item(item.id)
        if allocated != data.portions:
            raise ConflictError(
                f"stored allocations ({allocated}) do not match menu item portions ({data.portions})",
                details={"menu_item_id": item.id},
            )
        return created

    @contextmanager
    def _transaction(self, operation: str, entity: str) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except ServiceError as e:
            self.db.rollback()
            logger.warning("Rolled back %s %s: %s", operation, entity, e)
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.exception("Constraint violation during %s %s", operation, entity)
            raise ConflictError(
                f"failed to {operation} {entity}: constraint violation",
                details={"operation": operation, "entity": entity},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Database error during %s %s", operation, entity)
            raise StorageError(
                f"failed to {operation} {entity}", operation=operation, entity=entity
            ) from e
        except Exception:
            self.db.rollback()
            logger.exception("Unexpected error during %s %s", operation, entity)
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_menu_item_with_allocations(self, menu_item_id: int) -> MenuItem:
        """
        Get a menu item with recipe and school allocations loaded.

        Allocations are ordered by school name. An item with no allocations
        comes back with an empty list.

        Raises:
            NotFoundError: Item does not exist
        """
        return self._load_menu_item(menu_item_id)

    def get_allocations_by_date(self, alloc_date: date) -> List[MenuItemSchoolAllocation]:
        """All allocation rows on a date with School, MenuItem and Recipe loaded."""
        try:
            return self.allocations.query_by_date(alloc_date)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Error fetching allocations for %s", alloc_date)
            raise StorageError(
                f"failed to retrieve allocations for date {alloc_date.isoformat()}",
                operation="query",
                entity="menu_item_school_allocation",
            ) from e

    def get_school_allocations_with_portion_sizes(
        self, menu_item_id: int, menu_plan_id: Optional[int] = None
    ) -> List[SchoolAllocationDisplay]:
        """
        Allocations for a menu item grouped into one record per school.

        Returns an empty list when the item has no rows, including when the
        item itself does not exist.

        Raises:
            NotFoundError: menu_plan_id given and the item belongs to another plan
        """
        if menu_plan_id is not None:
            item = self.menu_items.get_by_id(menu_item_id)
            if item is not None and item.menu_plan_id != menu_plan_id:
                raise NotFoundError(
                    f"menu item with ID {menu_item_id} not found in menu plan {menu_plan_id}"
                )

        try:
            rows = self.allocations.query_by_menu_item(menu_item_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Error fetching allocations for menu item %s", menu_item_id)
            raise StorageError(
                f"failed to retrieve allocations for menu item {menu_item_id}",
                operation="query",
                entity="menu_item_school_allocation",
            ) from e
        return group_allocations_by_school(rows, self.policies)

    def _load_menu_item(self, menu_item_id: int) -> MenuItem:
        item = self.menu_items.get_with_recipe(menu_item_id)
        if item is None:
            raise NotFoundError(f"menu item with ID {menu_item_id} not found")
        rows = self.allocations.query_by_menu_item(menu_item_id)
        set_committed_value(item, "school_allocations", rows)
        return item

    def _get_menu_item_or_404(
        self, menu_item_id: int, menu_plan_id: Optional[int] = None
    ) -> MenuItem:
        item = self.menu_items.get_by_id(menu_item_id)
        if item is None:
            logger.warning("Menu item %s not found", menu_item_id)
            raise NotFoundError(f"menu item with ID {menu_item_id} not found")
        if menu_plan_id is not None and item.menu_plan_id != menu_plan_id:
            raise NotFoundError(
                f"menu item with ID {menu_item_id} not found in menu plan {menu_plan_id}"
            )
        return item

    def _get_writable_plan(self, menu_plan_id: int) -> MenuPlan:
        plan = self.plans.get_by_id(menu_plan_id)
        if plan is None:
            raise NotFoundError(f"menu plan with ID {menu_plan_id} not found")
        if plan.status == MenuPlanStatus.APPROVED.value:
            raise ConflictError(
                "menu plan is already approved",
                details={"menu_plan_id": menu_plan_id},
            )
        return plan
