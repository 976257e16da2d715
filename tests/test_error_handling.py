"""
Tests for failure paths: rollback on storage errors, error mapping,
and the error payloads handed to the API layer.
"""

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from test_fixtures import (
    db_session,
    db_session_fk,
    policies,
    service,
    world,
    alloc,
    item_input,
    make_school,
    make_recipe,
    make_menu_plan,
    count_menu_items,
    count_allocations,
    allocation_rows,
    SERVE_DATE,
)
from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ServiceValidationError,
    StorageError,
)
from services.menu_allocation_service import MenuAllocationService


def _fail(*args, **kwargs):
    raise OperationalError("INSERT INTO menu_item_school_allocations", {}, Exception("disk I/O error"))


# =============================================================================
# ROLLBACK
# =============================================================================


class TestRollback:
    def test_create_rolls_back_when_allocation_insert_fails(self, db_session: Session, service, world, monkeypatch):
        """No menu item survives without its allocations"""
        monkeypatch.setattr(service.allocations, "insert_allocations", _fail)

        with pytest.raises(StorageError) as exc_info:
            service.create_menu_item_with_allocations(
                world.plan.id, item_input(world.recipe.id, 100, [alloc(world.sd.id, large=100)])
            )

        assert exc_info.value.details == {"operation": "create", "entity": "menu_item"}
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
        assert count_menu_items(db_session) == 0
        assert count_allocations(db_session) == 0

    def test_update_rolls_back_to_previous_rows(self, db_session: Session, service, world, monkeypatch):
        """A failed replace leaves the old allocation set in place"""
        created = service.create_menu_item_with_allocations(
            world.plan.id, item_input(world.recipe.id, 300, [alloc(world.sd.id, 150, 150)])
        )
        before = allocation_rows(db_session, created.id)
        monkeypatch.setattr(service.allocations, "insert_allocations", _fail)

        with pytest.raises(StorageError, match="failed to update menu_item"):
            service.update_menu_item_with_allocations(
                created.id, item_input(world.recipe.id, 200, [alloc(world.smp.id, large=200)])
            )

        monkeypatch.undo()
        assert allocation_rows(db_session, created.id) == before
        assert service.menu_items.get_by_id(created.id).portions == 300

    def test_delete_rolls_back_when_item_delete_fails(self, db_session: Session, service, world, monkeypatch):
        created = service.create_menu_item_with_allocations(
            world.plan.id, item_input(world.recipe.id, 100, [alloc(world.sd.id, large=100)])
        )
        monkeypatch.setattr(service.menu_items, "delete_menu_item", _fail)

        with pytest.raises(StorageError):
            service.delete_menu_item(world.plan.id, created.id)

        assert count_menu_items(db_session) == 1
        assert count_allocations(db_session, created.id) == 1

    def test_missing_school_fails_whole_create(self, db_session: Session, service, world):
        data = item_input(
            world.recipe.id, 200, [alloc(world.sd.id, large=100), alloc(9999, large=100)]
        )

        with pytest.raises(NotFoundError, match="school_id 9999 not found"):
            service.create_menu_item_with_allocations(world.plan.id, data)

        assert count_menu_items(db_session) == 0
        assert count_allocations(db_session) == 0

    def test_school_vanishing_mid_write_fails_whole_create(self, db_session: Session, service, world, monkeypatch):
        real_get_by_ids = service.schools.get_by_ids
        calls = []

        def get_by_ids(school_ids):
            found = real_get_by_ids(school_ids)
            calls.append(len(found))
            if len(calls) > 1:
                found.pop(world.smp.id, None)
            return found

        monkeypatch.setattr(service.schools, "get_by_ids", get_by_ids)
        data = item_input(
            world.recipe.id, 300, [alloc(world.sd.id, large=100), alloc(world.smp.id, large=200)]
        )

        with pytest.raises(NotFoundError, match=f"school_id {world.smp.id} not found"):
            service.create_menu_item_with_allocations(world.plan.id, data)

        assert len(calls) == 2
        assert count_menu_items(db_session) == 0
        assert count_allocations(db_session) == 0

    def test_stored_sum_mismatch_is_a_conflict(self, db_session: Session, service, world, monkeypatch):
        monkeypatch.setattr(service.allocations, "sum_portions_by_menu_item", lambda menu_item_id: 1)

        with pytest.raises(ConflictError, match="do not match menu item portions"):
            service.create_menu_item_with_allocations(
                world.plan.id, item_input(world.recipe.id, 100, [alloc(world.sd.id, large=100)])
            )

        assert count_menu_items(db_session) == 0
        assert count_allocations(db_session) == 0

    def test_unexpected_error_rolls_back_and_propagates(self, db_session: Session, service, world, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(service.allocations, "insert_allocations", boom)

        with pytest.raises(RuntimeError, match="boom"):
            service.create_menu_item_with_allocations(
                world.plan.id, item_input(world.recipe.id, 100, [alloc(world.sd.id, large=100)])
            )
        assert count_menu_items(db_session) == 0

    def test_read_failure_is_storage_error(self, service, monkeypatch):
        monkeypatch.setattr(service.allocations, "query_by_date", _fail)

        with pytest.raises(StorageError) as exc_info:
            service.get_allocations_by_date(SERVE_DATE)

        assert exc_info.value.message == "failed to retrieve allocations for date 2025-01-07"
        assert exc_info.value.operation == "query"


# =============================================================================
# STORE CONSTRAINTS
# =============================================================================


class TestStoreConstraints:
    def test_missing_recipe_maps_to_conflict(self, db_session_fk: Session, policies):
        plan = make_menu_plan(db_session_fk)
        school = make_school(db_session_fk, "SD Negeri 7 Kenanga", "SD")
        service = MenuAllocationService(db_session_fk, policies)

        with pytest.raises(ConflictError, match="constraint violation") as exc_info:
            service.create_menu_item_with_allocations(
                plan.id, item_input(424242, 50, [alloc(school.id, small=50)])
            )

        assert exc_info.value.details == {"operation": "create", "entity": "menu_item"}
        assert count_menu_items(db_session_fk) == 0
        assert count_allocations(db_session_fk) == 0

    def test_valid_create_with_foreign_keys_on(self, db_session_fk: Session, policies):
        plan = make_menu_plan(db_session_fk)
        recipe = make_recipe(db_session_fk)
        school = make_school(db_session_fk, "SMA Negeri 3 Bakti", "SMA")
        service = MenuAllocationService(db_session_fk, policies)

        item = service.create_menu_item_with_allocations(
            plan.id, item_input(recipe.id, 90, [alloc(school.id, large=90)])
        )

        assert allocation_rows(db_session_fk, item.id) == [(school.id, "large", 90)]
        service.delete_menu_item(plan.id, item.id)
        assert count_allocations(db_session_fk) == 0


# =============================================================================
# ERROR PAYLOADS
# =============================================================================


class TestErrorPayloads:
    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (ServiceValidationError("bad"), 400, "VALIDATION_ERROR"),
            (NotFoundError("gone"), 404, "NOT_FOUND"),
            (ConflictError("clash"), 409, "CONFLICT"),
            (StorageError("broke"), 500, "STORAGE_ERROR"),
        ],
    )
    def test_status_and_code(self, exc, status, code):
        assert isinstance(exc, ServiceError)
        assert exc.http_status == status
        assert exc.to_dict() == {"code": code, "message": str(exc)}

    def test_details_included_when_present(self):
        exc = ServiceValidationError("bad", details={"field": "school_allocations"})
        assert exc.to_dict()["details"] == {"field": "school_allocations"}

    def test_storage_error_context(self):
        exc = StorageError("failed to create menu_item", operation="create", entity="menu_item")
        assert exc.details == {"operation": "create", "entity": "menu_item"}
        assert (exc.operation, exc.entity) == ("create", "menu_item")

    def test_default_message(self):
        assert NotFoundError().message == "Not found"
