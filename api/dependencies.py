"""
API dependencies for dependency injection
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from domain.models import get_db_session
from domain.policies import CategoryPolicyTable, build_category_policies
from services.menu_allocation_service import MenuAllocationService


def get_category_policies(request: Request) -> CategoryPolicyTable:
    """
    Policy table built at startup and kept on app.state.

    Falls back to building the default table when the app was started
    without the lifespan hook.
    """
    policies = getattr(request.app.state, "category_policies", None)
    if policies is None:
        policies = build_category_policies()
        request.app.state.category_policies = policies
    return policies


def get_allocation_service(
    db: Session = Depends(get_db_session),
    policies: CategoryPolicyTable = Depends(get_category_policies),
) -> MenuAllocationService:
    """
    Allocation service bound to the request's database session.

    Usage:
        @router.get("/example")
        def example(service: MenuAllocationService = Depends(get_allocation_service)):
            ...
    """
    return MenuAllocationService(db, policies)
