"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.school import School
from domain.models.menu import (
    MenuPlan,
    Recipe,
    MenuItem,
    MenuItemSchoolAllocation,
)

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # Reference data
    "School",
    "Recipe",
    # Menu planning
    "MenuPlan",
    "MenuItem",
    "MenuItemSchoolAllocation",
]
