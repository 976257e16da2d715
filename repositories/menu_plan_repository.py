"""
Menu Plan Repository - Data access layer for menu plans
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import MenuPlan


class MenuPlanRepository(BaseRepository[MenuPlan]):
    """Repository for menu plan data access"""

    def __init__(self, db: Session):
        super().__init__(db, MenuPlan)
