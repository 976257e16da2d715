"""
School Repository - Read access to school reference data
"""

from typing import Dict, Iterable
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.allocation_repository import AllocationRepository
from domain.models import School
from app.exceptions import ConflictError, NotFoundError


class SchoolRepository(BaseRepository[School]):
    """Repository for school data access"""

    def __init__(self, db: Session):
        super().__init__(db, School)

    def get_by_ids(self, school_ids: Iterable[int]) -> Dict[int, School]:
        """Get schools keyed by id; ids with no row are simply absent"""
        ids = list(set(school_ids))
        if not ids:
            return {}
        rows = self.db.query(School).filter(School.id.in_(ids)).all()
        return {school.id: school for school in rows}

    def delete_school(self, school_id: int) -> None:
        """
        Delete a school that no allocation references.

        Raises:
            NotFoundError: If the school does not exist
            ConflictError: If allocations still reference the school
        """
        school = self.get_by_id(school_id)
        if school is None:
            raise NotFoundError(f"school_id {school_id} not found")
        if AllocationRepository(self.db).exists_for_school(school_id):
            raise ConflictError(
                f"school_id {school_id} is referenced by menu item allocations",
                details={"school_id": school_id},
            )
        self.db.delete(school)
        self.db.flush()
