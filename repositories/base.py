"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.

Repositories operate on the caller's Session, which is the transaction handle.
They flush() so generated ids are visible, and never commit: the service
decides when a unit of work ends.
"""

from typing import Generic, TypeVar, Optional, Type
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common read and write operations.
    All repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: int) -> Optional[ModelType]:
        """
        Get entity by primary key.

        Args:
            entity_id: Entity id

        Returns:
            Entity or None if not found
        """
        return self.db.get(self.model, entity_id)

    def add(self, entity: ModelType) -> ModelType:
        """Stage a new entity and flush it so its id is assigned"""
        self.db.add(entity)
        self.db.flush()
        return entity
