"""
School reference data.
"""

from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, CheckConstraint
from sqlalchemy.sql import func

from domain.models.database import Base


class School(Base):
    """A school receiving meal deliveries. Read-only for the allocation service."""

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    category = Column(String(10), nullable=False)  # SD, SMP, SMA
    address = Column(String(500))
    student_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("category IN ('SD', 'SMP', 'SMA')", name="ck_school_category"),
    )

    def __repr__(self) -> str:
        return f"<School id={self.id} name={self.name!r} category={self.category}>"
