"""
Menu planning models: plans, recipes, menu items and their school allocations.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    TIMESTAMP,
    ForeignKey,
    Date,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base


class MenuPlan(Base):
    """Weekly menu plan"""

    __tablename__ = "menu_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    week_start = Column(Date, nullable=False, index=True)
    week_end = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="draft", index=True)  # draft, approved
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    menu_items = relationship("MenuItem", back_populates="menu_plan")


class Recipe(Base):
    """Recipe reference; referenced by menu items, never inspected here"""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    category = Column(String(50))
    instructions = Column(Text)


class MenuItem(Base):
    """A recipe scheduled on a date within a menu plan, with a total portion target"""

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    menu_plan_id = Column(
        Integer, ForeignKey("menu_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    portions = Column(Integer, nullable=False)

    menu_plan = relationship("MenuPlan", back_populates="menu_items")
    recipe = relationship("Recipe")
    # Deletion goes through the service, which sweeps allocations explicitly
    school_allocations = relationship(
        "MenuItemSchoolAllocation",
        back_populates="menu_item",
        passive_deletes=True,
        order_by="MenuItemSchoolAllocation.id",
    )

    __table_args__ = (
        CheckConstraint("portions > 0", name="ck_menu_item_portions_positive"),
    )


class MenuItemSchoolAllocation(Base):
    """Portions of a menu item allocated to one school in one size bucket"""

    __tablename__ = "menu_item_school_allocations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    school_id = Column(
        Integer,
        ForeignKey("schools.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    portion_size = Column(String(10), nullable=False)  # small, large
    portions = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    menu_item = relationship("MenuItem", back_populates="school_allocations")
    school = relationship("School")

    __table_args__ = (
        UniqueConstraint(
            "menu_item_id",
            "school_id",
            "portion_size",
            name="uq_allocation_item_school_size",
        ),
        CheckConstraint("portions > 0", name="ck_allocation_portions_positive"),
        CheckConstraint(
            "portion_size IN ('small', 'large')", name="ck_allocation_portion_size"
        ),
    )
