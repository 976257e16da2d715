"""
Fold allocation rows into one display record per school.
"""

from typing import Dict, Iterable, List

from app.exceptions import ServiceValidationError
from domain.enums import PortionSize, PortionSizeType
from domain.models import MenuItemSchoolAllocation
from domain.policies import CategoryPolicyTable
from domain.schemas.allocation_schemas import SchoolAllocationDisplay


def group_allocations_by_school(
    rows: Iterable[MenuItemSchoolAllocation],
    policies: CategoryPolicyTable,
) -> List[SchoolAllocationDisplay]:
    """
    Combine same-school rows, summing portions per size.

    Rows must have School loaded. A missing size counts as 0. The result is
    ordered by school name, then school id.
    """
    grouped: Dict[int, SchoolAllocationDisplay] = {}

    for row in rows:
        display = grouped.get(row.school_id)
        if display is None:
            school = row.school
            display = SchoolAllocationDisplay(
                school_id=row.school_id,
                school_name=school.name,
                school_category=school.category,
                portion_size_type=_size_type(school.category, policies),
            )
            grouped[row.school_id] = display

        if row.portion_size == PortionSize.SMALL.value:
            display.portions_small += row.portions
        else:
            display.portions_large += row.portions
        display.total_portions = display.portions_small + display.portions_large

    return sorted(grouped.values(), key=lambda d: (d.school_name, d.school_id))


def _size_type(category: str, policies: CategoryPolicyTable) -> str:
    try:
        return policies.portion_size_type(category).value
    except ServiceValidationError:
        # categories outside the table can only hold large rows
        return PortionSizeType.LARGE.value
