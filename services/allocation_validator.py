"""
Allocation validation.

Pure checks on a proposed allocation set. School categories are supplied by
the caller, so nothing here touches the database.
"""

from typing import Mapping, Optional, Protocol, Sequence, Tuple

from app.exceptions import ServiceValidationError
from domain.policies import CategoryPolicyTable


class AllocationInput(Protocol):
    school_id: int
    portions_small: int
    portions_large: int


def validate_portion_size_allocations(
    total_portions: int,
    allocations: Sequence[AllocationInput],
    school_categories: Mapping[int, str],
    policies: CategoryPolicyTable,
) -> Tuple[bool, str]:
    """
    Check a proposed allocation set against the total and category rules.

    Rules, first failure wins:
    1. at least one allocation, and a positive total
    2. per school, in input order: not a duplicate, both sizes non-negative,
       at least one size positive, no small portions where the category's
       policy only allows large
    3. small + large summed over all schools equals the total

    Schools missing from school_categories skip the category rule; the
    writer rejects them as not found.

    Args:
        total_portions: Menu item portion target
        allocations: Objects with school_id, portions_small, portions_large
        school_categories: school_id -> category for known schools
        policies: Category policy table

    Returns:
        (True, "") when valid, otherwise (False, message)
    """
    if not allocations:
        return False, "at least one school allocation is required"

    if total_portions <= 0:
        return False, "total portions must be positive"

    seen = set()
    allocated = 0

    for alloc in allocations:
        school_id = alloc.school_id
        if school_id in seen:
            return False, f"duplicate allocation for school_id {school_id}"
        seen.add(school_id)

        small = alloc.portions_small
        large = alloc.portions_large
        if small < 0:
            return False, f"small portions cannot be negative for school_id {school_id}"
        if large < 0:
            return False, f"large portions cannot be negative for school_id {school_id}"
        if small == 0 and large == 0:
            return False, f"school must have at least one portion: school_id {school_id}"

        category = school_categories.get(school_id)
        if category is not None:
            error = _category_error(category, small, policies)
            if error:
                return False, error

        allocated += small + large

    if allocated != total_portions:
        return (
            False,
            f"sum of allocated portions ({allocated}) does not equal total portions ({total_portions})",
        )

    return True, ""


def _category_error(category: str, small: int, policies: CategoryPolicyTable) -> Optional[str]:
    try:
        allows_small = policies.allows_small(category)
    except ServiceValidationError as e:
        return e.message
    if small > 0 and not allows_small:
        return f"{category} schools cannot have small portions"
    return None
