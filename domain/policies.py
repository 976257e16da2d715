"""
Category allocation policies.

Each school category maps to an AllocationPolicy tag. Row expansion and
display labels dispatch on the tag, so adding a category means adding one
entry to the table built by build_category_policies().
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from app.exceptions import ServiceValidationError
from domain.enums import AllocationPolicy, PortionSize, PortionSizeType, SchoolCategory

CategoryLike = Union[SchoolCategory, str]


_ALLOWED_SIZES: Mapping[AllocationPolicy, Tuple[PortionSize, ...]] = MappingProxyType(
    {
        AllocationPolicy.DUAL_SIZE: (PortionSize.SMALL, PortionSize.LARGE),
        AllocationPolicy.SINGLE_LARGE: (PortionSize.LARGE,),
    }
)

_SIZE_TYPES: Mapping[AllocationPolicy, PortionSizeType] = MappingProxyType(
    {
        AllocationPolicy.DUAL_SIZE: PortionSizeType.MIXED,
        AllocationPolicy.SINGLE_LARGE: PortionSizeType.LARGE,
    }
)


def _category(value: CategoryLike) -> SchoolCategory:
    if isinstance(value, SchoolCategory):
        return value
    try:
        return SchoolCategory(str(value).strip().upper())
    except ValueError:
        raise ServiceValidationError(
            f"unsupported school category {value!r}",
            details={"category": str(value)},
        )


class CategoryPolicyTable:
    """Immutable category -> AllocationPolicy mapping.

    Built once at startup and handed to services by reference.
    """

    __slots__ = ("_policies",)

    def __init__(self, policies: Mapping[CategoryLike, AllocationPolicy]):
        self._policies = MappingProxyType(
            {_category(cat): AllocationPolicy(pol) for cat, pol in policies.items()}
        )

    def categories(self) -> List[SchoolCategory]:
        return list(self._policies)

    def policy_for(self, category: CategoryLike) -> AllocationPolicy:
        """Return the policy for a category; unknown categories are rejected."""
        cat = _category(category)
        policy = self._policies.get(cat)
        if policy is None:
            raise ServiceValidationError(
                f"no allocation policy configured for category {cat.value}",
                details={"category": cat.value},
            )
        return policy

    def allowed_sizes(self, category: CategoryLike) -> Tuple[PortionSize, ...]:
        return _ALLOWED_SIZES[self.policy_for(category)]

    def allows_small(self, category: CategoryLike) -> bool:
        return PortionSize.SMALL in self.allowed_sizes(category)

    def portion_size_type(self, category: CategoryLike) -> PortionSizeType:
        return _SIZE_TYPES[self.policy_for(category)]

    def expand(
        self,
        category: CategoryLike,
        school_id: int,
        portions_small: int,
        portions_large: int,
    ) -> List[Dict[str, Any]]:
        """
        Expand one school's input into allocation row values.

        DUAL_SIZE yields a small row and/or a large row, one per nonzero size.
        SINGLE_LARGE yields exactly one large row.

        Returns:
            List of {"school_id", "portion_size", "portions"} dicts, never with
            zero portions.
        """
        policy = self.policy_for(category)
        if policy is AllocationPolicy.DUAL_SIZE:
            return _expand_dual_size(school_id, portions_small, portions_large)
        if policy is AllocationPolicy.SINGLE_LARGE:
            if portions_small:
                raise ServiceValidationError(
                    f"{_category(category).value} schools cannot have small portions",
                    details={"school_id": school_id},
                )
            return _expand_single_large(school_id, portions_large)
        raise ServiceValidationError(f"unhandled allocation policy {policy}")


def _expand_dual_size(school_id: int, small: int, large: int) -> List[Dict[str, Any]]:
    rows = []
    if small > 0:
        rows.append({"school_id": school_id, "portion_size": PortionSize.SMALL.value, "portions": small})
    if large > 0:
        rows.append({"school_id": school_id, "portion_size": PortionSize.LARGE.value, "portions": large})
    return rows


def _expand_single_large(school_id: int, large: int) -> List[Dict[str, Any]]:
    if large <= 0:
        return []
    return [{"school_id": school_id, "portion_size": PortionSize.LARGE.value, "portions": large}]


def build_category_policies(
    overrides: Optional[Mapping[CategoryLike, AllocationPolicy]] = None,
) -> CategoryPolicyTable:
    """Construct the default policy table: SD splits sizes, SMP/SMA large only."""
    table: Dict[CategoryLike, AllocationPolicy] = {
        SchoolCategory.SD: AllocationPolicy.DUAL_SIZE,
        SchoolCategory.SMP: AllocationPolicy.SINGLE_LARGE,
        SchoolCategory.SMA: AllocationPolicy.SINGLE_LARGE,
    }
    for category, policy in (overrides or {}).items():
        table[_category(category)] = AllocationPolicy(policy)
    return CategoryPolicyTable(table)
