"""
Tests for the category policy table and row expansion.
"""

import pytest

from app.exceptions import ServiceValidationError
from domain.enums import AllocationPolicy, PortionSize, PortionSizeType, SchoolCategory
from domain.policies import CategoryPolicyTable, build_category_policies


def test_default_policies():
    table = build_category_policies()

    assert table.categories() == [SchoolCategory.SD, SchoolCategory.SMP, SchoolCategory.SMA]
    assert table.policy_for("SD") is AllocationPolicy.DUAL_SIZE
    assert table.policy_for("SMP") is AllocationPolicy.SINGLE_LARGE
    assert table.policy_for(SchoolCategory.SMA) is AllocationPolicy.SINGLE_LARGE


def test_category_lookup_is_case_insensitive():
    table = build_category_policies()
    assert table.policy_for("sd") is AllocationPolicy.DUAL_SIZE
    assert table.policy_for("smp") is AllocationPolicy.SINGLE_LARGE


def test_unknown_category_rejected():
    table = build_category_policies()
    with pytest.raises(ServiceValidationError):
        table.policy_for("SMK")


def test_category_missing_from_table_rejected():
    table = CategoryPolicyTable({"SD": AllocationPolicy.DUAL_SIZE})
    with pytest.raises(ServiceValidationError, match="no allocation policy"):
        table.policy_for("SMA")


def test_overrides_replace_defaults():
    table = build_category_policies({"SMP": AllocationPolicy.DUAL_SIZE})
    assert table.allows_small("SMP") is True
    assert table.allows_small("SMA") is False


def test_tables_are_independent():
    a = build_category_policies()
    b = build_category_policies({"SMA": AllocationPolicy.DUAL_SIZE})
    assert a.allows_small("SMA") is False
    assert b.allows_small("SMA") is True


def test_allowed_sizes_and_display_type():
    table = build_category_policies()
    assert table.allowed_sizes("SD") == (PortionSize.SMALL, PortionSize.LARGE)
    assert table.allowed_sizes("SMA") == (PortionSize.LARGE,)
    assert table.portion_size_type("SD") is PortionSizeType.MIXED
    assert table.portion_size_type("SMP") is PortionSizeType.LARGE


@pytest.mark.parametrize(
    "small, large, expected",
    [
        (150, 150, [("small", 150), ("large", 150)]),
        (80, 0, [("small", 80)]),
        (0, 80, [("large", 80)]),
        (1, 1, [("small", 1), ("large", 1)]),
    ],
)
def test_dual_size_expansion(small, large, expected):
    """One row per nonzero size"""
    rows = build_category_policies().expand("SD", 5, small, large)
    assert [(r["portion_size"], r["portions"]) for r in rows] == expected
    assert all(r["school_id"] == 5 for r in rows)


@pytest.mark.parametrize("category", ["SMP", "SMA"])
def test_single_large_expansion(category):
    """Exactly one large row"""
    rows = build_category_policies().expand(category, 9, 0, 200)
    assert rows == [{"school_id": 9, "portion_size": "large", "portions": 200}]


def test_single_large_expansion_rejects_small():
    with pytest.raises(ServiceValidationError, match="SMP schools cannot have small portions"):
        build_category_policies().expand("SMP", 9, 10, 190)


def test_expansion_never_emits_zero_rows():
    table = build_category_policies()
    assert table.expand("SD", 1, 0, 0) == []
    assert table.expand("SMA", 1, 0, 0) == []
