"""
Tests for folding allocation rows into per-school display records.
Rows are plain namespaces shaped like loaded ORM allocations.
"""

from types import SimpleNamespace

from domain.policies import build_category_policies
from services.allocation_grouping import group_allocations_by_school

POLICIES = build_category_policies()


def row(school_id, name, category, size, portions):
    return SimpleNamespace(
        school_id=school_id,
        school=SimpleNamespace(id=school_id, name=name, category=category),
        portion_size=size,
        portions=portions,
    )


def test_sd_rows_fold_into_one_record():
    rows = [
        row(1, "SD Harapan", "SD", "small", 150),
        row(1, "SD Harapan", "SD", "large", 120),
    ]
    grouped = group_allocations_by_school(rows, POLICIES)

    assert len(grouped) == 1
    g = grouped[0]
    assert (g.school_id, g.school_name, g.school_category) == (1, "SD Harapan", "SD")
    assert (g.portions_small, g.portions_large, g.total_portions) == (150, 120, 270)
    assert g.portion_size_type == "mixed"


def test_sd_with_single_size_fills_missing_size_with_zero():
    grouped = group_allocations_by_school([row(1, "SD Harapan", "SD", "small", 40)], POLICIES)
    assert (grouped[0].portions_small, grouped[0].portions_large) == (40, 0)
    assert grouped[0].portion_size_type == "mixed"


def test_secondary_school_is_large_only():
    grouped = group_allocations_by_school([row(3, "SMP Cendana", "SMP", "large", 200)], POLICIES)
    g = grouped[0]
    assert (g.portions_small, g.portions_large, g.total_portions) == (0, 200, 200)
    assert g.portion_size_type == "large"


def test_output_ordered_by_school_name():
    """Schools come back alphabetically regardless of row order"""
    rows = [
        row(1, "Zebra", "SD", "small", 10),
        row(2, "Alpha", "SD", "large", 20),
        row(3, "Mango", "SMP", "large", 30),
        row(1, "Zebra", "SD", "large", 5),
    ]
    grouped = group_allocations_by_school(rows, POLICIES)
    assert [g.school_name for g in grouped] == ["Alpha", "Mango", "Zebra"]


def test_one_record_per_school_matching_row_sums():
    """Grouping keeps every portion and yields one record per school"""
    rows = [
        row(1, "SD A", "SD", "small", 10),
        row(1, "SD A", "SD", "large", 15),
        row(2, "SD B", "SD", "large", 7),
        row(3, "SMA C", "SMA", "large", 30),
    ]
    grouped = group_allocations_by_school(rows, POLICIES)

    assert len(grouped) == len({r.school_id for r in rows})
    for g in grouped:
        assert g.total_portions == sum(r.portions for r in rows if r.school_id == g.school_id)
    assert sum(g.total_portions for g in grouped) == sum(r.portions for r in rows)


def test_same_name_schools_stay_separate():
    rows = [
        row(8, "SD Negeri 1", "SD", "large", 10),
        row(4, "SD Negeri 1", "SD", "large", 20),
    ]
    grouped = group_allocations_by_school(rows, POLICIES)
    assert [g.school_id for g in grouped] == [4, 8]


def test_no_rows_gives_empty_list():
    grouped = group_allocations_by_school([], POLICIES)
    assert grouped == []
    assert isinstance(grouped, list)


def test_unknown_category_displays_as_large():
    grouped = group_allocations_by_school([row(5, "SMK Teknik", "SMK", "large", 12)], POLICIES)
    assert grouped[0].portion_size_type == "large"
