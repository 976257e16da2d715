"""
Domain enums for the menu allocation service.
Contains all enumeration types used across the domain models.
"""

import enum


class SchoolCategory(str, enum.Enum):
    """School levels served by the kitchen"""

    SD = "SD"  # elementary
    SMP = "SMP"  # junior secondary
    SMA = "SMA"  # senior secondary


class PortionSize(str, enum.Enum):
    """Portion size buckets"""

    SMALL = "small"
    LARGE = "large"


class AllocationPolicy(str, enum.Enum):
    """How a school category may split its portions across sizes"""

    DUAL_SIZE = "dual_size"
    SINGLE_LARGE = "single_large"


class PortionSizeType(str, enum.Enum):
    """Display label for a school's allocation in the grouped view"""

    MIXED = "mixed"
    LARGE = "large"


class MenuPlanStatus(str, enum.Enum):
    """Menu plan lifecycle"""

    DRAFT = "draft"
    APPROVED = "approved"
