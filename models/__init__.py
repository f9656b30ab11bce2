"""Data models for community records."""

from .community import (
    Build,
    BuildingType,
    CommunityRecord,
    Distance,
    HousingStock,
    Images,
    Layout,
    Link,
    ManagementFee,
    MetroDistance,
    Parking,
    Price,
    PropertyInfo,
    TargetDistance,
)
from .constants import (
    ALLOWED_AREA_RANGES,
    MAX_COMPARE_COUNT,
    MIN_COMPARE_COUNT,
    SORT_KEYS,
)
from .issues import CommunityDataError, ValidationIssue

__all__ = [
    "CommunityRecord",
    "Price",
    "Build",
    "Distance",
    "MetroDistance",
    "TargetDistance",
    "PropertyInfo",
    "ManagementFee",
    "Parking",
    "HousingStock",
    "BuildingType",
    "Layout",
    "Link",
    "Images",
    "ValidationIssue",
    "CommunityDataError",
    "ALLOWED_AREA_RANGES",
    "MAX_COMPARE_COUNT",
    "MIN_COMPARE_COUNT",
    "SORT_KEYS",
]
