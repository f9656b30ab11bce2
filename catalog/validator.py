"""Field-level validation of raw community records."""

import logging
from typing import Any, Dict, List

from models.community import as_sequence
from models.constants import ALLOWED_AREA_RANGES, DATE_PATTERN
from models.issues import ValidationIssue

logger = logging.getLogger(__name__)


class CommunityValidator:
    """
    Checks one parsed community file against the record schema.

    Every check runs independently, so a single pass reports all problems
    of a file. The validator never raises; it only returns issues.
    """

    def __init__(self, allowed_area_ranges: List[str] = ALLOWED_AREA_RANGES):
        self.allowed_area_ranges = list(allowed_area_ranges)

    def validate(self, file_name: str, raw: Dict[str, Any]) -> List[ValidationIssue]:
        """
        Validate a raw record.

        Args:
            file_name: Name of the file the record came from
            raw: Parsed YAML mapping

        Returns:
            List of issues, empty when the record is valid
        """
        issues: List[ValidationIssue] = []

        if not raw.get("id"):
            issues.append(ValidationIssue(file_name, "id", "required", raw.get("id")))
        if not raw.get("name_zh"):
            issues.append(
                ValidationIssue(file_name, "name_zh", "required", raw.get("name_zh"))
            )
        if not isinstance(raw.get("tags"), list):
            issues.append(
                ValidationIssue(file_name, "tags", "must be array", raw.get("tags"))
            )

        updated_at = raw.get("updated_at")
        if not isinstance(updated_at, str) or not DATE_PATTERN.fullmatch(updated_at):
            issues.append(
                ValidationIssue(
                    file_name, "updated_at", "must match YYYY-MM-DD", updated_at
                )
            )

        issues.extend(self._check_area_ranges(file_name, raw.get("housing_stock")))

        if issues:
            logger.debug(f"{file_name}: {len(issues)} validation issue(s)")
        return issues

    def _check_area_ranges(self, file_name: str, housing_stock: Any) -> List[ValidationIssue]:
        """Every layout must sit in one of the allowed floor-area buckets."""
        issues: List[ValidationIssue] = []
        if not isinstance(housing_stock, dict):
            return issues

        reason = f"must be one of {', '.join(self.allowed_area_ranges)}"
        building_types = as_sequence(housing_stock.get("building_types"))
        for type_index, building_type in enumerate(building_types):
            if not isinstance(building_type, dict):
                continue
            layouts = as_sequence(building_type.get("layouts"))
            for layout_index, layout in enumerate(layouts):
                area_range = layout.get("area_sqm_range") if isinstance(layout, dict) else None
                if isinstance(area_range, str) and area_range in self.allowed_area_ranges:
                    continue
                field_path = (
                    f"housing_stock.building_types[{type_index}]"
                    f".layouts[{layout_index}].area_sqm_range"
                )
                issues.append(ValidationIssue(file_name, field_path, reason, area_range))
        return issues
