"""Filtering, sorting and comparison selection over loaded communities."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from models.community import CommunityRecord
from models.constants import (
    DEFAULT_SORT_KEY,
    MAX_COMPARE_COUNT,
    MIN_COMPARE_COUNT,
    SORT_KEYS,
)
from utils.format import (
    get_build_start_year,
    get_building_types,
    get_nearest_metro_distance,
    parse_date_value,
    to_number,
)
from utils.translations import PHRASES

logger = logging.getLogger(__name__)


def unique_values(values: Iterable[Optional[str]]) -> List[str]:
    """Distinct non-empty values in first-seen order."""
    seen: Dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


def collect_facets(communities: Sequence[CommunityRecord]) -> Dict[str, List[str]]:
    """Tag, district and area values available for filtering."""
    return {
        "tags": unique_values(tag for c in communities for tag in c.tags),
        "districts": unique_values(c.district for c in communities),
        "areas": unique_values(c.area for c in communities),
    }


def filter_communities(
    communities: Sequence[CommunityRecord],
    tags: Optional[Sequence[str]] = None,
    district: Optional[str] = None,
    area: Optional[str] = None,
) -> List[CommunityRecord]:
    """
    Apply the list page filters.

    A community matches when it carries any of the selected tags and equals
    the selected district and area. Empty filters match everything.
    """
    selected_tags = list(tags or [])
    result = []
    for community in communities:
        match_tags = not selected_tags or any(tag in community.tags for tag in selected_tags)
        match_district = not district or community.district == district
        match_area = not area or community.area == area
        if match_tags and match_district and match_area:
            result.append(community)
    return result


def sort_communities(
    communities: Sequence[CommunityRecord],
    sort_by: str = DEFAULT_SORT_KEY,
) -> List[CommunityRecord]:
    """
    Sort communities for the list page. The sort is stable.

    Args:
        communities: Communities to sort
        sort_by: One of SORT_KEYS

    Raises:
        ValueError: If sort_by is not a known sort key
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(
            f"Unsupported sort key: {sort_by}. Supported: {', '.join(SORT_KEYS)}"
        )

    if sort_by == "price_asc":
        def key(c: CommunityRecord) -> float:
            price = to_number(c.price.ref_wan_per_sqm) if c.price else None
            return price if price is not None else float("inf")
    elif sort_by == "metro_asc":
        def key(c: CommunityRecord) -> float:
            distance = get_nearest_metro_distance(c)
            return distance if distance is not None else float("inf")
    elif sort_by == "build_year_desc":
        def key(c: CommunityRecord) -> float:
            return -(get_build_start_year(c) or 0)
    else:
        def key(c: CommunityRecord) -> float:
            return -parse_date_value(c.updated_at)

    return sorted(communities, key=key)


def get_main_supply_by_range(community: CommunityRecord, area_range: str) -> str:
    """Building types whose main-supply layout falls into area_range."""
    hits = []
    for building_type in get_building_types(community):
        if any(
            layout.area_sqm_range == area_range and layout.main_supply
            for layout in building_type.layouts
        ):
            hits.append(str(building_type.type or PHRASES["unnamed_building_type"]))
    return " / ".join(hits) if hits else PHRASES["none"]


@dataclass
class TargetComparison:
    """Distances from each compared community to one shared target."""

    target_id: str
    target_name: str
    distances: List[float]


def get_target_comparison(selected: Sequence[CommunityRecord]) -> Optional[TargetComparison]:
    """
    Compare distances to the first target listed by any selected community.

    Returns:
        TargetComparison, or None when no target exists or every distance is 0
    """
    first_target = None
    for community in selected:
        targets = community.distance.to_targets if community.distance else []
        first_target = next((t for t in targets if t.id), None)
        if first_target:
            break
    if first_target is None:
        return None

    distances = []
    for community in selected:
        targets = community.distance.to_targets if community.distance else []
        hit = next((t for t in targets if t.id == first_target.id), None)
        value = to_number(hit.distance_m) if hit else None
        distances.append(value or 0)

    if all(value == 0 for value in distances):
        return None

    return TargetComparison(
        target_id=str(first_target.id),
        target_name=first_target.name or str(first_target.id),
        distances=distances,
    )


class CompareSelection:
    """
    Ordered set of community ids picked for side-by-side comparison.

    Holds at most ``limit`` ids; a comparison needs at least
    MIN_COMPARE_COUNT of them.
    """

    def __init__(self, ids: Optional[Iterable[str]] = None, limit: int = MAX_COMPARE_COUNT):
        self.limit = limit
        self.ids: List[str] = []
        for community_id in ids or []:
            if len(self.ids) >= limit:
                logger.warning(f"Compare selection capped at {limit} communities")
                break
            if str(community_id) not in self.ids:
                self.ids.append(str(community_id))

    @classmethod
    def parse_ids(cls, value: str, limit: int = MAX_COMPARE_COUNT) -> "CompareSelection":
        """Build a selection from a comma-separated id list such as 'a, b,c'."""
        ids = [item.strip() for item in (value or "").split(",")]
        return cls([item for item in ids if item], limit=limit)

    def toggle(self, community_id: str, checked: bool) -> Optional[str]:
        """
        Add or remove an id.

        Returns:
            Message for the user when the limit blocks the change, else None
        """
        if not checked:
            self.remove(community_id)
            return None
        if community_id in self.ids:
            return None
        if len(self.ids) >= self.limit:
            return PHRASES["compare_limit_reached"].format(limit=self.limit)
        self.ids.append(community_id)
        return None

    def remove(self, community_id: str) -> None:
        self.ids = [item for item in self.ids if item != community_id]

    def can_compare(self) -> bool:
        return len(self.ids) >= MIN_COMPARE_COUNT

    def check_ready(self) -> Optional[str]:
        """Message for the user when too few communities are selected."""
        if self.can_compare():
            return None
        return PHRASES["compare_need_more"].format(minimum=MIN_COMPARE_COUNT)

    def select(self, communities: Sequence[CommunityRecord]) -> List[CommunityRecord]:
        """Records for the selected ids, in selection order; unknown ids are skipped."""
        by_id: Dict[str, CommunityRecord] = {}
        for community in communities:
            by_id.setdefault(community.id, community)
        selected = []
        for community_id in self.ids:
            if community_id in by_id:
                selected.append(by_id[community_id])
            else:
                logger.warning(f"Compare selection references unknown id: {community_id}")
        return selected

    def __contains__(self, community_id: object) -> bool:
        return community_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)
