"""Display helpers shared by the list, detail and compare views."""

import math
import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from models.community import BuildingType, CommunityRecord
from models.constants import PUBLIC_ASSET_PREFIX, SOURCE_ASSET_PREFIX, TRAVEL_SPEEDS
from utils.translations import PHRASES

YEAR_PATTERN = re.compile(r"(\d{4})", re.ASCII)


def to_number(value: Any) -> Optional[float]:
    """Coerce a raw numeric field; None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def format_number(value: float) -> str:
    """Render 850.0 as '850' and 1.5 as '1.5'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_date_value(date_str: Optional[str]) -> float:
    """Epoch seconds of a YYYY-MM-DD date, 0 when absent or unparseable."""
    if not date_str:
        return 0
    try:
        parsed = datetime.strptime(date_str, "%Y-%m-%d")
    except (TypeError, ValueError):
        return 0
    return parsed.replace(tzinfo=timezone.utc).timestamp()


def get_nearest_metro_distance(community: CommunityRecord) -> Optional[float]:
    """Shortest positive metro distance in meters, or None."""
    if community.distance is None:
        return None
    values = [to_number(item.distance_m) for item in community.distance.metro]
    values = [value for value in values if value is not None and value > 0]
    if not values:
        return None
    return min(values)


def get_nearest_metro_label(community: CommunityRecord) -> str:
    """Station name and distance text of the nearest metro station."""
    metros = community.distance.metro if community.distance else []
    valid = [item for item in metros if to_number(item.distance_m) is not None]
    if not valid:
        return PHRASES["none"]
    # min() keeps the first entry on ties
    nearest = min(valid, key=lambda item: to_number(item.distance_m))
    station_name = nearest.station or PHRASES["unknown_station"]
    return f"{station_name} {format_distance_with_time(to_number(nearest.distance_m))}"


def get_build_start_year(community: CommunityRecord) -> Optional[int]:
    """First four-digit year found in build_year_range."""
    year_range = community.build.build_year_range if community.build else None
    if not year_range or not isinstance(year_range, str):
        return None
    match = YEAR_PATTERN.search(year_range)
    if not match:
        return None
    return int(match.group(1))


def format_distance_with_time(distance_m: Optional[float]) -> str:
    """
    Format a distance with walking and cycling times.

    Example:
        >>> format_distance_with_time(850)
        '850m（步行约11分钟 / 骑行约3分钟）'
    """
    distance = to_number(distance_m)
    if not distance:
        return PHRASES["none"]
    walk_minutes = round_half_up(distance / TRAVEL_SPEEDS["walk"])
    bike_minutes = round_half_up(distance / TRAVEL_SPEEDS["bike"])
    return PHRASES["distance_with_time"].format(
        distance=format_number(distance),
        walk=walk_minutes,
        bike=bike_minutes,
    )


def normalize_image_path(path: Optional[str]) -> Optional[str]:
    """Rewrite a source-relative asset path to its public path."""
    if not path:
        return None
    if path.startswith(SOURCE_ASSET_PREFIX):
        return PUBLIC_ASSET_PREFIX + path[len(SOURCE_ASSET_PREFIX):]
    return path


def with_base_url(base_url: str, target_path: str) -> str:
    """Join a site base URL and a path with exactly one slash between them."""
    clean_base = "" if base_url == "/" else re.sub(r"/$", "", base_url)
    clean_path = re.sub(r"^/", "", target_path)
    return f"{clean_base}/{clean_path}"


def format_location(community: CommunityRecord) -> str:
    parts = [str(part) for part in (community.district, community.area) if part]
    return " / ".join(parts) if parts else PHRASES["none"]


def format_value(value: Any) -> str:
    """Display text for an optional scalar; '-' when missing."""
    if value is None or value == "":
        return PHRASES["none"]
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def get_building_types(community: CommunityRecord) -> List[BuildingType]:
    if community.housing_stock is None:
        return []
    return community.housing_stock.building_types
