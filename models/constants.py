"""Community catalog constants."""

import re
from typing import Dict, List, Tuple

# Floor-area buckets a layout may be classified into
ALLOWED_AREA_RANGES: List[str] = ["80-90", "90-100", "100-120"]

# updated_at is pattern-matched only, never parsed as a calendar date
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

# Data files recognized in the community directory
DATA_FILE_EXTENSIONS: Tuple[str, ...] = (".yml", ".yaml")

# Directory override and default location (relative to the working directory)
DATA_DIR_ENV_VAR = "COMMUNITY_DATA_DIR"
DEFAULT_DATA_DIR = "data/communities"

# Image paths in source files are relative to the data folder;
# the rendered site serves them from the public root
SOURCE_ASSET_PREFIX = "../assets/"
PUBLIC_ASSET_PREFIX = "/assets/"

# Travel speeds in meters per minute
TRAVEL_SPEEDS: Dict[str, int] = {
    "walk": 80,
    "bike": 250,
}

# Comparison limits
MAX_COMPARE_COUNT = 6
MIN_COMPARE_COUNT = 2

# List sort options
SORT_KEYS: List[str] = [
    "updated_desc",
    "price_asc",
    "metro_asc",
    "build_year_desc",
]
DEFAULT_SORT_KEY = "updated_desc"
