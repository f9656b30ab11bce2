"""Static site builder for the community catalog."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from catalog import get_repository
from catalog.repository import CommunityRepository
from models.community import CommunityRecord
from models.constants import DEFAULT_SORT_KEY, SORT_KEYS
from models.issues import CommunityDataError
from utils.browse import (
    CompareSelection,
    collect_facets,
    filter_communities,
    sort_communities,
)
from utils.markdown_generator import MarkdownGenerator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class CommunitySiteBuilder:
    """Renders the list, detail and compare pages for all communities."""

    def __init__(self, config: Dict[str, Any], repository: CommunityRepository):
        """
        Initialize the builder with configuration.

        Args:
            config: Configuration dictionary from config.json
            repository: Repository the pages are rendered from
        """
        self.config = config
        self.repository = repository

        # List page settings
        list_config = config.get("list", {})
        self.filters = {
            "tags": list_config.get("tags", []),
            "district": list_config.get("district"),
            "area": list_config.get("area"),
        }
        self.sort_by = list_config.get("sort_by", DEFAULT_SORT_KEY)

        # Compare page settings
        compare_config = config.get("compare", {})
        ids = compare_config.get("ids", [])
        if isinstance(ids, str):
            self.compare = CompareSelection.parse_ids(ids)
        else:
            self.compare = CompareSelection(ids)

        # Output
        self.output_folder = Path(config.get("output_folder", "output"))
        self.md_generator = MarkdownGenerator(
            output_dir=str(self.output_folder),
            base_url=config.get("base_url", "/"),
        )

    def build_list(self, communities: List[CommunityRecord]) -> str:
        """Write index.md with the filtered, sorted list."""
        visible = filter_communities(communities, **self.filters)
        visible = sort_communities(visible, self.sort_by)
        logger.info(f"List page: {len(visible)} of {len(communities)} communities match filters")

        content = self.md_generator.generate_list_page(
            visible,
            facets=collect_facets(communities),
            filters=self.filters,
            sort_by=self.sort_by,
        )
        return self.md_generator.write_page("index.md", content)

    def build_compare(self, communities: List[CommunityRecord]) -> str:
        """Write compare.md for the configured selection."""
        message = self.compare.check_ready()
        if message:
            logger.info(f"Compare page: {message}")

        selected = self.compare.select(communities)
        content = self.md_generator.generate_compare_page(selected)
        return self.md_generator.write_page("compare.md", content)

    def export_json(self, communities: List[CommunityRecord]) -> str:
        """Write communities.json with every normalized record."""
        self.output_folder.mkdir(parents=True, exist_ok=True)
        filepath = self.output_folder / "communities.json"
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                [c.to_dict() for c in communities], f, ensure_ascii=False, indent=2, default=str
            )
        logger.info(f"Exported {len(communities)} communities to {filepath}")
        return str(filepath)

    def run(self) -> List[CommunityRecord]:
        """
        Load all communities and render every page.

        Returns:
            The loaded communities

        Raises:
            CommunityDataError: If the data directory contains invalid files
        """
        communities = list(self.repository.load_all())

        self.md_generator.assign_page_names(communities)
        for community in communities:
            self.md_generator.generate_community_file(community)
        logger.info(f"Detail pages written: {len(communities)}")

        self.build_list(communities)
        if self.compare.ids:
            self.build_compare(communities)
        self.export_json(communities)

        logger.info(f"Site written to {self.output_folder}")
        return communities


def load_config() -> Dict[str, Any]:
    """Load configuration from config.json"""
    config_path = Path(__file__).parent / "config.json"
    with open(config_path, "r", encoding="utf-8") as f:
        config = json.load(f)

    # Validate list settings
    sort_by = config.get("list", {}).get("sort_by", DEFAULT_SORT_KEY)
    if sort_by not in SORT_KEYS:
        raise ValueError(
            f"Invalid 'list.sort_by' in config.json: {sort_by}. "
            f"Supported: {', '.join(SORT_KEYS)}"
        )

    tags = config.get("list", {}).get("tags", [])
    if not isinstance(tags, list):
        raise ValueError("'list.tags' in config.json must be a list")

    ids = config.get("compare", {}).get("ids", [])
    if not isinstance(ids, (list, str)):
        raise ValueError(
            "'compare.ids' in config.json must be a list or a comma-separated string"
        )

    return config


def main() -> int:
    """Main entry point for the site builder."""
    try:
        config = load_config()
        repository = get_repository(config)
        builder = CommunitySiteBuilder(config, repository)
        communities = builder.run()

        logger.info(f"Build complete! Rendered {len(communities)} communities.")
        return 0

    except FileNotFoundError:
        logger.error("config.json not found")
    except CommunityDataError as e:
        logger.error(str(e))
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
