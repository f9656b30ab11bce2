"""Community data loading: validation, normalization and the repository."""

import logging
from typing import Any, Dict

from catalog.normalizer import CommunityNormalizer
from catalog.repository import CommunityRepository, resolve_data_dir
from catalog.validator import CommunityValidator

logger = logging.getLogger(__name__)


def get_repository(config: Dict[str, Any]) -> CommunityRepository:
    """
    Factory function to build the community repository from configuration.

    Args:
        config: Configuration dictionary from config.json

    Returns:
        Repository reading from the configured data directory

    Example:
        >>> repository = get_repository({"data_dir": "data/communities"})
        >>> community = repository.find_by_key("riverside-garden")
    """
    repository = CommunityRepository(data_dir=config.get("data_dir"))
    logger.info(f"Community data directory: {repository.data_dir}")
    return repository


__all__ = [
    "get_repository",
    "resolve_data_dir",
    "CommunityRepository",
    "CommunityValidator",
    "CommunityNormalizer",
]
