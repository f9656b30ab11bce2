"""Loading, validation and caching of the community collection."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from catalog.normalizer import CommunityNormalizer
from catalog.validator import CommunityValidator
from models.community import CommunityRecord
from models.constants import DATA_DIR_ENV_VAR, DATA_FILE_EXTENSIONS, DEFAULT_DATA_DIR
from models.issues import CommunityDataError, ValidationIssue

logger = logging.getLogger(__name__)

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class CommunityYamlLoader(yaml.SafeLoader):
    """Safe YAML loader that keeps unquoted dates such as 2024-01-01 as strings."""


CommunityYamlLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def resolve_data_dir(override: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the community data directory.

    Precedence: explicit override, then the COMMUNITY_DATA_DIR environment
    variable, then data/communities under the working directory.
    """
    if override:
        return Path(override)
    env_dir = os.environ.get(DATA_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir)
    return Path.cwd() / DEFAULT_DATA_DIR


class CommunityRepository:
    """
    Read-only store of community records backed by a directory of YAML files.

    The collection is loaded on first access and kept for the lifetime of
    the repository; a new repository is needed to pick up changed files.
    A failed load raises CommunityDataError and caches nothing.
    """

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        validator: Optional[CommunityValidator] = None,
        normalizer: Optional[CommunityNormalizer] = None,
    ):
        """
        Initialize the repository.

        Args:
            data_dir: Directory holding one YAML file per community
            validator: Validator to use (default CommunityValidator)
            normalizer: Normalizer to use (default CommunityNormalizer)
        """
        self.data_dir = resolve_data_dir(data_dir)
        self.validator = validator or CommunityValidator()
        self.normalizer = normalizer or CommunityNormalizer()
        self._communities: Optional[Tuple[CommunityRecord, ...]] = None

    def load_all(self) -> Tuple[CommunityRecord, ...]:
        """
        Return all communities, loading them on first call.

        Returns:
            Tuple of records in file-name order

        Raises:
            CommunityDataError: If any file is malformed or fails validation
        """
        if self._communities is not None:
            return self._communities

        if not self.data_dir.exists():
            logger.warning(
                f"Community data directory not found: {self.data_dir} - no communities loaded"
            )
            self._communities = ()
            return self._communities

        data_files = self._list_data_files()
        logger.info(f"Loading {len(data_files)} community file(s) from {self.data_dir}")

        issues: List[ValidationIssue] = []
        communities: List[CommunityRecord] = []

        for path in data_files:
            file_name = path.name
            try:
                parsed = self._read_file(path)
            except UnicodeDecodeError as e:
                issues.append(ValidationIssue(file_name, "root", "invalid encoding", str(e)))
                continue
            except yaml.YAMLError as e:
                issues.append(
                    ValidationIssue(file_name, "root", "invalid YAML", " ".join(str(e).split()))
                )
                continue

            if not isinstance(parsed, dict):
                issues.append(ValidationIssue(file_name, "root", "must be object", parsed))
                continue

            issues.extend(self.validator.validate(file_name, parsed))
            communities.append(self.normalizer.normalize(file_name, parsed))
            logger.debug(f"Parsed {file_name}")

        issues.extend(self._check_duplicate_ids(communities))

        if issues:
            logger.error(f"Community data has {len(issues)} problem(s); load aborted")
            raise CommunityDataError(issues)

        self._communities = tuple(communities)
        logger.info(f"Loaded {len(self._communities)} communities")
        return self._communities

    def find_by_key(self, key: str) -> Optional[CommunityRecord]:
        """
        Look up a community by route key, falling back to its id.

        Args:
            key: Route key (slug or id) or raw id

        Returns:
            Matching record, or None
        """
        communities = self.load_all()
        for community in communities:
            if community.route_key == key:
                return community
        for community in communities:
            if community.id == key:
                return community
        return None

    def _list_data_files(self) -> List[Path]:
        """YAML files in the data directory, sorted by file name."""
        return sorted(
            (
                path
                for path in self.data_dir.iterdir()
                if path.is_file() and path.name.endswith(DATA_FILE_EXTENSIONS)
            ),
            key=lambda path: path.name,
        )

    def _read_file(self, path: Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.load(f, Loader=CommunityYamlLoader)

    def _check_duplicate_ids(
        self, communities: List[CommunityRecord]
    ) -> List[ValidationIssue]:
        """Ids must be unique across files; the first file claiming an id owns it."""
        issues: List[ValidationIssue] = []
        owners: Dict[str, str] = {}
        for community in communities:
            if not community.id:
                continue
            owner = owners.setdefault(community.id, community.source_file)
            if owner != community.source_file:
                issues.append(
                    ValidationIssue(
                        community.source_file,
                        "id",
                        f"duplicate of id in {owner}",
                        community.id,
                    )
                )
        return issues
