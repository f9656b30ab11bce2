"""Tests for loading the community collection from a data directory."""

import sys
import textwrap
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from catalog import get_repository
from catalog.repository import CommunityRepository, resolve_data_dir
from models.issues import CommunityDataError

VALID_YAML = """\
id: {id}
name_zh: 江湾花园
tags: [学区]
updated_at: 2024-05-18
"""


def write_file(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path):
    """Empty community data directory."""
    directory = tmp_path / "communities"
    directory.mkdir()
    return directory


class TestLoadAll:
    """Test the happy path and caching."""

    def test_loads_records_in_file_name_order(self, data_dir):
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="b"))
        write_file(data_dir, "a.yml", VALID_YAML.format(id="a"))
        write_file(data_dir, "notes.txt", "not a community")

        communities = CommunityRepository(data_dir).load_all()

        assert [c.id for c in communities] == ["a", "b"]
        assert [c.source_file for c in communities] == ["a.yml", "b.yaml"]

    def test_unquoted_date_kept_as_string(self, data_dir):
        """Test YAML dates are not converted to date objects."""
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a"))

        community = CommunityRepository(data_dir).load_all()[0]
        assert community.updated_at == "2024-05-18"

    def test_repeated_calls_return_cached_collection(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a"))
        repository = CommunityRepository(data_dir)

        first = repository.load_all()
        # Later file changes are not picked up
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="b"))
        second = repository.load_all()

        assert second is first
        assert len(second) == 1

    def test_collection_is_immutable(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a"))
        communities = CommunityRepository(data_dir).load_all()
        assert isinstance(communities, tuple)

    def test_empty_directory(self, data_dir):
        assert CommunityRepository(data_dir).load_all() == ()

    def test_missing_directory(self, tmp_path):
        repository = CommunityRepository(tmp_path / "does-not-exist")
        assert repository.load_all() == ()


class TestLoadFailures:
    """Test aggregation of validation and structural problems."""

    def test_field_error_fails_whole_load(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a"))
        write_file(
            data_dir,
            "b.yaml",
            """\
            id: b
            name_zh: 林语苑
            tags: 学区
            updated_at: 2024-05-18
            """,
        )
        repository = CommunityRepository(data_dir)

        with pytest.raises(CommunityDataError) as exc_info:
            repository.load_all()

        assert [issue.field_path for issue in exc_info.value.issues] == ["tags"]
        assert "[b.yaml] tags: must be array; value=学区" in str(exc_info.value)

    def test_structural_error_isolated_to_its_file(self, data_dir):
        """Test a non-mapping root is one line for that file only."""
        write_file(data_dir, "a.yaml", "- not\n- a mapping\n")
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="b"))

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        lines = str(exc_info.value).split("\n")
        assert len([line for line in lines if line.startswith("[a.yaml]")]) == 1
        assert [line for line in lines if line.startswith("[b.yaml]")] == []
        assert '[a.yaml] root: must be object; value=["not", "a mapping"]' in lines

    def test_empty_file_is_structural_error(self, data_dir):
        write_file(data_dir, "a.yaml", "")

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        assert str(exc_info.value).split("\n")[1] == (
            "[a.yaml] root: must be object; value=null"
        )

    def test_invalid_yaml_reported_per_file(self, data_dir):
        write_file(data_dir, "a.yaml", "id: [unclosed\n")
        write_file(data_dir, "b.yaml", "id: b\nname_zh: x\n")

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        issues = exc_info.value.issues
        assert issues[0].file_name == "a.yaml"
        assert issues[0].reason == "invalid YAML"
        assert "\n" not in issues[0].render()
        # b.yaml is still validated
        assert {issue.field_path for issue in issues[1:]} == {"tags", "updated_at"}

    def test_undecodable_file_reported_per_file(self, data_dir):
        (data_dir / "a.yaml").write_bytes(b"\xff\xfe")
        write_file(data_dir, "b.yaml", "[]\n")

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        issues = exc_info.value.issues
        assert [(issue.file_name, issue.field_path, issue.reason) for issue in issues] == [
            ("a.yaml", "root", "invalid encoding"),
            ("b.yaml", "root", "must be object"),
        ]

    def test_all_problems_reported_in_one_pass(self, data_dir):
        write_file(data_dir, "a.yaml", "name_zh: x\ntags: []\nupdated_at: 2024-1-1\n")
        write_file(data_dir, "b.yaml", "42\n")

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        assert [issue.render() for issue in exc_info.value.issues] == [
            "[a.yaml] id: required; value=null",
            "[a.yaml] updated_at: must match YYYY-MM-DD; value=2024-1-1",
            "[b.yaml] root: must be object; value=42",
        ]

    def test_duplicate_ids_rejected(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="same"))
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="same"))

        with pytest.raises(CommunityDataError) as exc_info:
            CommunityRepository(data_dir).load_all()

        assert [issue.render() for issue in exc_info.value.issues] == [
            "[b.yaml] id: duplicate of id in a.yaml; value=same"
        ]

    def test_failed_load_is_retried(self, data_dir):
        """Test nothing is cached after a failure."""
        broken = write_file(data_dir, "a.yaml", "[]\n")
        repository = CommunityRepository(data_dir)
        with pytest.raises(CommunityDataError):
            repository.load_all()

        broken.write_text(VALID_YAML.format(id="a"), encoding="utf-8")
        assert [c.id for c in repository.load_all()] == ["a"]


class TestFindByKey:
    """Test lookups by route key and id."""

    def test_slug_match(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a1") + "slug: jiangwan\n")
        repository = CommunityRepository(data_dir)

        assert repository.find_by_key("jiangwan").id == "a1"
        assert repository.find_by_key("a1").id == "a1"
        assert repository.find_by_key("missing") is None

    def test_slug_wins_over_other_records_id(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a1") + "slug: shared\n")
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="shared"))

        assert CommunityRepository(data_dir).find_by_key("shared").id == "a1"

    def test_route_key_checked_before_id(self, data_dir):
        """Test a later route key match beats an earlier id match."""
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="k") + "slug: other\n")
        write_file(data_dir, "b.yaml", VALID_YAML.format(id="b1") + "slug: k\n")

        assert CommunityRepository(data_dir).find_by_key("k").id == "b1"

    def test_numeric_id_lookup(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id=1002))
        assert CommunityRepository(data_dir).find_by_key("1002").id == "1002"


class TestDataDirResolution:
    """Test the data directory precedence."""

    def test_explicit_override_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COMMUNITY_DATA_DIR", str(tmp_path / "env"))
        assert resolve_data_dir(tmp_path / "explicit") == tmp_path / "explicit"

    def test_environment_variable(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COMMUNITY_DATA_DIR", str(tmp_path / "env"))
        assert resolve_data_dir() == tmp_path / "env"

    def test_default_relative_to_working_directory(self, monkeypatch, tmp_path):
        monkeypatch.delenv("COMMUNITY_DATA_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        assert resolve_data_dir() == tmp_path / "data" / "communities"

    def test_get_repository_uses_config(self, data_dir):
        write_file(data_dir, "a.yaml", VALID_YAML.format(id="a"))
        repository = get_repository({"data_dir": str(data_dir)})
        assert [c.id for c in repository.load_all()] == ["a"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
