"""Tests for list filtering, sorting and compare selection."""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from catalog.normalizer import CommunityNormalizer
from utils.browse import (
    CompareSelection,
    collect_facets,
    filter_communities,
    get_main_supply_by_range,
    get_target_comparison,
    sort_communities,
    unique_values,
)


def make_community(record_id, **fields):
    raw = {"id": record_id, "name_zh": record_id, "tags": [], "updated_at": "2024-01-01"}
    raw.update(fields)
    return CommunityNormalizer().normalize(f"{record_id}.yaml", raw)


@pytest.fixture
def communities():
    """Three communities with distinct facets and metrics."""
    return [
        make_community(
            "a",
            tags=["学区", "近地铁"],
            district="杨浦",
            area="新江湾城",
            updated_at="2024-03-01",
            price={"ref_wan_per_sqm": 7.8},
            build={"build_year_range": "2008-2010"},
            distance={"metro": [{"station": "殷高东路", "distance_m": 650}]},
        ),
        make_community(
            "b",
            tags=["低密度"],
            district="浦东",
            area="花木",
            updated_at="2024-05-01",
            price={"ref_wan_per_sqm": 9.1},
            build={"build_year_range": "2003年"},
            distance={"metro": [{"station": "芳华路", "distance_m": 900}]},
        ),
        make_community(
            "c",
            tags=["学区"],
            district="杨浦",
            updated_at="2023-12-01",
        ),
    ]


class TestFacets:
    """Test facet collection."""

    def test_unique_values_keep_first_seen_order(self):
        assert unique_values(["b", None, "a", "b", ""]) == ["b", "a"]

    def test_collect_facets(self, communities):
        facets = collect_facets(communities)
        assert facets["tags"] == ["学区", "近地铁", "低密度"]
        assert facets["districts"] == ["杨浦", "浦东"]
        assert facets["areas"] == ["新江湾城", "花木"]


class TestFilter:
    """Test list filters."""

    def test_no_filters_match_all(self, communities):
        assert filter_communities(communities) == communities

    def test_any_selected_tag_matches(self, communities):
        result = filter_communities(communities, tags=["近地铁", "低密度"])
        assert [c.id for c in result] == ["a", "b"]

    def test_district_and_area_combined(self, communities):
        assert [c.id for c in filter_communities(communities, district="杨浦")] == ["a", "c"]
        result = filter_communities(communities, district="杨浦", area="新江湾城")
        assert [c.id for c in result] == ["a"]

    def test_no_match(self, communities):
        assert filter_communities(communities, tags=["学区"], district="浦东") == []


class TestSort:
    """Test list sort orders."""

    def test_updated_desc_is_default(self, communities):
        assert [c.id for c in sort_communities(communities)] == ["b", "a", "c"]

    def test_price_asc_missing_last(self, communities):
        result = sort_communities(communities, "price_asc")
        assert [c.id for c in result] == ["a", "b", "c"]

    def test_metro_asc_missing_last(self, communities):
        result = sort_communities(communities, "metro_asc")
        assert [c.id for c in result] == ["a", "b", "c"]

    def test_build_year_desc(self, communities):
        result = sort_communities(communities, "build_year_desc")
        assert [c.id for c in result] == ["a", "b", "c"]

    def test_sort_is_stable(self):
        items = [make_community(x) for x in ("x", "y", "z")]
        assert [c.id for c in sort_communities(items, "price_asc")] == ["x", "y", "z"]

    def test_unknown_sort_key(self, communities):
        with pytest.raises(ValueError, match="Unsupported sort key"):
            sort_communities(communities, "name_asc")


class TestCompareSelection:
    """Test the compare selection rules."""

    def test_toggle_adds_and_removes(self):
        selection = CompareSelection()
        assert selection.toggle("a", True) is None
        assert selection.toggle("a", True) is None
        assert selection.ids == ["a"]
        selection.toggle("a", False)
        assert len(selection) == 0

    def test_limit_of_six(self):
        selection = CompareSelection(["1", "2", "3", "4", "5", "6"])
        message = selection.toggle("7", True)
        assert message == "最多只能选择 6 个小区进行对比"
        assert "7" not in selection
        assert len(selection) == 6

    def test_initial_ids_capped_and_deduplicated(self):
        selection = CompareSelection(["1", "1", "2", "3", "4", "5", "6", "7"])
        assert selection.ids == ["1", "2", "3", "4", "5", "6"]

    def test_needs_two_to_compare(self):
        selection = CompareSelection(["a"])
        assert not selection.can_compare()
        assert selection.check_ready() == "至少选择 2 个小区后才能对比"
        selection.toggle("b", True)
        assert selection.check_ready() is None

    def test_parse_ids(self):
        selection = CompareSelection.parse_ids(" a, b,,c ")
        assert selection.ids == ["a", "b", "c"]
        assert CompareSelection.parse_ids("").ids == []

    def test_select_in_selection_order(self, communities):
        selection = CompareSelection(["c", "missing", "a"])
        assert [c.id for c in selection.select(communities)] == ["c", "a"]



class TestCompareMetrics:
    """Test derived comparison values."""

    def test_main_supply_by_range(self):
        community = make_community(
            "a",
            housing_stock={
                "building_types": [
                    {"type": "小高层", "layouts": [{"area_sqm_range": "90-100", "main_supply": True}]},
                    {"layouts": [{"area_sqm_range": "90-100", "main_supply": True}]},
                    {"type": "洋房", "layouts": [{"area_sqm_range": "90-100", "main_supply": False}]},
                ]
            },
        )
        assert get_main_supply_by_range(community, "90-100") == "小高层 / 未命名类型"
        assert get_main_supply_by_range(community, "80-90") == "-"

    def test_main_supply_with_numeric_type(self):
        community = make_community(
            "a",
            housing_stock={
                "building_types": [
                    {"type": 18, "layouts": [{"area_sqm_range": "90-100", "main_supply": True}]},
                    {"type": "洋房", "layouts": [{"area_sqm_range": "90-100", "main_supply": True}]},
                ]
            },
        )
        assert get_main_supply_by_range(community, "90-100") == "18 / 洋房"

    def test_target_comparison(self):
        selected = [
            make_community("a"),
            make_community(
                "b",
                distance={"to_targets": [{"id": "office", "name": "办公室", "distance_m": 3200}]},
            ),
            make_community(
                "c",
                distance={"to_targets": [{"id": "office", "distance_m": 15800}]},
            ),
        ]

        target = get_target_comparison(selected)
        assert target.target_id == "office"
        assert target.target_name == "办公室"
        assert target.distances == [0, 3200, 15800]

    def test_target_comparison_absent(self):
        assert get_target_comparison([make_community("a"), make_community("b")]) is None
        zero = make_community("z", distance={"to_targets": [{"id": "office", "distance_m": 0}]})
        assert get_target_comparison([zero]) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
