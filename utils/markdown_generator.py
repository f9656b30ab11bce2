"""Markdown page generation for the community list, detail and compare views."""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence

import yaml

from models.community import CommunityRecord
from models.constants import ALLOWED_AREA_RANGES, DEFAULT_SORT_KEY
from utils.browse import get_main_supply_by_range, get_target_comparison
from utils.format import (
    format_distance_with_time,
    format_location,
    format_value,
    get_building_types,
    get_nearest_metro_distance,
    get_nearest_metro_label,
    with_base_url,
)
from utils.translations import BOOLEAN, HEADERS, LABELS, PHRASES, SORT_LABELS, UNITS

logger = logging.getLogger(__name__)


class MarkdownGenerator:
    """Generator for community pages with YAML frontmatter."""

    def __init__(self, output_dir: str = "output", base_url: str = "/"):
        """
        Initialize the generator.

        Args:
            output_dir: Site output directory; detail pages go to communities/
            base_url: Base URL the rendered site is served from
        """
        self.output_dir = output_dir
        self.base_url = base_url
        self.communities_dir = os.path.join(output_dir, "communities")
        # source_file -> page name, filled by assign_page_names
        self._page_names: Dict[str, str] = {}

    def assign_page_names(self, communities: Sequence[CommunityRecord]) -> Dict[str, str]:
        """
        Give every community a distinct detail page name.

        Route keys that sanitize to the same name get a numeric suffix
        (-2, -3, ...) in collection order, so no page overwrites another.

        Returns:
            Mapping of source file to page name
        """
        self._page_names = {}
        taken: Dict[str, str] = {}
        for community in communities:
            base = self._sanitize_filename(community.route_key)
            name = base
            counter = 2
            while name in taken:
                name = f"{base}-{counter}"
                counter += 1
            if name != base:
                logger.warning(
                    f"Page name {base} of {community.source_file} already used by "
                    f"{taken[base]}; writing {name} instead"
                )
            taken[name] = community.source_file
            self._page_names[community.source_file] = name
        return dict(self._page_names)

    def page_name(self, community: CommunityRecord) -> str:
        assigned = self._page_names.get(community.source_file)
        return assigned or self._sanitize_filename(community.route_key)

    def generate_filename(self, community: CommunityRecord) -> str:
        """Detail page filename, derived from the route key."""
        return f"{self.page_name(community)}.md"

    def _sanitize_filename(self, text: str) -> str:
        """Sanitize text for use in filename."""
        text = re.sub(r"[^\w\s-]", "", text)
        text = re.sub(r"[\s]+", "_", text)
        return text.strip("_") or "community"

    def community_url(self, community: CommunityRecord) -> str:
        return with_base_url(self.base_url, f"communities/{self.page_name(community)}")

    def asset_url(self, path: str) -> str:
        """Public URL of an image; absolute URLs are left alone."""
        if re.match(r"^https?://", path):
            return path
        return with_base_url(self.base_url, path)

    def _dump_frontmatter(self, frontmatter: Dict[str, Any]) -> str:
        return yaml.dump(
            frontmatter, allow_unicode=True, sort_keys=False, default_flow_style=False
        )

    def generate_yaml_frontmatter(self, community: CommunityRecord) -> str:
        """Generate YAML frontmatter for a detail page."""
        frontmatter: Dict[str, Any] = {
            "id": community.id,
            "route_key": community.route_key,
            "name_zh": community.name_zh,
            "updated_at": community.updated_at,
            "source_file": community.source_file,
        }
        if community.district:
            frontmatter["district"] = community.district
        if community.area:
            frontmatter["area"] = community.area
        if community.tags:
            frontmatter["tags"] = list(community.tags)
        if community.images.cover:
            frontmatter["cover"] = community.images.cover

        return self._dump_frontmatter(frontmatter)

    def generate_markdown_content(self, community: CommunityRecord) -> str:
        """Generate the detail page body."""
        content = [f"# {community.name_zh}\n"]

        if community.images.cover:
            content.append(f"![{community.name_zh}]({self.asset_url(community.images.cover)})\n")

        if community.tags:
            content.append(" ".join(f"`{tag}`" for tag in community.tags) + "\n")

        # Basic info
        price = community.price
        content.append(f"## {HEADERS['basic_info']}\n")
        content.append(f"- **{LABELS['district']}:** {format_value(community.district)}")
        content.append(f"- **{LABELS['area']}:** {format_value(community.area)}")
        content.append(
            f"- **{LABELS['build_year_range']}:** "
            f"{format_value(community.build.build_year_range if community.build else None)}"
        )
        content.append(
            f"- **{LABELS['price_level']}:** {format_value(price.level if price else None)}"
        )
        content.append(
            f"- **{LABELS['ref_wan_per_sqm']}:** "
            f"{format_value(price.ref_wan_per_sqm if price else None)} {UNITS['wan_per_sqm']}"
        )
        content.append(
            f"- **{LABELS['ref_total_wan_range']}:** "
            f"{format_value(price.ref_total_wan_range if price else None)} {UNITS['wan']}"
        )
        content.append("")

        content.extend(self._distance_section(community))
        content.extend(self._property_section(community))
        content.extend(self._housing_stock_section(community))

        if community.links:
            content.append(f"## {HEADERS['links']}\n")
            for link in community.links:
                content.append(f"- [{link.title or link.url}]({link.url})")
            content.append("")

        if community.images.gallery:
            content.append(f"## {HEADERS['gallery']}\n")
            for path in community.images.gallery:
                content.append(f"![{community.name_zh}]({self.asset_url(path)})")
            content.append("")

        if community.notes_md:
            content.append(f"## {HEADERS['notes']}\n")
            content.append(community.notes_md.rstrip() + "\n")

        content.append(f"*{LABELS['updated_at']} {format_value(community.updated_at)}*")
        return "\n".join(content)

    def _distance_section(self, community: CommunityRecord) -> List[str]:
        distance = community.distance
        lines = [f"## {HEADERS['distance']}\n", f"### {HEADERS['metro']}\n"]
        for item in distance.metro if distance else []:
            line = " ".join(str(part) for part in (item.station, item.line) if part)
            lines.append(f"- {line}：{format_distance_with_time(item.distance_m)}")
        lines.append(f"\n### {HEADERS['targets']}\n")
        for target in distance.to_targets if distance else []:
            name = target.name or target.id or PHRASES["target_fallback"]
            lines.append(f"- {name}：{format_distance_with_time(target.distance_m)}")
        lines.append("")
        return lines

    def _property_section(self, community: CommunityRecord) -> List[str]:
        prop = community.property
        fee = prop.management_fee if prop else None
        parking = prop.parking if prop else None

        lines = [f"## {HEADERS['property']}\n"]
        for key in ("has_pool", "has_kids_playground", "has_separation_ped_car"):
            value = getattr(prop, key) if prop else None
            lines.append(f"- **{LABELS[key]}:** {BOOLEAN[bool(value)]}")
        lines.append(
            f"- **{LABELS['management_fee']}:** "
            f"{format_value(fee.cny_per_sqm_month_range if fee else None)}"
        )
        lines.append(
            f"- **{LABELS['parking_rent']}:** "
            f"{format_value(parking.monthly_rent_cny_range if parking else None)}"
        )
        lines.append(
            f"- **{LABELS['parking_price']}:** "
            f"{format_value(parking.spot_price_wan_range if parking else None)}"
        )
        if prop and prop.facilities_note:
            lines.append(f"- **{LABELS['facilities_note']}:** {prop.facilities_note}")
        lines.append("")
        return lines

    def _housing_stock_section(self, community: CommunityRecord) -> List[str]:
        lines = [f"## {HEADERS['housing_stock']}\n"]
        for building_type in get_building_types(community):
            type_name = building_type.type or PHRASES["building_type_missing"]
            lines.append(
                f"### {type_name} / {LABELS['total_floors']} "
                f"{format_value(building_type.total_floors_range)}\n"
            )
            for layout in building_type.layouts:
                layout_tags = " / ".join(str(tag) for tag in layout.layout_tags) or PHRASES["no_layout_tags"]
                area_range = f"**{layout.area_sqm_range}**" if layout.main_supply else layout.area_sqm_range
                lines.append(f"- {area_range}: {layout_tags}")
            lines.append("")
        return lines

    def generate_community_file(self, community: CommunityRecord) -> str:
        """
        Write the detail page of a community.

        Returns:
            Path to the generated file
        """
        os.makedirs(self.communities_dir, exist_ok=True)
        filepath = os.path.join(self.communities_dir, self.generate_filename(community))

        frontmatter = self.generate_yaml_frontmatter(community)
        body = self.generate_markdown_content(community)
        full_content = f"---\n{frontmatter}---\n\n{body}\n"

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(full_content)

        logger.debug(f"Wrote detail page {filepath}")
        return filepath

    def generate_list_page(
        self,
        communities: Sequence[CommunityRecord],
        facets: Dict[str, List[str]],
        filters: Optional[Dict[str, Any]] = None,
        sort_by: str = DEFAULT_SORT_KEY,
    ) -> str:
        """
        Generate the list page for already filtered and sorted communities.

        Args:
            communities: Communities to show, in display order
            facets: Available tags, districts and areas
            filters: Active filters (tags, district, area)
            sort_by: Active sort key
        """
        filters = filters or {}
        frontmatter = self._dump_frontmatter(
            {
                "title": HEADERS["list"],
                "count": len(communities),
                "sort_by": sort_by,
                "filters": {k: v for k, v in filters.items() if v},
            }
        )

        content = [f"# {HEADERS['list']}\n"]
        selected_tags = filters.get("tags") or []
        tag_chips = [f"**{tag}**" if tag in selected_tags else str(tag) for tag in facets.get("tags", [])]
        content.append(f"- **{LABELS['tags']}:** {' · '.join(tag_chips) or PHRASES['none']}")
        content.append(
            f"- **{LABELS['district']}:** {filters.get('district') or LABELS['all']}"
            f" ({' / '.join(map(str, facets.get('districts', []))) or PHRASES['none']})"
        )
        content.append(
            f"- **{LABELS['area']}:** {filters.get('area') or LABELS['all']}"
            f" ({' / '.join(map(str, facets.get('areas', []))) or PHRASES['none']})"
        )
        content.append(f"- **{LABELS['sort']}:** {SORT_LABELS.get(sort_by, sort_by)}")
        content.append("")

        if not communities:
            content.append(f"> {PHRASES['no_results']}")
            return f"---\n{frontmatter}---\n\n" + "\n".join(content) + "\n"

        for community in communities:
            price = community.price
            content.append(f"## [{community.name_zh}]({self.community_url(community)})\n")
            content.append(f"- {format_location(community)}")
            content.append(
                f"- {LABELS['unit_price_short']}: "
                f"{format_value(price.ref_wan_per_sqm if price else None)} {UNITS['wan_per_sqm']}"
            )
            content.append(
                f"- {LABELS['total_price_short']}: "
                f"{format_value(price.ref_total_wan_range if price else None)} {UNITS['wan']}"
            )
            content.append(
                f"- {LABELS['nearest_metro']}: "
                f"{format_distance_with_time(get_nearest_metro_distance(community))}"
            )
            content.append(f"- {LABELS['updated_at']} {format_value(community.updated_at)}")
            if community.tags:
                content.append(f"- {' '.join(f'`{tag}`' for tag in community.tags)}")
            content.append("")

        return f"---\n{frontmatter}---\n\n" + "\n".join(content)

    def generate_compare_page(self, selected: Sequence[CommunityRecord]) -> str:
        """Generate the side-by-side comparison table for the selected communities."""
        frontmatter = self._dump_frontmatter(
            {"title": HEADERS["compare"], "ids": [c.id for c in selected]}
        )
        content = [f"# {HEADERS['compare']}\n"]

        if len(selected) < 2:
            content.append(f"> {PHRASES['compare_too_few']}\n")
            content.append(f"[{PHRASES['back_to_list']}]({with_base_url(self.base_url, 'communities')})")
            return f"---\n{frontmatter}---\n\n" + "\n".join(content) + "\n"

        def prop_attr(c: CommunityRecord, section: str, key: str) -> Any:
            owner = getattr(c.property, section, None) if c.property else None
            return getattr(owner, key, None) if owner else None

        rows = [
            (LABELS["district_area"], [format_location(c) for c in selected]),
            (
                LABELS["build_year_range"],
                [format_value(c.build.build_year_range if c.build else None) for c in selected],
            ),
            (
                LABELS["unit_price_column"],
                [format_value(c.price.ref_wan_per_sqm if c.price else None) for c in selected],
            ),
            (
                LABELS["total_price_column"],
                [format_value(c.price.ref_total_wan_range if c.price else None) for c in selected],
            ),
            (LABELS["nearest_metro"], [get_nearest_metro_label(c) for c in selected]),
            (
                LABELS["amenities"],
                [
                    " / ".join(
                        BOOLEAN[bool(getattr(c.property, key, None))]
                        for key in ("has_pool", "has_kids_playground", "has_separation_ped_car")
                    )
                    for c in selected
                ],
            ),
            (
                LABELS["management_fee"],
                [format_value(prop_attr(c, "management_fee", "cny_per_sqm_month_range")) for c in selected],
            ),
            (
                LABELS["parking_rent"],
                [format_value(prop_attr(c, "parking", "monthly_rent_cny_range")) for c in selected],
            ),
            (
                LABELS["parking_price_column"],
                [format_value(prop_attr(c, "parking", "spot_price_wan_range")) for c in selected],
            ),
        ]
        for area_range in ALLOWED_AREA_RANGES:
            rows.append(
                (
                    f"{LABELS['main_supply']} {area_range}",
                    [get_main_supply_by_range(c, area_range) for c in selected],
                )
            )

        header = [LABELS["field"]] + [
            f"[{c.name_zh}]({self.community_url(c)})" for c in selected
        ]
        content.append("| " + " | ".join(header) + " |")
        content.append("|" + "|".join("---" for _ in header) + "|")
        for label, values in rows:
            cells = [label] + [value.replace("|", "\\|") for value in values]
            content.append("| " + " | ".join(cells) + " |")
        content.append("")

        target = get_target_comparison(selected)
        if target:
            content.append(
                f"## {PHRASES['target_distance_title'].format(name=target.target_name)}\n"
            )
            for community, distance in zip(selected, target.distances):
                content.append(f"- {community.name_zh}: {format_value(distance)}")
            content.append("")

        content.append(f"*{PHRASES['distance_rule']}：{format_distance_with_time(850)}*")
        return f"---\n{frontmatter}---\n\n" + "\n".join(content) + "\n"

    def write_page(self, filename: str, content: str) -> str:
        """Write a top-level page into the output directory and return its path."""
        os.makedirs(self.output_dir, exist_ok=True)
        filepath = os.path.join(self.output_dir, filename)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"Wrote page {filepath}")
        return filepath
