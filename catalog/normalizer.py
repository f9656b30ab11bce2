"""Conversion of raw community mappings into CommunityRecord objects."""

from typing import Any, Dict, List, Optional

from models.community import (
    Build,
    CommunityRecord,
    Distance,
    HousingStock,
    Images,
    Link,
    Price,
    PropertyInfo,
    as_mapping,
    as_sequence,
)
from utils.format import normalize_image_path

# Top-level keys handled explicitly; everything else is kept in ``extra``
_SECTION_TYPES = {
    "price": Price,
    "build": Build,
    "distance": Distance,
    "property": PropertyInfo,
    "housing_stock": HousingStock,
}
_PLAIN_FIELDS = ("name_zh", "updated_at", "district", "area", "notes_md")
_HANDLED_KEYS = set(_SECTION_TYPES) | set(_PLAIN_FIELDS) | {
    "id",
    "slug",
    "tags",
    "links",
    "images",
}


def stringify_id(value: Any) -> str:
    """String form of a raw id; integral numbers lose their fractional part."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CommunityNormalizer:
    """
    Builds the canonical record for a raw mapping.

    Normalization never fails: malformed sections degrade to empty values.
    Leaf values are passed through as-is, so records share lists with the
    parsed source.
    """

    def normalize(self, file_name: str, raw: Dict[str, Any]) -> CommunityRecord:
        record_id = stringify_id(raw.get("id"))
        slug = self._normalize_slug(raw.get("slug"))

        sections = {}
        for key, section_type in _SECTION_TYPES.items():
            data = as_mapping(raw.get(key))
            sections[key] = section_type.from_dict(data) if data is not None else None

        tags = raw.get("tags")

        return CommunityRecord(
            id=record_id,
            route_key=slug or record_id,
            source_file=file_name,
            slug=slug,
            tags=tags if isinstance(tags, list) else [],
            links=[
                Link.from_dict(item)
                for item in as_sequence(raw.get("links"))
                if isinstance(item, dict)
            ],
            images=self._normalize_images(raw.get("images")),
            extra={k: v for k, v in raw.items() if k not in _HANDLED_KEYS},
            **{name: raw.get(name) for name in _PLAIN_FIELDS},
            **sections,
        )

    def _normalize_slug(self, value: Any) -> Optional[str]:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def _normalize_images(self, value: Any) -> Images:
        images = as_mapping(value) or {}

        cover = images.get("cover")
        cover = normalize_image_path(cover) if isinstance(cover, str) else None

        gallery: Optional[List[str]] = None
        if isinstance(images.get("gallery"), list):
            gallery = [
                normalize_image_path(item)
                for item in images["gallery"]
                if isinstance(item, str) and item
            ]

        return Images(cover=cover, gallery=gallery)
