"""Community record data model."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are fields of the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


def as_mapping(value: Any) -> Optional[Dict[str, Any]]:
    """Return value if it is a mapping, else None."""
    return value if isinstance(value, dict) else None


def as_sequence(value: Any) -> List[Any]:
    """Return value if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


@dataclass
class Price:
    level: Optional[str] = None
    ref_wan_per_sqm: Optional[float] = None
    ref_total_wan_range: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Price":
        return cls(**_known_fields(cls, data))


@dataclass
class Build:
    build_year_range: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Build":
        return cls(**_known_fields(cls, data))


@dataclass
class MetroDistance:
    station: Optional[str] = None
    line: Optional[str] = None
    distance_m: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetroDistance":
        return cls(**_known_fields(cls, data))


@dataclass
class TargetDistance:
    id: Optional[str] = None
    name: Optional[str] = None
    distance_m: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetDistance":
        return cls(**_known_fields(cls, data))


@dataclass
class Distance:
    """Distances to metro stations and to named target locations."""

    metro: List[MetroDistance] = field(default_factory=list)
    to_targets: List[TargetDistance] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Distance":
        return cls(
            metro=[
                MetroDistance.from_dict(item)
                for item in as_sequence(data.get("metro"))
                if isinstance(item, dict)
            ],
            to_targets=[
                TargetDistance.from_dict(item)
                for item in as_sequence(data.get("to_targets"))
                if isinstance(item, dict)
            ],
        )


@dataclass
class ManagementFee:
    cny_per_sqm_month_range: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManagementFee":
        return cls(**_known_fields(cls, data))


@dataclass
class Parking:
    monthly_rent_cny_range: Optional[str] = None
    spot_price_wan_range: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parking":
        return cls(**_known_fields(cls, data))


@dataclass
class PropertyInfo:
    """Estate amenities and running costs."""

    has_pool: Optional[bool] = None
    has_kids_playground: Optional[bool] = None
    has_separation_ped_car: Optional[bool] = None
    management_fee: Optional[ManagementFee] = None
    parking: Optional[Parking] = None
    facilities_note: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PropertyInfo":
        values = _known_fields(cls, data)
        fee = as_mapping(data.get("management_fee"))
        parking = as_mapping(data.get("parking"))
        values["management_fee"] = ManagementFee.from_dict(fee) if fee is not None else None
        values["parking"] = Parking.from_dict(parking) if parking is not None else None
        return cls(**values)


@dataclass
class Layout:
    area_sqm_range: Optional[str] = None
    layout_tags: List[str] = field(default_factory=list)
    main_supply: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layout":
        values = _known_fields(cls, data)
        values["layout_tags"] = as_sequence(data.get("layout_tags"))
        return cls(**values)


@dataclass
class BuildingType:
    type: Optional[str] = None
    total_floors_range: Optional[str] = None
    layouts: List[Layout] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildingType":
        values = _known_fields(cls, data)
        values["layouts"] = [
            Layout.from_dict(item)
            for item in as_sequence(data.get("layouts"))
            if isinstance(item, dict)
        ]
        return cls(**values)


@dataclass
class HousingStock:
    building_types: List[BuildingType] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HousingStock":
        return cls(
            building_types=[
                BuildingType.from_dict(item)
                for item in as_sequence(data.get("building_types"))
                if isinstance(item, dict)
            ]
        )


@dataclass
class Link:
    title: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Link":
        return cls(**_known_fields(cls, data))


@dataclass
class Images:
    """Public image paths. Absent paths stay None."""

    cover: Optional[str] = None
    gallery: Optional[List[str]] = None


@dataclass
class CommunityRecord:
    """Canonical, normalized community record served to the views."""

    # Identity
    id: str
    route_key: str
    source_file: str
    slug: Optional[str] = None

    # Required content
    name_zh: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    updated_at: Optional[str] = None

    # Facets
    district: Optional[str] = None
    area: Optional[str] = None

    # Sections
    price: Optional[Price] = None
    build: Optional[Build] = None
    distance: Optional[Distance] = None
    property: Optional[PropertyInfo] = None
    housing_stock: Optional[HousingStock] = None
    links: List[Link] = field(default_factory=list)
    notes_md: Optional[str] = None
    images: Images = field(default_factory=Images)

    # Top-level keys without a dedicated field
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain dictionary for serialization, dropping empty values.

        Unrecognized top-level keys are kept, but never replace a field of
        the record.
        """
        values = asdict(self)
        result = dict(values.pop("extra"))
        result.update(values)
        return _drop_empty(result)


def _drop_empty(value: Any) -> Any:
    if isinstance(value, dict):
        cleaned = {k: _drop_empty(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if v is not None and v != {}}
    if isinstance(value, list):
        return [_drop_empty(item) for item in value]
    return value
