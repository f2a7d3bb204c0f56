"""
Image editing data models for Banner Edit.

This module defines core data structures used throughout the editing engine.

Classes:
    Region: Axis-aligned rectangle in source-image pixel coordinates
    SemanticField: The four text roles an edit can target
    TextFragment: A recognized piece of text with its box and confidence
    Color: An RGB triple with perceptual brightness
    SemanticValues: Replacement values for the four fields
    CoordinateSet: Field-to-region mapping recorded against one image size

Functions:
    round_half_up: Round a number to the nearest integer, halves going up
    format_rate: Render a discount rate without a trailing ".0"
    format_price: Render a price with thousands separators and currency symbol
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional

from BE_Libs.constants import CURRENCY_SYMBOL, DISCOUNT_SUFFIX


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_rate(rate: float) -> str:
    """Return ``"20"`` for 20 or 20.0 and ``"12.5"`` for 12.5."""
    rate = float(rate)
    if rate.is_integer():
        return str(int(rate))
    return repr(rate)


def format_price(price: float) -> str:
    return f"{CURRENCY_SYMBOL}{round_half_up(price):,}"


def format_discount(rate: float) -> str:
    return f"{format_rate(rate)}% {DISCOUNT_SUFFIX}"


@dataclass(frozen=True)
class Region:
    """Rectangle in source-image pixel coordinates.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (a region with width <= 0 is unset)
        height: Vertical extent (a region with height <= 0 is unset)
    """
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_floats(cls, x: float, y: float, width: float, height: float) -> "Region":
        return cls(round_half_up(x), round_half_up(y), round_half_up(width), round_half_up(height))

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> tuple:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains_point(self, px: float, py: float) -> bool:
        return self.x <= px < self.right and self.y <= py < self.bottom

    def inflate(self, padding: int) -> "Region":
        return Region(
            self.x - padding,
            self.y - padding,
            self.width + padding * 2,
            self.height + padding * 2,
        )

    def clip(self, image_width: int, image_height: int) -> "Region":
        """Intersect with the image bounds. The result may be empty."""
        left = max(0, self.x)
        top = max(0, self.y)
        right = min(image_width, self.right)
        bottom = min(image_height, self.bottom)
        return Region(left, top, max(0, right - left), max(0, bottom - top))

    def scaled(self, scale_x: float, scale_y: float) -> "Region":
        return Region.from_floats(
            self.x * scale_x,
            self.y * scale_y,
            self.width * scale_x,
            self.height * scale_y,
        )

    def as_box(self) -> tuple:
        """PIL box tuple (left, top, right, bottom)."""
        return (self.x, self.y, self.right, self.bottom)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        try:
            return cls.from_floats(
                float(data["x"]),
                float(data["y"]),
                float(data["width"]),
                float(data["height"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid region data {data!r}: {e}")


class SemanticField(Enum):
    """The four text roles of a banner.

    Values are the area keys used by the coordinate selector and by
    persisted templates.
    """
    CAMPAIGN_TITLE = "campaign"
    DISCOUNT_RATE = "discount"
    REGULAR_PRICE = "regularPrice"
    HARD_PRICE = "hardPrice"

    @property
    def is_price(self) -> bool:
        return self in (SemanticField.REGULAR_PRICE, SemanticField.HARD_PRICE)

    @classmethod
    def from_key(cls, key: Any) -> "SemanticField":
        if isinstance(key, cls):
            return key
        key_str = str(key).strip()
        alias = _FIELD_ALIASES.get(key_str)
        if alias is not None:
            return alias
        try:
            return cls(key_str)
        except ValueError:
            raise ValueError(f"Unknown semantic field: {key!r}")


_FIELD_ALIASES = {
    "campaignTitle": SemanticField.CAMPAIGN_TITLE,
    "discountRate": SemanticField.DISCOUNT_RATE,
}

# Processing order; overlapping regions are painted in this order.
FIELD_ORDER = (
    SemanticField.CAMPAIGN_TITLE,
    SemanticField.DISCOUNT_RATE,
    SemanticField.REGULAR_PRICE,
    SemanticField.HARD_PRICE,
)


@dataclass(frozen=True)
class TextFragment:
    text: str
    box: Region
    confidence: float = 0.0


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def brightness(self) -> float:
        return (self.r * 299 + self.g * 587 + self.b * 114) / 1000

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


@dataclass
class SemanticValues:
    """Replacement values for one edit.

    Attributes:
        campaign_title: Title text drawn verbatim
        discount_rate: Discount percentage (0-100)
        regular_price: Discounted price of the regular model
        hard_price: Discounted price of the hard model
    """
    campaign_title: str
    discount_rate: float
    regular_price: float
    hard_price: float

    def text_for(self, semantic_field: SemanticField) -> str:
        formatter = _FIELD_FORMATTERS.get(semantic_field)
        if formatter is None:
            raise ValueError(f"Unsupported semantic field: {semantic_field}")
        return formatter(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaignTitle": self.campaign_title,
            "discountRate": self.discount_rate,
            "regularPrice": self.regular_price,
            "hardPrice": self.hard_price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SemanticValues":
        return cls(
            campaign_title=str(data.get("campaignTitle", data.get("campaign_title", ""))),
            discount_rate=float(data.get("discountRate", data.get("discount_rate", 0))),
            regular_price=float(data.get("regularPrice", data.get("regular_price", 0))),
            hard_price=float(data.get("hardPrice", data.get("hard_price", 0))),
        )


# Display text of each field
_FIELD_FORMATTERS: Dict[SemanticField, Callable[[SemanticValues], str]] = {
    SemanticField.CAMPAIGN_TITLE: lambda values: values.campaign_title,
    SemanticField.DISCOUNT_RATE: lambda values: format_discount(values.discount_rate),
    SemanticField.REGULAR_PRICE: lambda values: format_price(values.regular_price),
    SemanticField.HARD_PRICE: lambda values: format_price(values.hard_price),
}


def normalize_regions(regions: Optional[Dict[Any, Any]]) -> Dict[SemanticField, Optional[Region]]:
    """Coerce a loosely-typed area mapping into field -> Region (or None).

    Keys may be SemanticField members or area key strings; values may be
    Region objects, ``{x, y, width, height}`` dicts, or None. Zero-area
    regions become None.
    """
    normalized: Dict[SemanticField, Optional[Region]] = {f: None for f in FIELD_ORDER}
    if not regions:
        return normalized

    for key, value in regions.items():
        semantic_field = SemanticField.from_key(key)
        if value is None:
            continue
        region = value if isinstance(value, Region) else Region.from_dict(value)
        normalized[semantic_field] = None if region.is_empty else region

    return normalized


@dataclass
class CoordinateSet:
    """Regions for the four fields recorded against one reference image size."""
    image_width: int
    image_height: int
    areas: Dict[SemanticField, Optional[Region]] = field(
        default_factory=lambda: {f: None for f in FIELD_ORDER}
    )

    def __post_init__(self):
        self.areas = normalize_regions(self.areas)

    def unset_fields(self):
        return [f for f in FIELD_ORDER if self.areas.get(f) is None]

    def regions_for(
        self,
        image_width: int,
        image_height: int,
        rescale: bool = False,
    ) -> Dict[SemanticField, Optional[Region]]:
        """
        Areas to apply to an image of the given size.

        Areas are returned unchanged unless ``rescale`` is set, in which case
        they are scaled proportionally from the recorded image size.
        """
        if not rescale or (image_width, image_height) == (self.image_width, self.image_height):
            return dict(self.areas)
        if self.image_width <= 0 or self.image_height <= 0:
            return dict(self.areas)

        scale_x = image_width / self.image_width
        scale_y = image_height / self.image_height
        return {
            f: (region.scaled(scale_x, scale_y) if region is not None else None)
            for f, region in self.areas.items()
        }

    def areas_to_dict(self) -> Dict[str, Optional[Dict[str, int]]]:
        return {
            f.value: (self.areas[f].to_dict() if self.areas.get(f) is not None else None)
            for f in FIELD_ORDER
        }
