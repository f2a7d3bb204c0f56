"""
Region eraser and replacement text renderer.

Erases a text region with a solid sampled background color and draws the
replacement text with role-specific color, size and alignment. Per-role
behavior comes from the FIELD_STYLES lookup table.

Classes:
    FontSizing: Fit-to-box or fixed (image-width relative) font sizing
    FieldStyle: Rendering conventions of one semantic field
    RenderOptions: Per-call rendering configuration
    TextLine: One positioned line of text

Functions:
    choose_text_color: Pick the foreground color for a field and background
    fit_font_size: Fit-to-box font size for a text and region
    fixed_font_size: Fixed font size scaled to the image width
    load_font: Load a bold TrueType font with fallbacks
    layout_text: Position the lines of a replacement text inside a region
    render_field: Erase a region and draw its replacement text
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from BE_Libs.pillow_compat import ImageDraw, ImageFont
from BE_Libs.ImageEditingLib.background_sampler import sample_background_color
from BE_Libs.ImageEditingLib.image_models import Color, Region, SemanticField
from BE_Libs.constants import (
    BOLD_FONT_CANDIDATES,
    BRIGHTNESS_THRESHOLD,
    DARK_TEXT_COLOR,
    DEFAULT_BACKGROUND_WHITE,
    DISCOUNT_NUMBER_OFFSET,
    DISCOUNT_NUMBER_SCALE,
    DISCOUNT_UNIT_OFFSET,
    DISCOUNT_UNIT_SCALE,
    FIT_CHAR_WIDTH_RATIO,
    FIT_HEIGHT_RATIO,
    FIXED_DISCOUNT_FONT_SIZE,
    FIXED_PRICE_FONT_SIZE,
    FIXED_REFERENCE_WIDTH,
    FIXED_TITLE_FONT_SIZE,
    LIGHT_TEXT_COLOR,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PRICE_ACCENT_COLOR,
    PRICE_LEFT_INSET,
    SAMPLE_MARGIN,
    USER_REGION_PADDING,
)

logger = logging.getLogger(__name__)

ALIGN_CENTER = "center"
ALIGN_LEFT = "left"


class FontSizing(str, Enum):
    FIT = "fit"
    FIXED = "fixed"


@dataclass(frozen=True)
class FieldStyle:
    """Rendering conventions for one semantic field.

    Attributes:
        alignment: 'center' (both axes) or 'left' (vertically centered)
        fixed_font_size: Base size at the reference banner width
        accent_color: Color used regardless of background, if any
        stacked: Whether a two-token value is drawn as a two-line badge
    """
    alignment: str
    fixed_font_size: int
    accent_color: Optional[str] = None
    stacked: bool = False


FIELD_STYLES: Dict[SemanticField, FieldStyle] = {
    SemanticField.CAMPAIGN_TITLE: FieldStyle(ALIGN_CENTER, FIXED_TITLE_FONT_SIZE),
    SemanticField.DISCOUNT_RATE: FieldStyle(ALIGN_CENTER, FIXED_DISCOUNT_FONT_SIZE, stacked=True),
    SemanticField.REGULAR_PRICE: FieldStyle(ALIGN_LEFT, FIXED_PRICE_FONT_SIZE, accent_color=PRICE_ACCENT_COLOR),
    SemanticField.HARD_PRICE: FieldStyle(ALIGN_LEFT, FIXED_PRICE_FONT_SIZE, accent_color=PRICE_ACCENT_COLOR),
}


@dataclass
class RenderOptions:
    """Configuration for rendering one field.

    Attributes:
        padding: Pixels added around the region when erasing
        sizing: Fit-to-box or fixed font sizing
        fallback_color: Background color used when sampling finds nothing
        font_path: Optional TrueType font file; candidates are tried otherwise
        sample_margin: Offset of the background sample points
    """
    padding: int = USER_REGION_PADDING
    sizing: FontSizing = FontSizing.FIT
    fallback_color: Tuple[int, int, int] = DEFAULT_BACKGROUND_WHITE
    font_path: Optional[str] = None
    sample_margin: int = SAMPLE_MARGIN

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sizing"] = self.sizing.value
        data["fallback_color"] = list(self.fallback_color)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderOptions":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "sizing" in filtered:
            filtered["sizing"] = FontSizing(filtered["sizing"])
        if "fallback_color" in filtered:
            filtered["fallback_color"] = tuple(int(c) for c in filtered["fallback_color"][:3])
        return cls(**filtered)


@dataclass(frozen=True)
class TextLine:
    """A line of text positioned in image coordinates.

    ``anchor`` is a Pillow text anchor: 'mm' centers on (x, y), 'lm' puts
    the left edge at x, vertically centered on y.
    """
    text: str
    size: int
    x: float
    y: float
    anchor: str


def choose_text_color(semantic_field: SemanticField, background: Color) -> str:
    style = FIELD_STYLES[semantic_field]
    if style.accent_color:
        return style.accent_color
    if background.brightness > BRIGHTNESS_THRESHOLD:
        return DARK_TEXT_COLOR
    return LIGHT_TEXT_COLOR


def fit_font_size(region: Region, text: str) -> int:
    """Font size that roughly fits ``text`` into ``region``, clamped to [12, 100]."""
    char_count = max(1, len(text))
    base = min(region.height * FIT_HEIGHT_RATIO, region.width / (char_count * FIT_CHAR_WIDTH_RATIO))
    return int(max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, base)))


def fixed_font_size(semantic_field: SemanticField, image_width: int) -> int:
    scale = image_width / FIXED_REFERENCE_WIDTH
    return max(1, int(FIELD_STYLES[semantic_field].fixed_font_size * scale))


@lru_cache(maxsize=256)
def load_font(size: int, font_path: Optional[str] = None) -> Any:
    """
    Load a bold TrueType font of the given pixel size.

    Tries ``font_path`` first, then BOLD_FONT_CANDIDATES, and finally
    Pillow's bundled scalable default font.
    """
    size = max(1, int(size))
    candidates = ([font_path] if font_path else []) + list(BOLD_FONT_CANDIDATES)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except (OSError, IOError):
            continue

    logger.debug(f"No TrueType font candidate available, using Pillow default at {size}px")
    return ImageFont.load_default(size=size)


def _text_width(text: str, size: int, font_path: Optional[str]) -> float:
    font = load_font(size, font_path)
    return font.getlength(text)


def _shrink_to_width(
    text: str,
    size: int,
    max_width: float,
    font_path: Optional[str],
    scale: float = 1.0,
) -> int:
    """Reduce ``size`` until ``text`` drawn at size*scale fits ``max_width``."""
    while size > MIN_FONT_SIZE and _text_width(text, max(1, int(size * scale)), font_path) > max_width:
        size -= 1
    return size


def layout_text(
    semantic_field: SemanticField,
    text: str,
    region: Region,
    font_size: int,
) -> List[TextLine]:
    """
    Position the replacement text of a field inside its region.

    Title and discount are centered on both axes, prices are left-aligned
    with a small inset and vertically centered. A discount made of exactly
    two whitespace-separated tokens becomes a stacked badge: a larger first
    token slightly above center and a smaller second token below it.

    Args:
        semantic_field: Field being rendered
        text: Replacement text
        region: Target region in image coordinates
        font_size: Base font size in pixels

    Returns:
        The lines to draw, top to bottom
    """
    style = FIELD_STYLES[semantic_field]
    center_x, center_y = region.center

    if style.alignment == ALIGN_LEFT:
        return [TextLine(text, font_size, region.x + PRICE_LEFT_INSET, center_y, "lm")]

    tokens = text.split()
    if style.stacked and len(tokens) == 2:
        return [
            TextLine(
                tokens[0],
                max(1, int(font_size * DISCOUNT_NUMBER_SCALE)),
                center_x,
                center_y + font_size * DISCOUNT_NUMBER_OFFSET,
                "mm",
            ),
            TextLine(
                tokens[1],
                max(1, int(font_size * DISCOUNT_UNIT_SCALE)),
                center_x,
                center_y + font_size * DISCOUNT_UNIT_OFFSET,
                "mm",
            ),
        ]

    return [TextLine(text, font_size, center_x, center_y, "mm")]


def _resolve_font_size(
    image_width: int,
    region: Region,
    semantic_field: SemanticField,
    text: str,
    options: RenderOptions,
) -> int:
    if options.sizing == FontSizing.FIXED:
        return fixed_font_size(semantic_field, image_width)

    size = fit_font_size(region, text)
    style = FIELD_STYLES[semantic_field]
    tokens = text.split()
    if style.stacked and len(tokens) == 2:
        return _shrink_to_width(tokens[0], size, region.width, options.font_path, DISCOUNT_NUMBER_SCALE)
    if style.alignment == ALIGN_LEFT:
        return _shrink_to_width(text, size, region.width - PRICE_LEFT_INSET, options.font_path)
    return _shrink_to_width(text, size, region.width, options.font_path)


def render_field(
    image: Any,
    region: Region,
    semantic_field: SemanticField,
    text: str,
    options: Optional[RenderOptions] = None,
) -> Region:
    """
    Erase a region and draw its replacement text. Mutates ``image``.

    The background is sampled around the region, the padded region is filled
    with it, and the text is drawn clipped to the region.

    Args:
        image: Working PIL Image (modified in place)
        region: Target region in image coordinates
        semantic_field: Role of the text, selects color/size/alignment
        text: Replacement text
        options: Rendering options (defaults to RenderOptions())

    Returns:
        The rectangle that was filled, clipped to the image. Empty if the
        region lies outside the image, in which case nothing is drawn.
    """
    options = options or RenderOptions()
    image_width, image_height = image.size
    target = region.clip(image_width, image_height)
    if target.is_empty:
        logger.warning(f"Region {region} for {semantic_field.value} is outside the image, skipping")
        return target

    background = sample_background_color(image, target, options.sample_margin, options.fallback_color)
    fill_region = target.inflate(options.padding).clip(image_width, image_height)

    draw = ImageDraw.Draw(image)
    draw.rectangle(
        [fill_region.x, fill_region.y, fill_region.right - 1, fill_region.bottom - 1],
        fill=tuple(background),
    )

    color = choose_text_color(semantic_field, background)
    font_size = _resolve_font_size(image_width, target, semantic_field, text, options)
    lines = layout_text(semantic_field, text, target, font_size)

    # Draw on a crop of the region so text never bleeds past it
    patch = image.crop(target.as_box())
    patch_draw = ImageDraw.Draw(patch)
    for line in lines:
        patch_draw.text(
            (line.x - target.x, line.y - target.y),
            line.text,
            fill=color,
            font=load_font(line.size, options.font_path),
            anchor=line.anchor,
        )
    image.paste(patch, (target.x, target.y))

    logger.debug(
        f"Rendered {semantic_field.value} '{text}' in {target} "
        f"(background {background.to_hex()}, color {color}, size {font_size})"
    )
    return fill_region
