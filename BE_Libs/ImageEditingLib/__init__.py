"""
ImageEditingLib - Core image editing functionality

This module provides the data models, background sampling, region erasing
and text rendering, and image decoding/encoding used by the editor.
"""

from BE_Libs.ImageEditingLib.image_models import (
    Color,
    CoordinateSet,
    FIELD_ORDER,
    Region,
    SemanticField,
    SemanticValues,
    TextFragment,
    normalize_regions,
)
from BE_Libs.ImageEditingLib.background_sampler import sample_background_color
from BE_Libs.ImageEditingLib.text_renderer import (
    FIELD_STYLES,
    FontSizing,
    RenderOptions,
    layout_text,
    render_field,
)
from BE_Libs.ImageEditingLib.image_codec import (
    encode_png,
    load_image,
    to_data_uri,
)

__all__ = [
    "Color",
    "CoordinateSet",
    "FIELD_ORDER",
    "Region",
    "SemanticField",
    "SemanticValues",
    "TextFragment",
    "normalize_regions",
    "sample_background_color",
    "FIELD_STYLES",
    "FontSizing",
    "RenderOptions",
    "layout_text",
    "render_field",
    "encode_png",
    "load_image",
    "to_data_uri",
]
