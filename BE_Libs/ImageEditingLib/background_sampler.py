"""
Background color estimation around a text region.

The color is the channel-wise mean of four pixels taken just outside the
corners of the region. It is used as the solid fill that erases the
original text.

Functions:
    corner_sample_points: Compute the usable sample points for a region
    sample_background_color: Estimate the fill color around a region
"""

import logging
from typing import Any, List, Sequence, Tuple

import numpy as np

from BE_Libs.ImageEditingLib.image_models import Color, Region, round_half_up
from BE_Libs.constants import DEFAULT_BACKGROUND_WHITE, SAMPLE_MARGIN

logger = logging.getLogger(__name__)


def corner_sample_points(
    region: Region,
    image_width: int,
    image_height: int,
    margin: int = SAMPLE_MARGIN,
) -> List[Tuple[int, int]]:
    """
    Compute sample points just outside each corner of a region.

    Each point is offset from its corner by ``margin`` pixels and clamped into
    the image. A clamped point that lands inside the region is dropped, since
    it would sample the text being erased rather than the background.

    Args:
        region: Region whose surroundings are sampled
        image_width: Width of the image in pixels
        image_height: Height of the image in pixels
        margin: Offset from each corner in pixels

    Returns:
        List of (x, y) pixel coordinates, between zero and four entries
    """
    if image_width <= 0 or image_height <= 0:
        return []

    candidates = [
        (region.x - margin, region.y - margin),
        (region.right + margin, region.y - margin),
        (region.x - margin, region.bottom + margin),
        (region.right + margin, region.bottom + margin),
    ]

    points: List[Tuple[int, int]] = []
    for px, py in candidates:
        cx = min(max(int(px), 0), image_width - 1)
        cy = min(max(int(py), 0), image_height - 1)
        if region.contains_point(cx, cy):
            continue
        points.append((cx, cy))
    return points


def _read_rgb(image: Any, point: Tuple[int, int]) -> Tuple[int, int, int]:
    pixel = image.getpixel(point)
    if isinstance(pixel, (int, float)):
        value = int(pixel)
        return value, value, value
    return int(pixel[0]), int(pixel[1]), int(pixel[2])


def sample_background_color(
    image: Any,
    region: Region,
    margin: int = SAMPLE_MARGIN,
    fallback: Sequence[int] = DEFAULT_BACKGROUND_WHITE,
) -> Color:
    """
    Estimate the fill color surrounding a region.

    Never raises: when no sample point is usable, or pixel reads fail, the
    fallback color is returned instead.

    Args:
        image: PIL Image to sample from
        region: Region whose background is estimated
        margin: Offset of the sample points from the region corners
        fallback: RGB triple returned when nothing could be sampled

    Returns:
        The averaged Color, each channel rounded half-up to an integer
    """
    fallback_color = Color(*(int(c) for c in fallback[:3]))

    try:
        width, height = image.size
        points = corner_sample_points(region, width, height, margin)
        samples = [_read_rgb(image, point) for point in points]
    except Exception as e:
        logger.debug(f"Background sampling failed for {region}: {e}")
        return fallback_color

    if not samples:
        logger.debug(f"No usable background sample points for {region}, using {fallback_color}")
        return fallback_color

    mean = np.mean(np.asarray(samples, dtype=np.float64), axis=0)
    return Color(*(min(255, max(0, round_half_up(channel))) for channel in mean))
