"""
Coordinate Selector - Drag-to-select field regions on a banner

Headless selection session: a UI feeds pointer events in display
coordinates, the session converts them to image coordinates and records one
region per semantic field. After each accepted selection the active field
advances to the next one (cyclic).
"""

import logging
from typing import Dict, List, Optional

from BE_Libs.ImageEditingLib.image_models import FIELD_ORDER, CoordinateSet, Region, SemanticField
from BE_Libs.constants import SELECTOR_MAX_DISPLAY_WIDTH, SELECTOR_MIN_SELECTION_SIZE

logger = logging.getLogger(__name__)


class CoordinateSelector:
    """
    Selection session over one image.

    Args:
        image_width: Width of the source image in pixels
        image_height: Height of the source image in pixels
        max_display_width: Widest the image is shown; larger images are
            scaled down, smaller ones are never scaled up
    """

    def __init__(
        self,
        image_width: int,
        image_height: int,
        max_display_width: int = SELECTOR_MAX_DISPLAY_WIDTH,
    ):
        if image_width <= 0 or image_height <= 0:
            raise ValueError(f"Image size must be positive, got {image_width}x{image_height}")

        self.image_width = image_width
        self.image_height = image_height
        self.scale = min(1.0, max_display_width / image_width)
        self.current_field = FIELD_ORDER[0]
        self.selected: Dict[SemanticField, Optional[Region]] = {f: None for f in FIELD_ORDER}

        self._start = None
        self._current_rect = None  # (x, y, w, h) floats in image coordinates

    @property
    def display_size(self):
        return (self.image_width * self.scale, self.image_height * self.scale)

    def _to_image(self, display_x: float, display_y: float):
        return display_x / self.scale, display_y / self.scale

    def select_field(self, semantic_field) -> None:
        self.current_field = SemanticField.from_key(semantic_field)

    def begin_drag(self, display_x: float, display_y: float) -> None:
        self._start = self._to_image(display_x, display_y)
        self._current_rect = None

    def update_drag(self, display_x: float, display_y: float) -> None:
        if self._start is None:
            return
        start_x, start_y = self._start
        current_x, current_y = self._to_image(display_x, display_y)
        self._current_rect = (
            min(start_x, current_x),
            min(start_y, current_y),
            abs(current_x - start_x),
            abs(current_y - start_y),
        )

    def end_drag(self, display_x: Optional[float] = None, display_y: Optional[float] = None) -> Optional[Region]:
        """
        Finish a drag and record the selection for the active field.

        Selections no larger than the minimum size in either dimension are
        discarded and the active field stays the same.

        Returns:
            The recorded region, or None if the selection was discarded
        """
        if display_x is not None and display_y is not None:
            self.update_drag(display_x, display_y)

        rect = self._current_rect
        self._start = None
        self._current_rect = None

        if rect is None or rect[2] <= SELECTOR_MIN_SELECTION_SIZE or rect[3] <= SELECTOR_MIN_SELECTION_SIZE:
            logger.debug(f"Discarded selection {rect} for {self.current_field.value}")
            return None

        region = Region.from_floats(*rect)
        self.selected[self.current_field] = region
        logger.info(f"Selected {self.current_field.value}: {region.to_dict()}")
        self.advance()
        return region

    def advance(self) -> SemanticField:
        index = FIELD_ORDER.index(self.current_field)
        self.current_field = FIELD_ORDER[(index + 1) % len(FIELD_ORDER)]
        return self.current_field

    @property
    def pending_rect(self) -> Optional[Region]:
        if self._current_rect is None:
            return None
        return Region.from_floats(*self._current_rect)

    def display_rect(self, region: Region):
        """Overlay rectangle (x, y, width, height) in display coordinates."""
        return (
            region.x * self.scale,
            region.y * self.scale,
            region.width * self.scale,
            region.height * self.scale,
        )

    def unset_fields(self) -> List[SemanticField]:
        return [f for f in FIELD_ORDER if self.selected.get(f) is None]

    def get_coordinates(self) -> CoordinateSet:
        unset = self.unset_fields()
        if unset:
            logger.warning(f"Unset areas: {', '.join(f.value for f in unset)}")
        return CoordinateSet(self.image_width, self.image_height, dict(self.selected))

    def load_template(self, coordinates: CoordinateSet) -> None:
        """Replace the current selections with a template's areas (no rescaling)."""
        self.selected = {f: coordinates.areas.get(f) for f in FIELD_ORDER}

    def reset(self) -> None:
        self.selected = {f: None for f in FIELD_ORDER}
        self.current_field = FIELD_ORDER[0]
        self._start = None
        self._current_rect = None
