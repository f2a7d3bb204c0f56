"""
Coordinate resolution strategies.

A strategy decides where each semantic field sits on the banner. The editor
tries them in priority order: user-specified coordinates, then text
recognition, then a fixed-ratio layout.

Classes:
    ResolutionHints: Fields to resolve and context for the heuristics
    RegionResolutionStrategy: Abstract strategy interface
    UserSpecifiedStrategy: Pass-through of caller-supplied regions
    RecognitionStrategy: Text recognition followed by classification
    FixedRatioStrategy: Regions as fractions of the image size
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from BE_Libs.ImageEditingLib.image_models import FIELD_ORDER, Region, SemanticField, normalize_regions
from BE_Libs.RegionLib.text_recognition import TextRecognizer
from BE_Libs.RegionLib.text_target_classifier import ClassifierOptions, classify_fragments
from BE_Libs.constants import (
    DEFAULT_RECOGNITION_TIMEOUT,
    FIXED_RATIO_DISCOUNT,
    FIXED_RATIO_HARD_PRICE,
    FIXED_RATIO_REGULAR_PRICE,
    FIXED_RATIO_TITLE,
)
from BE_Libs.errors import RecognitionUnavailable

logger = logging.getLogger(__name__)

ResolvedRegions = Dict[SemanticField, Optional[Region]]

DEFAULT_FIXED_RATIO_LAYOUT: Dict[SemanticField, Tuple[float, float, float, float]] = {
    SemanticField.CAMPAIGN_TITLE: FIXED_RATIO_TITLE,
    SemanticField.DISCOUNT_RATE: FIXED_RATIO_DISCOUNT,
    SemanticField.REGULAR_PRICE: FIXED_RATIO_REGULAR_PRICE,
    SemanticField.HARD_PRICE: FIXED_RATIO_HARD_PRICE,
}


@dataclass
class ResolutionHints:
    """Context passed to every strategy.

    Attributes:
        fields: Fields the caller still needs regions for
        current_discount_rate: Discount rate used by the discount heuristic
    """
    fields: Sequence[SemanticField] = field(default_factory=lambda: list(FIELD_ORDER))
    current_discount_rate: float = 0.0


class RegionResolutionStrategy(ABC):
    """Base class for coordinate resolution strategies."""

    name = "base"

    @abstractmethod
    def resolve(self, image: Any, hints: ResolutionHints) -> ResolvedRegions:
        """
        Resolve regions for the requested fields.

        Args:
            image: Working PIL Image
            hints: Requested fields and heuristic context

        Returns:
            Mapping with an entry for every requested field; unresolved
            fields map to None
        """


class UserSpecifiedStrategy(RegionResolutionStrategy):
    """Uses the regions the caller drew. Unset or zero-area fields are None."""

    name = "user"

    def __init__(self, regions: Optional[Dict[Any, Any]] = None):
        self.regions = normalize_regions(regions)

    def resolve(self, image: Any, hints: ResolutionHints) -> ResolvedRegions:
        width, height = image.size
        resolved: ResolvedRegions = {}
        for semantic_field in hints.fields:
            region = self.regions.get(semantic_field)
            if region is not None:
                region = region.clip(width, height)
                if region.is_empty:
                    logger.warning(f"User region for {semantic_field.value} lies outside the image")
                    region = None
            resolved[semantic_field] = region
        return resolved


class RecognitionStrategy(RegionResolutionStrategy):
    """
    Locates fields by recognizing the text already on the banner.

    The recognizer runs on a worker thread so a hung engine cannot block the
    edit past ``timeout`` seconds. Any failure is reported as
    RecognitionUnavailable for the caller to fall back on.
    """

    name = "recognition"

    def __init__(
        self,
        recognizer: TextRecognizer,
        classifier_options: Optional[ClassifierOptions] = None,
        timeout: Optional[float] = DEFAULT_RECOGNITION_TIMEOUT,
    ):
        self.recognizer = recognizer
        self.classifier_options = classifier_options or ClassifierOptions()
        self.timeout = timeout

    def _recognize(self, image: Any):
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self.recognizer.recognize, image)
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            raise RecognitionUnavailable(f"Text recognition timed out after {self.timeout}s")
        except RecognitionUnavailable:
            raise
        except Exception as e:
            raise RecognitionUnavailable(f"Text recognition failed: {e}")
        finally:
            # Do not wait for a timed-out worker
            executor.shutdown(wait=False)

    def resolve(self, image: Any, hints: ResolutionHints) -> ResolvedRegions:
        fragments = self._recognize(image)
        if not fragments:
            raise RecognitionUnavailable("Text recognition found no text")

        targets = classify_fragments(
            fragments,
            hints.current_discount_rate,
            self.classifier_options,
            fields=hints.fields,
        )

        width, height = image.size
        resolved: ResolvedRegions = {}
        for semantic_field in hints.fields:
            region = targets.get(semantic_field)
            if region is not None:
                region = region.clip(width, height)
            resolved[semantic_field] = None if region is None or region.is_empty else region

        if all(region is None for region in resolved.values()):
            raise RecognitionUnavailable("No recognized text matched a requested banner field")
        return resolved


class FixedRatioStrategy(RegionResolutionStrategy):
    """Places fields at fixed fractions of the image size."""

    name = "fixed_ratio"

    def __init__(self, layout: Optional[Dict[SemanticField, Tuple[float, float, float, float]]] = None):
        self.layout = dict(DEFAULT_FIXED_RATIO_LAYOUT)
        if layout:
            self.layout.update(layout)

    def region_for(self, semantic_field: SemanticField, width: int, height: int) -> Region:
        """Region of a field; at least 1x1 and inside the image, however small."""
        fx, fy, fw, fh = self.layout[semantic_field]
        region = Region.from_floats(fx * width, fy * height, fw * width, fh * height)
        x = min(max(region.x, 0), max(width - 1, 0))
        y = min(max(region.y, 0), max(height - 1, 0))
        return Region(
            x,
            y,
            max(1, min(region.width, width - x)),
            max(1, min(region.height, height - y)),
        )

    def resolve(self, image: Any, hints: ResolutionHints) -> ResolvedRegions:
        width, height = image.size
        return {f: self.region_for(f, width, height) for f in hints.fields}
