"""
Edit orchestrator for Banner Edit.

Decodes the input banner, resolves one region per semantic field through
the prioritized strategies, renders the replacement values and encodes the
result as PNG.

Resolution priority per field:
    1. user-specified coordinates
    2. text recognition (only for fields the user did not supply)
    3. fixed-ratio layout, when recognition is unavailable or fails entirely

Edits with user or fixed-ratio regions are deterministic. Recognition-driven
edits depend on the recognizer and are not guaranteed to be idempotent.

Classes:
    EditOptions: Per-editor configuration
    EditResult: Output image, PNG bytes and resolution bookkeeping
    BannerEditor: Runs edits
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from BE_Libs.ImageEditingLib.image_codec import encode_png, load_image, to_data_uri
from BE_Libs.ImageEditingLib.image_models import (
    FIELD_ORDER,
    CoordinateSet,
    Region,
    SemanticField,
    SemanticValues,
    normalize_regions,
)
from BE_Libs.ImageEditingLib.text_renderer import FontSizing, RenderOptions, render_field
from BE_Libs.RegionLib.resolution_strategies import (
    FixedRatioStrategy,
    RecognitionStrategy,
    ResolutionHints,
    UserSpecifiedStrategy,
)
from BE_Libs.RegionLib.text_recognition import TextRecognizer
from BE_Libs.RegionLib.text_target_classifier import ClassifierOptions
from BE_Libs.constants import (
    DEFAULT_BACKGROUND_GOLD,
    DEFAULT_BACKGROUND_WHITE,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_RECOGNITION_TIMEOUT,
    FIXED_RATIO_PADDING,
    RECOGNIZED_REGION_PADDING,
    SAMPLE_MARGIN,
    USER_REGION_PADDING,
)
from BE_Libs.errors import RecognitionUnavailable

logger = logging.getLogger(__name__)

RegionMap = Dict[SemanticField, Optional[Region]]


@dataclass
class EditOptions:
    """Configuration for a BannerEditor.

    Attributes:
        user_padding: Erase padding around user-specified regions
        recognition_padding: Erase padding around recognized regions
        fixed_ratio_padding: Erase padding around fixed-ratio regions
        user_fallback_color: Background fallback for user-specified regions
        fallback_color: Background fallback for recognized and fixed-ratio regions
        font_path: Optional TrueType font used for all fields
        sample_margin: Offset of the background sample points
        recognition_timeout: Seconds before recognition counts as failed
        fetch_timeout: Seconds allowed for downloading URL sources
        rescale_templates: Scale CoordinateSet areas to the input image size
        classifier: Text target classifier options
    """
    user_padding: int = USER_REGION_PADDING
    recognition_padding: int = RECOGNIZED_REGION_PADDING
    fixed_ratio_padding: int = FIXED_RATIO_PADDING
    user_fallback_color: Tuple[int, int, int] = DEFAULT_BACKGROUND_WHITE
    fallback_color: Tuple[int, int, int] = DEFAULT_BACKGROUND_GOLD
    font_path: Optional[str] = None
    sample_margin: int = SAMPLE_MARGIN
    recognition_timeout: Optional[float] = DEFAULT_RECOGNITION_TIMEOUT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    rescale_templates: bool = False
    classifier: ClassifierOptions = field(default_factory=ClassifierOptions)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["user_fallback_color"] = list(self.user_fallback_color)
        data["fallback_color"] = list(self.fallback_color)
        data["classifier"] = self.classifier.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditOptions":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        for key in ("user_fallback_color", "fallback_color"):
            if key in filtered:
                filtered[key] = tuple(int(c) for c in filtered[key][:3])
        if isinstance(filtered.get("classifier"), dict):
            filtered["classifier"] = ClassifierOptions.from_dict(filtered["classifier"])
        return cls(**filtered)

    def render_options_for(self, strategy_name: str) -> RenderOptions:
        """Rendering options used for regions produced by a strategy."""
        if strategy_name == UserSpecifiedStrategy.name:
            padding, sizing, fallback = self.user_padding, FontSizing.FIT, self.user_fallback_color
        elif strategy_name == RecognitionStrategy.name:
            padding, sizing, fallback = self.recognition_padding, FontSizing.FIT, self.fallback_color
        elif strategy_name == FixedRatioStrategy.name:
            padding, sizing, fallback = self.fixed_ratio_padding, FontSizing.FIXED, self.fallback_color
        else:
            raise ValueError(f"Unknown resolution strategy: {strategy_name}")

        return RenderOptions(
            padding=padding,
            sizing=sizing,
            fallback_color=fallback,
            font_path=self.font_path,
            sample_margin=self.sample_margin,
        )


@dataclass
class EditResult:
    """Outcome of one edit.

    Attributes:
        image: Edited PIL Image (RGB, same size as the input)
        png_bytes: Encoded PNG
        regions: Region used for each field, None for skipped fields
        strategies: Strategy name that produced each field's region, None
            for skipped fields
    """
    image: Any
    png_bytes: bytes
    regions: RegionMap
    strategies: Dict[SemanticField, Optional[str]]

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.png_bytes)

    @property
    def skipped_fields(self):
        return [f for f in FIELD_ORDER if self.regions.get(f) is None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regions": {
                f.value: (r.to_dict() if r is not None else None) for f, r in self.regions.items()
            },
            "strategies": {f.value: s for f, s in self.strategies.items()},
        }


UserRegions = Union[CoordinateSet, Dict[Any, Any], None]


class BannerEditor:
    """
    Replaces the campaign text of banner images.

    Args:
        recognizer: Text recognizer used for fields without user coordinates.
            Without one, such fields use the fixed-ratio layout.
        options: Editor configuration (defaults to EditOptions())
        fixed_ratio: Fixed-ratio strategy (defaults to the standard layout)
    """

    def __init__(
        self,
        recognizer: Optional[TextRecognizer] = None,
        options: Optional[EditOptions] = None,
        fixed_ratio: Optional[FixedRatioStrategy] = None,
    ):
        self.recognizer = recognizer
        self.options = options or EditOptions()
        self.fixed_ratio = fixed_ratio or FixedRatioStrategy()

    def _user_regions(self, image: Any, user_regions: UserRegions) -> RegionMap:
        if isinstance(user_regions, CoordinateSet):
            width, height = image.size
            if (width, height) != (user_regions.image_width, user_regions.image_height):
                logger.warning(
                    f"Coordinates recorded for {user_regions.image_width}x{user_regions.image_height} "
                    f"applied to {width}x{height} image (rescale={self.options.rescale_templates})"
                )
            return user_regions.regions_for(width, height, self.options.rescale_templates)
        return normalize_regions(user_regions)

    def resolve_regions(
        self,
        image: Any,
        values: SemanticValues,
        user_regions: UserRegions = None,
    ) -> Tuple[RegionMap, Dict[SemanticField, Optional[str]]]:
        """
        Resolve a region for every field.

        Args:
            image: Working image
            values: Replacement values (the discount rate feeds the classifier)
            user_regions: Caller-supplied regions, a mapping or CoordinateSet

        Returns:
            (regions, strategies) keyed by every field in FIELD_ORDER
        """
        regions: RegionMap = {f: None for f in FIELD_ORDER}
        strategies: Dict[SemanticField, Optional[str]] = {f: None for f in FIELD_ORDER}

        def record(resolved: RegionMap, strategy_name: str) -> None:
            for semantic_field, region in resolved.items():
                if region is not None:
                    regions[semantic_field] = region
                    strategies[semantic_field] = strategy_name

        user = UserSpecifiedStrategy(self._user_regions(image, user_regions))
        record(user.resolve(image, ResolutionHints(list(FIELD_ORDER), values.discount_rate)), user.name)

        remaining = [f for f in FIELD_ORDER if regions[f] is None]
        if not remaining:
            logger.info("All fields use user-specified coordinates")
            return regions, strategies

        hints = ResolutionHints(remaining, values.discount_rate)
        use_fixed_ratio = True
        if self.recognizer is not None:
            recognition = RecognitionStrategy(
                self.recognizer,
                self.options.classifier,
                self.options.recognition_timeout,
            )
            try:
                record(recognition.resolve(image, hints), recognition.name)
                use_fixed_ratio = False
            except RecognitionUnavailable as e:
                logger.warning(f"{e}; using fixed-ratio layout for {', '.join(f.value for f in remaining)}")
        else:
            logger.info("No text recognizer configured, using fixed-ratio layout")

        if use_fixed_ratio:
            record(self.fixed_ratio.resolve(image, hints), self.fixed_ratio.name)

        for semantic_field in FIELD_ORDER:
            logger.info(f"{semantic_field.value}: {strategies[semantic_field] or 'unresolved'}")
        return regions, strategies

    def edit(
        self,
        source: Any,
        values: Union[SemanticValues, Dict[str, Any]],
        user_regions: UserRegions = None,
    ) -> EditResult:
        """
        Edit one banner.

        Args:
            source: Data URI, http(s) URL, bytes, file path, or PIL Image.
                A PIL Image input is copied, never modified.
            values: Replacement values (SemanticValues or its dict form)
            user_regions: Optional caller-supplied regions per field

        Returns:
            EditResult with the edited image and PNG output

        Raises:
            ImageDecodeError: If the source cannot be decoded
            ImageEncodeError: If the result cannot be encoded
        """
        if not isinstance(values, SemanticValues):
            values = SemanticValues.from_dict(values)

        image = load_image(source, self.options.fetch_timeout)
        logger.info(f"Editing {image.size[0]}x{image.size[1]} banner")

        regions, strategies = self.resolve_regions(image, values, user_regions)

        for semantic_field in FIELD_ORDER:
            region = regions[semantic_field]
            if region is None:
                logger.warning(f"No region for {semantic_field.value}, leaving it unchanged")
                continue
            render_options = self.options.render_options_for(strategies[semantic_field])
            render_field(image, region, semantic_field, values.text_for(semantic_field), render_options)

        png_bytes = encode_png(image)
        logger.info(f"Edit complete ({len(png_bytes)} bytes PNG)")
        return EditResult(image=image, png_bytes=png_bytes, regions=regions, strategies=strategies)
