"""
RegionLib - Locating the text regions of a banner

Text recognition collaborators, the text target classifier, coordinate
resolution strategies and the headless coordinate selector.
"""

from BE_Libs.RegionLib.text_recognition import (
    StaticTextRecognizer,
    TesseractTextRecognizer,
    TextRecognizer,
)
from BE_Libs.RegionLib.text_target_classifier import (
    ClassifierOptions,
    classify_fragments,
)
from BE_Libs.RegionLib.resolution_strategies import (
    DEFAULT_FIXED_RATIO_LAYOUT,
    FixedRatioStrategy,
    RecognitionStrategy,
    RegionResolutionStrategy,
    ResolutionHints,
    UserSpecifiedStrategy,
)
from BE_Libs.RegionLib.coordinate_selector import CoordinateSelector

__all__ = [
    "StaticTextRecognizer",
    "TesseractTextRecognizer",
    "TextRecognizer",
    "ClassifierOptions",
    "classify_fragments",
    "DEFAULT_FIXED_RATIO_LAYOUT",
    "FixedRatioStrategy",
    "RecognitionStrategy",
    "RegionResolutionStrategy",
    "ResolutionHints",
    "UserSpecifiedStrategy",
    "CoordinateSelector",
]
