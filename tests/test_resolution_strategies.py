"""
Unit tests for resolution_strategies module.

Tests the user-specified, recognition and fixed-ratio strategies.
"""

import threading
import unittest
from unittest.mock import Mock

import pytest

from BE_Libs.pillow_compat import Image
from BE_Libs.ImageEditingLib.image_models import FIELD_ORDER, Region, SemanticField, TextFragment
from BE_Libs.RegionLib.resolution_strategies import (
    FixedRatioStrategy,
    RecognitionStrategy,
    ResolutionHints,
    UserSpecifiedStrategy,
)
from BE_Libs.RegionLib.text_recognition import StaticTextRecognizer
from BE_Libs.errors import RecognitionUnavailable


class TestUserSpecifiedStrategy:
    """Tests for UserSpecifiedStrategy."""

    def test_passes_regions_through(self, white_banner, user_regions):
        resolved = UserSpecifiedStrategy(user_regions).resolve(white_banner, ResolutionHints())
        assert resolved == user_regions

    def test_missing_and_zero_area_fields_are_none(self, white_banner):
        strategy = UserSpecifiedStrategy({
            "campaign": {"x": 10, "y": 10, "width": 0, "height": 50},
            "discount": None,
        })
        resolved = strategy.resolve(white_banner, ResolutionHints())
        assert all(resolved[f] is None for f in FIELD_ORDER)

    def test_regions_are_clipped_to_image(self, white_banner):
        strategy = UserSpecifiedStrategy({"hardPrice": Region(1100, 700, 300, 300)})
        resolved = strategy.resolve(white_banner, ResolutionHints())
        assert resolved[SemanticField.HARD_PRICE] == Region(1100, 700, 100, 100)

    def test_only_requested_fields(self, white_banner, user_regions):
        hints = ResolutionHints([SemanticField.DISCOUNT_RATE])
        resolved = UserSpecifiedStrategy(user_regions).resolve(white_banner, hints)
        assert list(resolved) == [SemanticField.DISCOUNT_RATE]


class TestRecognitionStrategy:
    """Tests for RecognitionStrategy."""

    def test_classifies_recognized_text(self, white_banner, banner_fragments):
        strategy = RecognitionStrategy(StaticTextRecognizer(banner_fragments))
        resolved = strategy.resolve(white_banner, ResolutionHints(current_discount_rate=30))
        assert resolved[SemanticField.DISCOUNT_RATE] == Region(190, 250, 160, 90)
        assert resolved[SemanticField.HARD_PRICE] == Region(520, 480, 180, 50)

    def test_unmatched_fields_are_none(self, white_banner):
        fragments = [TextFragment("20% OFF", Region(100, 250, 120, 60), 90)]
        resolved = RecognitionStrategy(StaticTextRecognizer(fragments)).resolve(white_banner, ResolutionHints())
        assert resolved[SemanticField.DISCOUNT_RATE] == Region(100, 250, 120, 60)
        assert resolved[SemanticField.CAMPAIGN_TITLE] is None

    def test_no_fragments_is_unavailable(self, white_banner):
        with pytest.raises(RecognitionUnavailable):
            RecognitionStrategy(StaticTextRecognizer([])).resolve(white_banner, ResolutionHints())

    def test_nothing_classified_is_unavailable(self, white_banner):
        fragments = [TextFragment("送料無料", Region(100, 600, 120, 60), 90)]
        with pytest.raises(RecognitionUnavailable):
            RecognitionStrategy(StaticTextRecognizer(fragments)).resolve(white_banner, ResolutionHints())

    def test_text_of_unrequested_fields_only_is_unavailable(self, white_banner):
        fragments = [TextFragment("20% OFF", Region(100, 250, 120, 60), 90)]
        hints = ResolutionHints([SemanticField.CAMPAIGN_TITLE, SemanticField.HARD_PRICE], 20)
        with pytest.raises(RecognitionUnavailable):
            RecognitionStrategy(StaticTextRecognizer(fragments)).resolve(white_banner, hints)

    def test_unrequested_fields_are_not_classified(self, white_banner, banner_fragments):
        hints = ResolutionHints([SemanticField.REGULAR_PRICE], 30)
        resolved = RecognitionStrategy(StaticTextRecognizer(banner_fragments)).resolve(white_banner, hints)
        assert resolved == {SemanticField.REGULAR_PRICE: Region(520, 300, 180, 50)}

    def test_recognizer_error_is_unavailable(self, white_banner):
        recognizer = Mock()
        recognizer.recognize.side_effect = RuntimeError("tesseract not installed")
        with pytest.raises(RecognitionUnavailable):
            RecognitionStrategy(recognizer).resolve(white_banner, ResolutionHints())

    def test_timeout_is_unavailable(self, white_banner):
        release = threading.Event()
        recognizer = Mock()
        recognizer.recognize.side_effect = lambda image: release.wait(5)
        try:
            with pytest.raises(RecognitionUnavailable):
                RecognitionStrategy(recognizer, timeout=0.05).resolve(white_banner, ResolutionHints())
        finally:
            release.set()


class TestFixedRatioStrategy(unittest.TestCase):
    """Tests for FixedRatioStrategy."""

    def test_default_layout_on_1080_square(self):
        image = Image.new("RGB", (1080, 1080))
        resolved = FixedRatioStrategy().resolve(image, ResolutionHints())
        self.assertEqual(resolved[SemanticField.CAMPAIGN_TITLE], Region(162, 86, 756, 108))
        self.assertEqual(resolved[SemanticField.DISCOUNT_RATE], Region(194, 378, 162, 86))
        self.assertEqual(resolved[SemanticField.REGULAR_PRICE], Region(518, 659, 162, 54))
        self.assertEqual(resolved[SemanticField.HARD_PRICE], Region(518, 842, 162, 54))

    def test_always_resolves_requested_fields(self):
        image = Image.new("RGB", (10, 10))
        resolved = FixedRatioStrategy().resolve(image, ResolutionHints())
        self.assertEqual(set(resolved), set(FIELD_ORDER))
        self.assertTrue(all(region is not None for region in resolved.values()))

    def test_custom_layout_overrides_one_field(self):
        image = Image.new("RGB", (100, 100))
        strategy = FixedRatioStrategy({SemanticField.HARD_PRICE: (0.5, 0.5, 0.5, 0.5)})
        resolved = strategy.resolve(image, ResolutionHints([SemanticField.HARD_PRICE]))
        self.assertEqual(resolved, {SemanticField.HARD_PRICE: Region(50, 50, 50, 50)})

    def test_tiny_image_regions_are_never_empty(self):
        image = Image.new("RGB", (5, 5))
        resolved = FixedRatioStrategy().resolve(image, ResolutionHints())
        for region in resolved.values():
            self.assertFalse(region.is_empty)
            self.assertFalse(region.clip(5, 5).is_empty)

    def test_single_pixel_image(self):
        image = Image.new("RGB", (1, 1))
        resolved = FixedRatioStrategy().resolve(image, ResolutionHints())
        self.assertTrue(all(region == Region(0, 0, 1, 1) for region in resolved.values()))
