"""
Unit tests for edit_orchestrator module.

Tests strategy priority, fallbacks, rendering and output of BannerEditor.
"""

import io
from unittest.mock import Mock

import numpy as np
import pytest

from BE_Libs.pillow_compat import Image
from BE_Libs.EditorLib.edit_orchestrator import BannerEditor, EditOptions
from BE_Libs.ImageEditingLib.image_models import (
    FIELD_ORDER,
    CoordinateSet,
    Region,
    SemanticField,
    SemanticValues,
    TextFragment,
)
from BE_Libs.ImageEditingLib.text_renderer import FontSizing
from BE_Libs.RegionLib.resolution_strategies import FixedRatioStrategy, ResolutionHints
from BE_Libs.RegionLib.text_recognition import StaticTextRecognizer
from BE_Libs.RegionLib.text_target_classifier import ClassifierOptions
from BE_Libs.errors import ImageDecodeError


def _outside_mask(shape, regions, padding=0):
    mask = np.ones(shape[:2], dtype=bool)
    for region in regions:
        if region is None:
            continue
        box = region.inflate(padding)
        mask[max(0, box.y):box.bottom, max(0, box.x):box.right] = False
    return mask


class TestStrategyPriority:
    """Tests for per-field strategy selection."""

    def test_all_user_regions_skip_recognition(self, white_banner, sample_values, user_regions):
        recognizer = Mock()
        result = BannerEditor(recognizer).edit(white_banner, sample_values, user_regions)

        recognizer.recognize.assert_not_called()
        assert all(result.strategies[f] == "user" for f in FIELD_ORDER)
        assert result.regions == user_regions

    def test_remaining_fields_use_recognition(self, white_banner, sample_values, banner_fragments):
        recognizer = StaticTextRecognizer(banner_fragments)
        user = {SemanticField.CAMPAIGN_TITLE: Region(100, 50, 600, 80)}

        result = BannerEditor(recognizer).edit(white_banner, sample_values, user)

        assert recognizer.calls == 1
        assert result.strategies[SemanticField.CAMPAIGN_TITLE] == "user"
        assert result.regions[SemanticField.CAMPAIGN_TITLE] == Region(100, 50, 600, 80)
        assert result.strategies[SemanticField.DISCOUNT_RATE] == "recognition"
        assert result.regions[SemanticField.HARD_PRICE] == Region(520, 480, 180, 50)

    def test_no_fragments_falls_back_to_fixed_ratio(self, gold_banner, sample_values):
        result = BannerEditor(StaticTextRecognizer([])).edit(gold_banner, sample_values)

        expected = FixedRatioStrategy().resolve(gold_banner, ResolutionHints())
        assert result.regions == expected
        assert all(result.strategies[f] == "fixed_ratio" for f in FIELD_ORDER)

    def test_recognizing_only_user_fields_falls_back_to_fixed_ratio(self, white_banner, sample_values):
        # The only recognized text belongs to a field the user already placed
        fragments = [TextFragment("20% OFF", Region(100, 250, 120, 60), 90)]
        user = {SemanticField.DISCOUNT_RATE: Region(150, 250, 200, 120)}

        result = BannerEditor(StaticTextRecognizer(fragments)).edit(white_banner, sample_values, user)

        assert result.strategies[SemanticField.DISCOUNT_RATE] == "user"
        assert result.regions[SemanticField.DISCOUNT_RATE] == Region(150, 250, 200, 120)
        for semantic_field in (SemanticField.CAMPAIGN_TITLE, SemanticField.REGULAR_PRICE, SemanticField.HARD_PRICE):
            assert result.strategies[semantic_field] == "fixed_ratio"
        assert result.skipped_fields == []

    def test_user_discount_leaves_price_text_to_prices(self, white_banner):
        # At 40% the discount heuristic would also match "4,400円"
        values = SemanticValues("限定キャンペーン", 40, 2640, 2970)
        fragments = [
            TextFragment("大感謝祭 限定キャンペーン", Region(150, 60, 700, 80), 92),
            TextFragment("4,400円", Region(520, 300, 180, 50), 90),
            TextFragment("4,950円", Region(520, 480, 180, 50), 91),
        ]
        user = {SemanticField.DISCOUNT_RATE: Region(150, 250, 200, 120)}

        result = BannerEditor(StaticTextRecognizer(fragments)).edit(white_banner, values, user)

        assert result.strategies[SemanticField.REGULAR_PRICE] == "recognition"
        assert result.regions[SemanticField.REGULAR_PRICE] == Region(520, 300, 180, 50)
        assert result.regions[SemanticField.HARD_PRICE] == Region(520, 480, 180, 50)

    def test_recognizer_failure_falls_back_to_fixed_ratio(self, white_banner, sample_values):
        recognizer = Mock()
        recognizer.recognize.side_effect = RuntimeError("engine crashed")
        result = BannerEditor(recognizer).edit(white_banner, sample_values)
        assert all(result.strategies[f] == "fixed_ratio" for f in FIELD_ORDER)

    def test_no_recognizer_uses_fixed_ratio(self, white_banner, sample_values):
        result = BannerEditor().edit(white_banner, sample_values)
        assert all(result.strategies[f] == "fixed_ratio" for f in FIELD_ORDER)

    def test_partial_recognition_skips_unmatched_fields(self, white_banner, sample_values):
        fragments = [TextFragment("20% OFF", Region(100, 250, 120, 60), 90)]
        result = BannerEditor(StaticTextRecognizer(fragments)).edit(white_banner, sample_values)

        assert result.strategies[SemanticField.DISCOUNT_RATE] == "recognition"
        assert result.regions[SemanticField.CAMPAIGN_TITLE] is None
        assert result.strategies[SemanticField.CAMPAIGN_TITLE] is None
        assert SemanticField.HARD_PRICE in result.skipped_fields


class TestEditOutput:
    """Tests for the rendered output of an edit."""

    def test_output_keeps_dimensions(self, white_banner, sample_values):
        result = BannerEditor().edit(white_banner, sample_values)

        decoded = Image.open(io.BytesIO(result.png_bytes))
        assert decoded.size == (1200, 800)
        assert result.image.size == (1200, 800)
        assert result.data_uri.startswith("data:image/png;base64,")

    def test_source_image_is_not_mutated(self, white_banner, sample_values, user_regions):
        before = np.asarray(white_banner).copy()
        BannerEditor().edit(white_banner, sample_values, user_regions)
        assert np.array_equal(before, np.asarray(white_banner))

    def test_pixels_outside_regions_are_unchanged(self, white_banner, sample_values, user_regions):
        result = BannerEditor().edit(white_banner, sample_values, user_regions)

        pixels = np.asarray(result.image)
        mask = _outside_mask(pixels.shape, user_regions.values())
        assert np.all(pixels[mask] == 255)

        # Every field drew something inside its region
        for region in user_regions.values():
            patch = pixels[region.y:region.bottom, region.x:region.right]
            assert np.any(patch != 255)

    def test_fixed_ratio_edit_only_touches_layout_regions(self, gold_banner, sample_values):
        before = np.asarray(gold_banner).copy()
        result = BannerEditor(StaticTextRecognizer([])).edit(gold_banner, sample_values)

        pixels = np.asarray(result.image)
        expected = FixedRatioStrategy().resolve(gold_banner, ResolutionHints())
        mask = _outside_mask(pixels.shape, expected.values())
        assert np.array_equal(pixels[mask], before[mask])

        for region in expected.values():
            patch = pixels[region.y:region.bottom, region.x:region.right]
            original = before[region.y:region.bottom, region.x:region.right]
            assert np.any(patch != original)

    def test_user_regions_are_deterministic(self, white_banner, sample_values, user_regions):
        editor = BannerEditor()
        first = editor.edit(white_banner, sample_values, user_regions)
        second = editor.edit(white_banner, sample_values, user_regions)
        assert first.png_bytes == second.png_bytes

    def test_accepts_values_dict(self, white_banner, user_regions):
        values = {"campaignTitle": "限定キャンペーン", "discountRate": 20, "regularPrice": 3520, "hardPrice": 3960}
        result = BannerEditor().edit(white_banner, values, user_regions)
        assert result.png_bytes

    def test_undecodable_source_raises(self, sample_values):
        with pytest.raises(ImageDecodeError):
            BannerEditor().edit(b"not an image", sample_values)

    def test_result_to_dict(self, white_banner, sample_values, user_regions):
        data = BannerEditor().edit(white_banner, sample_values, user_regions).to_dict()
        assert data["strategies"]["campaign"] == "user"
        assert data["regions"]["hardPrice"] == {"x": 550, "y": 600, "width": 250, "height": 60}


class TestCoordinateSetInput:
    """Tests for editing with recorded coordinate sets."""

    def test_coordinates_are_not_rescaled_by_default(self, white_banner, sample_values):
        coords = CoordinateSet(600, 400, {"campaign": Region(10, 10, 300, 50)})
        result = BannerEditor().edit(white_banner, sample_values, coords)
        assert result.regions[SemanticField.CAMPAIGN_TITLE] == Region(10, 10, 300, 50)

    def test_rescale_option(self, white_banner, sample_values):
        coords = CoordinateSet(600, 400, {"campaign": Region(10, 10, 300, 50)})
        editor = BannerEditor(options=EditOptions(rescale_templates=True))
        result = editor.edit(white_banner, sample_values, coords)
        assert result.regions[SemanticField.CAMPAIGN_TITLE] == Region(20, 20, 600, 100)


class TestEditOptions:
    """Tests for EditOptions configuration."""

    def test_render_options_per_strategy(self):
        options = EditOptions()
        user = options.render_options_for("user")
        recognition = options.render_options_for("recognition")
        fixed = options.render_options_for("fixed_ratio")

        assert (user.padding, user.sizing, user.fallback_color) == (5, FontSizing.FIT, (255, 255, 255))
        assert (recognition.padding, recognition.sizing) == (10, FontSizing.FIT)
        assert recognition.fallback_color == (189, 170, 124)
        assert (fixed.padding, fixed.sizing) == (0, FontSizing.FIXED)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            EditOptions().render_options_for("guess")

    def test_dict_round_trip(self):
        options = EditOptions(recognition_timeout=10, classifier=ClassifierOptions(duplicate_policy="last"))
        restored = EditOptions.from_dict(options.to_dict())
        assert restored == options
