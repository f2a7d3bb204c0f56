"""
Pytest configuration and shared fixtures for Banner Edit tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest

from BE_Libs.pillow_compat import Image
from BE_Libs.ImageEditingLib.image_models import Region, SemanticField, SemanticValues, TextFragment


@pytest.fixture
def white_banner():
    """
    Provide a plain white 1200x800 RGB banner.

    Returns:
        PIL Image filled with white
    """
    return Image.new("RGB", (1200, 800), (255, 255, 255))


@pytest.fixture
def gold_banner():
    """Provide a 1080x1080 banner filled with the gold fallback color."""
    return Image.new("RGB", (1080, 1080), (189, 170, 124))


@pytest.fixture
def sample_values():
    """
    Provide replacement values for a 30% campaign.

    Returns:
        SemanticValues with prices discounted from 4,400 and 4,950
    """
    return SemanticValues(
        campaign_title="限定キャンペーン",
        discount_rate=30,
        regular_price=3080,
        hard_price=3465,
    )


@pytest.fixture
def user_regions():
    """Provide user-drawn regions for all four fields of a 1200x800 banner."""
    return {
        SemanticField.CAMPAIGN_TITLE: Region(100, 50, 600, 80),
        SemanticField.DISCOUNT_RATE: Region(150, 250, 200, 120),
        SemanticField.REGULAR_PRICE: Region(550, 450, 250, 60),
        SemanticField.HARD_PRICE: Region(550, 600, 250, 60),
    }


@pytest.fixture
def banner_fragments():
    """
    Provide recognized fragments resembling the reference banner.

    Returns:
        List of TextFragment in recognition order
    """
    return [
        TextFragment("大感謝祭 限定キャンペーン", Region(150, 60, 700, 80), 92.0),
        TextFragment("20% OFF", Region(190, 250, 160, 90), 88.0),
        TextFragment("4,400円", Region(520, 300, 180, 50), 90.0),
        TextFragment("4,950円", Region(520, 480, 180, 50), 91.0),
    ]
