"""
Campaign pricing and title helpers.

Builds the SemanticValues of an edit from a discount rate and a campaign
type: discounted prices are derived from the original list prices, the
title from a preset or a custom name.
"""

import logging
from typing import Optional

from BE_Libs.ImageEditingLib.image_models import SemanticValues, round_half_up
from BE_Libs.constants import (
    CAMPAIGN_TITLE_PRESETS,
    CAMPAIGN_TYPE_CUSTOM,
    DEFAULT_CAMPAIGN_TITLE,
    DEFAULT_HARD_ORIGINAL_PRICE,
    DEFAULT_REGULAR_ORIGINAL_PRICE,
)

logger = logging.getLogger(__name__)


def validate_discount_rate(rate: float) -> float:
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        raise ValueError(f"Discount rate must be a number, got {rate!r}")
    if not 0 <= rate <= 100:
        raise ValueError(f"Discount rate must be between 0 and 100, got {rate}")
    return rate


def calculate_price(original_price: float, discount_rate: float) -> int:
    """
    Discounted price rounded to the nearest yen.

    Example:
        >>> calculate_price(4400, 30)
        3080
    """
    rate = validate_discount_rate(discount_rate)
    return round_half_up(original_price * (1 - rate / 100))


def resolve_campaign_title(campaign_type: Optional[str], custom_name: Optional[str] = None) -> str:
    """
    Title text for a campaign type.

    Known presets map to their fixed titles; ``custom`` uses ``custom_name``
    when one is given. Anything else gets the generic default title.
    """
    if campaign_type == CAMPAIGN_TYPE_CUSTOM:
        name = (custom_name or "").strip()
        if name:
            return name
        return DEFAULT_CAMPAIGN_TITLE
    return CAMPAIGN_TITLE_PRESETS.get(campaign_type or "", DEFAULT_CAMPAIGN_TITLE)


def build_semantic_values(
    discount_rate: float,
    campaign_type: Optional[str] = None,
    custom_name: Optional[str] = None,
    regular_original_price: float = DEFAULT_REGULAR_ORIGINAL_PRICE,
    hard_original_price: float = DEFAULT_HARD_ORIGINAL_PRICE,
) -> SemanticValues:
    """
    Assemble the replacement values of an edit.

    Args:
        discount_rate: Discount percentage in [0, 100]
        campaign_type: 'thanksgiving', 'marathon', 'custom' or None
        custom_name: Title used with the 'custom' campaign type
        regular_original_price: List price of the regular model
        hard_original_price: List price of the hard model

    Returns:
        SemanticValues with discounted prices

    Raises:
        ValueError: If the discount rate is outside [0, 100]
    """
    rate = validate_discount_rate(discount_rate)
    values = SemanticValues(
        campaign_title=resolve_campaign_title(campaign_type, custom_name),
        discount_rate=rate,
        regular_price=calculate_price(regular_original_price, rate),
        hard_price=calculate_price(hard_original_price, rate),
    )
    logger.debug(f"Campaign values: {values.to_dict()}")
    return values
