"""
Heuristic assignment of recognized text fragments to semantic fields.

The classifier is confidence-blind by default: position, size and text
patterns decide which fragment is the campaign title, the discount label,
or one of the two prices. A fragment is assigned to at most one field.

Classes:
    ClassifierOptions: Thresholds, keywords and policies for classification

Functions:
    is_campaign_title: Test a fragment against the title heuristic
    is_discount_label: Test a fragment against the discount heuristic
    is_price_text: Test a fragment against the price heuristic
    classify_fragments: Map fragments to field regions
"""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from BE_Libs.ImageEditingLib.image_models import Region, SemanticField, TextFragment, format_rate
from BE_Libs.constants import (
    CAMPAIGN_KEYWORDS,
    DIAGNOSTIC_CONFIDENCE,
    DISCOUNT_MARKERS,
    DUPLICATE_POLICY_FIRST,
    DUPLICATE_POLICY_LAST,
    KNOWN_PRICE_LITERALS,
    PRICE_PATTERNS,
    PRICE_SPLIT_Y,
    TITLE_MAX_Y,
    TITLE_MIN_WIDTH,
)

logger = logging.getLogger(__name__)


@dataclass
class ClassifierOptions:
    """Configuration for text target classification.

    Attributes:
        title_max_y: Title fragments must start above this y coordinate
        title_min_width: Title fragments must be wider than this
        campaign_keywords: A title must contain one of these substrings
        discount_markers: Substrings that mark a discount label
        price_patterns: Regular expressions that mark price text
        known_price_literals: Literal price strings of the reference banner
        price_split_y: Price fragments above this y are the regular price,
            the rest the hard price
        duplicate_policy: 'first' keeps the first price per bucket, 'last'
            lets later fragments overwrite earlier ones
        min_confidence: Fragments below this confidence are ignored (0 = off)
    """
    title_max_y: int = TITLE_MAX_Y
    title_min_width: int = TITLE_MIN_WIDTH
    campaign_keywords: Tuple[str, ...] = CAMPAIGN_KEYWORDS
    discount_markers: Tuple[str, ...] = DISCOUNT_MARKERS
    price_patterns: Tuple[str, ...] = PRICE_PATTERNS
    known_price_literals: Tuple[str, ...] = KNOWN_PRICE_LITERALS
    price_split_y: int = PRICE_SPLIT_Y
    duplicate_policy: str = DUPLICATE_POLICY_FIRST
    min_confidence: float = 0.0

    def __post_init__(self):
        if self.duplicate_policy not in (DUPLICATE_POLICY_FIRST, DUPLICATE_POLICY_LAST):
            raise ValueError(
                f"duplicate_policy must be '{DUPLICATE_POLICY_FIRST}' or "
                f"'{DUPLICATE_POLICY_LAST}', got {self.duplicate_policy!r}"
            )
        self.campaign_keywords = tuple(self.campaign_keywords)
        self.discount_markers = tuple(self.discount_markers)
        self.price_patterns = tuple(self.price_patterns)
        self.known_price_literals = tuple(self.known_price_literals)

    @property
    def compiled_price_patterns(self) -> List[Any]:
        return [re.compile(pattern) for pattern in self.price_patterns]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("campaign_keywords", "discount_markers", "price_patterns", "known_price_literals"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifierOptions":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


def is_campaign_title(fragment: TextFragment, options: ClassifierOptions) -> bool:
    box = fragment.box
    if box.y >= options.title_max_y or box.width <= options.title_min_width:
        return False
    return any(keyword in fragment.text for keyword in options.campaign_keywords)


def is_discount_label(fragment: TextFragment, current_discount_rate: float, options: ClassifierOptions) -> bool:
    text = fragment.text
    if any(marker in text for marker in options.discount_markers):
        return True
    return format_rate(current_discount_rate) in text


def is_price_text(fragment: TextFragment, options: ClassifierOptions) -> bool:
    text = fragment.text
    if any(pattern.search(text) for pattern in options.compiled_price_patterns):
        return True
    return any(literal in text for literal in options.known_price_literals)


def _log_diagnostics(fragments: Sequence[TextFragment]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for fragment in fragments:
        if fragment.confidence > DIAGNOSTIC_CONFIDENCE:
            logger.debug(
                f'  "{fragment.text}" at ({fragment.box.x}, {fragment.box.y}) '
                f"- confidence: {fragment.confidence:.0f}%"
            )


def classify_fragments(
    fragments: Sequence[TextFragment],
    current_discount_rate: float,
    options: Optional[ClassifierOptions] = None,
    fields: Optional[Iterable[SemanticField]] = None,
) -> Dict[SemanticField, Region]:
    """
    Assign recognized fragments to semantic fields.

    Fragments are examined in recognition order. The campaign title and the
    discount label take the first qualifying fragment. Price fragments are
    bucketed by vertical position into the regular (upper) and hard (lower)
    price; within a bucket the duplicate policy decides which one wins.

    Only the heuristics of ``fields`` run, so fields resolved elsewhere never
    claim a fragment another field needs.

    Args:
        fragments: Recognized text fragments in recognition order
        current_discount_rate: Discount rate currently printed on the banner
        options: Classification options (defaults to ClassifierOptions())
        fields: Fields to look for (defaults to all four)

    Returns:
        Mapping of resolved fields to the region of their fragment. Fields
        without a qualifying fragment are absent.
    """
    options = options or ClassifierOptions()
    wanted = set(fields) if fields is not None else set(SemanticField)
    _log_diagnostics(fragments)

    candidates = [
        fragment for fragment in fragments
        if fragment.text and fragment.text.strip()
        and fragment.confidence >= options.min_confidence
        and not fragment.box.is_empty
    ]

    targets: Dict[SemanticField, Region] = {}
    claimed = set()

    if SemanticField.CAMPAIGN_TITLE in wanted:
        for index, fragment in enumerate(candidates):
            if is_campaign_title(fragment, options):
                targets[SemanticField.CAMPAIGN_TITLE] = fragment.box
                claimed.add(index)
                break

    if SemanticField.DISCOUNT_RATE in wanted:
        for index, fragment in enumerate(candidates):
            if index in claimed:
                continue
            if is_discount_label(fragment, current_discount_rate, options):
                targets[SemanticField.DISCOUNT_RATE] = fragment.box
                claimed.add(index)
                break

    for index, fragment in enumerate(candidates):
        if index in claimed or not is_price_text(fragment, options):
            continue

        if fragment.box.y < options.price_split_y:
            bucket = SemanticField.REGULAR_PRICE
        else:
            bucket = SemanticField.HARD_PRICE
        if bucket not in wanted:
            continue

        if bucket in targets and options.duplicate_policy == DUPLICATE_POLICY_FIRST:
            logger.debug(f"Ignoring extra {bucket.value} candidate '{fragment.text}'")
            continue

        if bucket in targets:
            logger.debug(f"Overwriting {bucket.value} with later candidate '{fragment.text}'")
        targets[bucket] = fragment.box
        claimed.add(index)

    logger.info(f"Classified {len(targets)} target field(s) from {len(candidates)} fragment(s)")
    return targets
