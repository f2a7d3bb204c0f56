"""
Text recognition collaborators.

The editing engine treats text recognition as a black box that turns an
image into TextFragments in source-image pixel coordinates.

Classes:
    TextRecognizer: Abstract recognition interface
    TesseractTextRecognizer: Recognition through pytesseract
    StaticTextRecognizer: Returns a fixed list of fragments
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytesseract

from BE_Libs.ImageEditingLib.image_models import Region, TextFragment
from BE_Libs.constants import DEFAULT_OCR_LANGUAGES, OCR_GRANULARITY_LINE, OCR_GRANULARITY_WORD

logger = logging.getLogger(__name__)

# Tesseract page-layout levels in image_to_data output
TESSERACT_WORD_LEVEL = 5

OCR_GRANULARITY_MODES = (OCR_GRANULARITY_WORD, OCR_GRANULARITY_LINE)


class TextRecognizer(ABC):
    """Turns an image into recognized text fragments."""

    @abstractmethod
    def recognize(self, image: Any) -> List[TextFragment]:
        """
        Recognize text in an image.

        Args:
            image: PIL Image

        Returns:
            Fragments in recognition order, boxes in image pixel coordinates

        Raises:
            Exception: Any engine failure; callers treat it as recognition
                being unavailable
        """


class StaticTextRecognizer(TextRecognizer):
    """Recognizer that returns pre-computed fragments.

    Useful when OCR ran elsewhere, and for tests. ``calls`` counts how many
    times recognition was requested.
    """

    def __init__(self, fragments: Optional[Sequence[TextFragment]] = None):
        self._fragments = list(fragments or [])
        self.calls = 0

    def recognize(self, image: Any) -> List[TextFragment]:
        self.calls += 1
        return list(self._fragments)


class TesseractTextRecognizer(TextRecognizer):
    """
    Text recognition through the Tesseract engine (pytesseract).

    Returns one fragment per word by default. With granularity "line" the
    words of each text line are merged, which keeps multi-word labels such as
    "20% OFF" in a single box.
    """

    def __init__(
        self,
        languages: str = DEFAULT_OCR_LANGUAGES,
        tesseract_cmd: Optional[str] = None,
        config: str = "",
        granularity: str = OCR_GRANULARITY_WORD,
    ):
        if granularity not in OCR_GRANULARITY_MODES:
            raise ValueError(f"granularity must be one of {OCR_GRANULARITY_MODES}, got {granularity!r}")
        self.languages = languages
        self.config = config
        self.granularity = granularity
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
            logger.info(f"Configured Tesseract path: {tesseract_cmd}")

    def recognize(self, image: Any) -> List[TextFragment]:
        logger.debug(f"Running Tesseract OCR ({self.languages}) on {image.size[0]}x{image.size[1]} image")
        data = pytesseract.image_to_data(
            image,
            lang=self.languages,
            config=self.config,
            output_type=pytesseract.Output.DICT,
        )
        fragments = fragments_from_tesseract_data(data, self.granularity)
        logger.info(f"Tesseract detected {len(fragments)} text fragment(s)")
        return fragments


def _entry(data: Dict[str, List[Any]], index: int) -> Tuple[str, Region, float]:
    text = str(data["text"][index]).strip()
    box = Region(
        int(data["left"][index]),
        int(data["top"][index]),
        int(data["width"][index]),
        int(data["height"][index]),
    )
    try:
        confidence = float(data["conf"][index])
    except (TypeError, ValueError):
        confidence = -1.0
    return text, box, confidence


def _merge_line(words: List[TextFragment]) -> TextFragment:
    left = min(word.box.x for word in words)
    top = min(word.box.y for word in words)
    right = max(word.box.right for word in words)
    bottom = max(word.box.bottom for word in words)
    return TextFragment(
        text=" ".join(word.text for word in words),
        box=Region(left, top, right - left, bottom - top),
        confidence=sum(word.confidence for word in words) / len(words),
    )


def fragments_from_tesseract_data(
    data: Dict[str, List[Any]],
    granularity: str = OCR_GRANULARITY_WORD,
) -> List[TextFragment]:
    """
    Convert pytesseract ``image_to_data`` dict output into fragments.

    Only word-level entries carry text; entries with empty text or a negative
    confidence are dropped. With ``granularity="line"`` the words of each
    (block, paragraph, line) are merged into one fragment whose box is the
    union of the word boxes and whose confidence is the mean word confidence.

    Raises:
        ValueError: If granularity is neither 'word' nor 'line'
    """
    if granularity not in OCR_GRANULARITY_MODES:
        raise ValueError(f"granularity must be one of {OCR_GRANULARITY_MODES}, got {granularity!r}")

    count = len(data.get("text", []))
    levels = data.get("level", [TESSERACT_WORD_LEVEL] * count)
    words: List[TextFragment] = []
    lines: Dict[Tuple[int, int, int], List[TextFragment]] = {}

    for index in range(count):
        if int(levels[index]) != TESSERACT_WORD_LEVEL:
            continue
        text, box, confidence = _entry(data, index)
        if not text or confidence < 0 or box.is_empty:
            continue

        word = TextFragment(text=text, box=box, confidence=confidence)
        words.append(word)
        key = (
            int(data.get("block_num", [0] * count)[index]),
            int(data.get("par_num", [0] * count)[index]),
            int(data.get("line_num", [0] * count)[index]),
        )
        lines.setdefault(key, []).append(word)

    if granularity == OCR_GRANULARITY_WORD:
        return words
    return [_merge_line(line_words) for line_words in lines.values()]
