"""
Banner edit demonstration.

Draws a simple campaign banner, then replaces its text three ways:
with user-drawn coordinates, with Tesseract recognition (falls back to the
fixed-ratio layout when Tesseract is not installed), and through a saved
coordinate template. Output PNGs are written next to this script.

Install dependencies:
    pip install -e .
    # Tesseract itself: apt install tesseract-ocr tesseract-ocr-jpn
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging

from PIL import Image, ImageDraw

from BE_Libs.EditorLib import BannerEditor, build_semantic_values
from BE_Libs.ImageEditingLib import Region, SemanticField
from BE_Libs.RegionLib import CoordinateSelector, TesseractTextRecognizer
from BE_Libs.TemplateStoreLib import JsonFileKeyValueStore, TemplateManager
from BE_Libs.constants import TEMPLATE_STORE_FILENAME


def make_banner(width=1080, height=1080):
    """Create a gold banner with placeholder campaign text."""
    img = Image.new("RGB", (width, height), (189, 170, 124))
    draw = ImageDraw.Draw(img)
    draw.text((width * 0.2, height * 0.1), "CAMPAIGN", fill="#333333", font_size=72)
    draw.text((width * 0.2, height * 0.37), "20% OFF", fill="#FFFFFF", font_size=60)
    draw.text((width * 0.5, height * 0.62), "4,400", fill="#E60012", font_size=48)
    draw.text((width * 0.5, height * 0.79), "4,950", fill="#E60012", font_size=48)
    return img


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    out_dir = Path(__file__).parent

    banner = make_banner()
    values = build_semantic_values(30, "thanksgiving")
    print(f"Replacement values: {values.to_dict()}")

    # 1. Coordinates drawn with the selector (display is 800px wide)
    selector = CoordinateSelector(*banner.size)
    for x1, y1, x2, y2 in [(120, 60, 680, 150), (130, 270, 330, 360), (380, 480, 640, 540), (380, 610, 640, 670)]:
        selector.begin_drag(x1, y1)
        selector.end_drag(x2, y2)
    coordinates = selector.get_coordinates()

    editor = BannerEditor()
    result = editor.edit(banner, values, coordinates)
    (out_dir / "demo_user_regions.png").write_bytes(result.png_bytes)
    print(f"User regions: {result.to_dict()['strategies']}")

    # 2. Recognition with fixed-ratio fallback
    editor = BannerEditor(recognizer=TesseractTextRecognizer())
    result = editor.edit(banner, values)
    (out_dir / "demo_recognition.png").write_bytes(result.png_bytes)
    print(f"Recognition: {result.to_dict()['strategies']}")

    # 3. Template round trip
    manager = TemplateManager(JsonFileKeyValueStore(out_dir / TEMPLATE_STORE_FILENAME))
    manager.save_template("Gold 1080", coordinates)
    template = manager.get_template("Gold 1080")
    result = BannerEditor().edit(banner, values, template)
    (out_dir / "demo_template.png").write_bytes(result.png_bytes)
    print(f"Template '{template.name}' title region: {template.areas[SemanticField.CAMPAIGN_TITLE]}")

    # Single field override on top of the template
    regions = dict(template.areas)
    regions[SemanticField.HARD_PRICE] = Region(540, 840, 200, 60)
    result = BannerEditor().edit(banner, values, regions)
    print(f"Override: {result.regions[SemanticField.HARD_PRICE]}")


if __name__ == "__main__":
    main()
