"""
Constants and configuration values for Banner Edit.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the editing engine.
"""

# Background sampling
SAMPLE_MARGIN = 5
DEFAULT_BACKGROUND_WHITE = (255, 255, 255)
DEFAULT_BACKGROUND_GOLD = (189, 170, 124)

# Erase padding around a region (user coordinates vs recognized boxes)
USER_REGION_PADDING = 5
RECOGNIZED_REGION_PADDING = 10
FIXED_RATIO_PADDING = 0

# Text colors
DARK_TEXT_COLOR = "#333333"
LIGHT_TEXT_COLOR = "#FFFFFF"
PRICE_ACCENT_COLOR = "#E60012"
BRIGHTNESS_THRESHOLD = 128

# Fit-to-box font sizing
FIT_HEIGHT_RATIO = 0.6
FIT_CHAR_WIDTH_RATIO = 0.5
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 100
PRICE_LEFT_INSET = 10

# Stacked discount badge ("20% OFF" split over two lines)
DISCOUNT_NUMBER_SCALE = 1.3
DISCOUNT_UNIT_SCALE = 0.7
DISCOUNT_NUMBER_OFFSET = -0.3
DISCOUNT_UNIT_OFFSET = 0.4

# Fixed font sizing relative to the reference banner width
FIXED_REFERENCE_WIDTH = 1080
FIXED_TITLE_FONT_SIZE = 36
FIXED_DISCOUNT_FONT_SIZE = 37
FIXED_PRICE_FONT_SIZE = 32

# Font candidates tried in order before Pillow's bundled font
BOLD_FONT_CANDIDATES = (
    "NotoSansJP-Bold.ttf",
    "NotoSansCJK-Bold.ttc",
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
)

# Fixed-ratio layout: (x, y, width, height) as fractions of the image size
FIXED_RATIO_TITLE = (0.15, 0.08, 0.70, 0.10)
FIXED_RATIO_DISCOUNT = (0.18, 0.35, 0.15, 0.08)
FIXED_RATIO_REGULAR_PRICE = (0.48, 0.61, 0.15, 0.05)
FIXED_RATIO_HARD_PRICE = (0.48, 0.78, 0.15, 0.05)

# Text target classification
TITLE_MAX_Y = 200
TITLE_MIN_WIDTH = 200
PRICE_SPLIT_Y = 400
CAMPAIGN_KEYWORDS = ("キャンペーン", "限定", "感謝")
DISCOUNT_MARKERS = ("%", "OFF")
PRICE_PATTERNS = (r"[0-9,]+円", r"[¥￥][0-9,]+")
KNOWN_PRICE_LITERALS = ("4,400", "4,950", "3,520", "3,960")
DIAGNOSTIC_CONFIDENCE = 60
DUPLICATE_POLICY_FIRST = "first"
DUPLICATE_POLICY_LAST = "last"

# Text recognition
DEFAULT_OCR_LANGUAGES = "jpn+eng"
DEFAULT_RECOGNITION_TIMEOUT = 45.0
OCR_GRANULARITY_WORD = "word"
OCR_GRANULARITY_LINE = "line"
DEFAULT_FETCH_TIMEOUT = 30.0

# Batch editing
MAX_BATCH_WORKERS = 4

# Output encoding
DEFAULT_OUTPUT_FORMAT = "PNG"
PNG_DATA_URI_PREFIX = "data:image/png;base64,"

# Pricing and campaign presets
DEFAULT_REGULAR_ORIGINAL_PRICE = 4400
DEFAULT_HARD_ORIGINAL_PRICE = 4950
CURRENCY_SYMBOL = "¥"
DISCOUNT_SUFFIX = "OFF"
CAMPAIGN_TYPE_THANKSGIVING = "thanksgiving"
CAMPAIGN_TYPE_MARATHON = "marathon"
CAMPAIGN_TYPE_CUSTOM = "custom"
CAMPAIGN_TITLE_PRESETS = {
    CAMPAIGN_TYPE_THANKSGIVING: "大感謝祭 限定キャンペーン",
    CAMPAIGN_TYPE_MARATHON: "お買い物マラソン限定キャンペーン",
}
DEFAULT_CAMPAIGN_TITLE = "限定キャンペーン"

# Coordinate selector
SELECTOR_MAX_DISPLAY_WIDTH = 800
SELECTOR_MIN_SELECTION_SIZE = 10

# Template store
TEMPLATE_STORAGE_KEY = "imageEditTemplates"
TEMPLATE_STORE_FILENAME = "templates.json"

# Template record field names
FIELD_NAME = "name"
FIELD_AREAS = "areas"
FIELD_IMAGE_WIDTH = "imageWidth"
FIELD_IMAGE_HEIGHT = "imageHeight"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"
