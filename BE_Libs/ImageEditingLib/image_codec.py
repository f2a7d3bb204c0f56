"""
Image decoding and encoding for Banner Edit.

Input images arrive as base64 data URIs, HTTP(S) URLs, raw bytes, file
paths, or already-open PIL Images. Output is PNG, either as bytes or as a
data URI.

Functions:
    is_data_uri: Check whether a string is a base64 data URI
    decode_data_uri: Extract the payload bytes of a data URI
    fetch_image_bytes: Download image bytes from an HTTP(S) URL
    load_image: Decode any supported source into an RGB working image
    encode_png: Serialize an image to PNG bytes
    to_data_uri: Wrap PNG bytes in a data URI
"""

import base64
import binascii
import io
import logging
import re
from pathlib import Path
from typing import Any, Union

import httpx

from BE_Libs.pillow_compat import Image, ImageClass
from BE_Libs.constants import DEFAULT_FETCH_TIMEOUT, DEFAULT_OUTPUT_FORMAT, PNG_DATA_URI_PREFIX
from BE_Libs.errors import ImageDecodeError, ImageEncodeError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?:;[\w=.-]+)*;base64,(?P<payload>.*)$", re.DOTALL)

ImageSource = Union[str, bytes, bytearray, Path, Any]


def is_data_uri(value: str) -> bool:
    return bool(DATA_URI_PATTERN.match(value.strip()))


def decode_data_uri(value: str) -> bytes:
    """
    Extract the binary payload of a base64 data URI.

    Raises:
        ImageDecodeError: If the string is not a base64 data URI or the
            payload is not valid base64
    """
    match = DATA_URI_PATTERN.match(value.strip())
    if not match:
        raise ImageDecodeError("Input is not a base64 data URI")

    try:
        return base64.b64decode(match.group("payload"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload in data URI: {e}")


def fetch_image_bytes(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """
    Download an image over HTTP(S).

    Raises:
        ImageDecodeError: On network errors or non-success status codes
    """
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.content
    except httpx.HTTPError as e:
        raise ImageDecodeError(f"Failed to fetch image from {url}: {e}")


def _decode_bytes(data: bytes) -> Any:
    if not data:
        raise ImageDecodeError("Image data is empty")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except Exception as e:
        raise ImageDecodeError(f"Failed to decode image: {e}")
    return img


def load_image(source: ImageSource, fetch_timeout: float = DEFAULT_FETCH_TIMEOUT) -> Any:
    """
    Decode a source into a fresh RGB working image.

    The returned image is always a new object; an input PIL Image is copied
    and never modified by later editing.

    Args:
        source: Data URI, http(s) URL, bytes, file path, or PIL Image
        fetch_timeout: Timeout in seconds for URL downloads

    Returns:
        PIL Image in RGB mode

    Raises:
        ImageDecodeError: If the source cannot be read or decoded
    """
    if isinstance(source, ImageClass):
        img = source
    elif isinstance(source, (bytes, bytearray)):
        img = _decode_bytes(bytes(source))
    elif isinstance(source, Path):
        try:
            img = _decode_bytes(source.read_bytes())
        except OSError as e:
            raise ImageDecodeError(f"Failed to read image from {source}: {e}")
    elif isinstance(source, str):
        value = source.strip()
        if value.startswith("data:"):
            img = _decode_bytes(decode_data_uri(value))
        elif value.lower().startswith(("http://", "https://")):
            logger.debug(f"Fetching image from {value}")
            img = _decode_bytes(fetch_image_bytes(value, fetch_timeout))
        else:
            try:
                img = _decode_bytes(Path(value).read_bytes())
            except OSError as e:
                raise ImageDecodeError(f"Failed to read image from {value}: {e}")
    else:
        raise ImageDecodeError(f"Unsupported image source type: {type(source)}")

    try:
        if img.mode == "RGB":
            return img.copy()
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            # Flatten transparency onto white like a canvas export would
            rgba = img.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, (255, 255, 255))
            flattened.paste(rgba, mask=rgba.getchannel("A"))
            return flattened
        return img.convert("RGB")
    except Exception as e:
        raise ImageDecodeError(f"Failed to convert image to RGB: {e}")


def encode_png(image: Any) -> bytes:
    """
    Serialize an image to PNG bytes.

    Raises:
        ImageEncodeError: If the image cannot be written
    """
    if not hasattr(image, "save"):
        raise ImageEncodeError(f"Expected PIL Image, got {type(image)}")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    except Exception as e:
        raise ImageEncodeError(f"Failed to encode image as {DEFAULT_OUTPUT_FORMAT}: {e}")
    return buffer.getvalue()


def to_data_uri(png_bytes: bytes) -> str:
    return PNG_DATA_URI_PREFIX + base64.b64encode(png_bytes).decode("ascii")
