"""
Error types for the banner editing engine.

Fatal errors (decode / encode) propagate to the caller of an edit.
RecognitionUnavailable is raised by the recognition strategy and handled
inside the orchestrator, which falls back to the fixed-ratio layout.
"""


class BannerEditError(Exception):
    """Base class for all banner editing errors."""


class ImageDecodeError(BannerEditError, IOError):
    """The input could not be decoded into a raster image."""


class ImageEncodeError(BannerEditError):
    """The working image could not be serialized to the output format."""


class RecognitionUnavailable(BannerEditError):
    """Text recognition failed, timed out, or produced nothing usable."""


class TemplateImportError(BannerEditError, ValueError):
    """An imported template document is malformed."""
