"""Stream PDF documents through Ghostscript into monochrome bitmaps."""

from .ghostscript import (
    DEFAULT_RESOLUTION,
    ConfigurationError,
    EngineRuntimeError,
    ImageResolution,
    InvalidResolutionError,
    PdfToBitmapTransform,
    SessionState,
    SpawnError,
    TransformClosedError,
    TransformError,
    build_invocation,
    convert_pdf_bytes,
    create_transform,
    iter_bitmap_chunks,
    transform_factory,
)


__version__ = "0.1.0"

__all__ = [
    "DEFAULT_RESOLUTION",
    "ConfigurationError",
    "EngineRuntimeError",
    "ImageResolution",
    "InvalidResolutionError",
    "PdfToBitmapTransform",
    "SessionState",
    "SpawnError",
    "TransformClosedError",
    "TransformError",
    "build_invocation",
    "convert_pdf_bytes",
    "create_transform",
    "iter_bitmap_chunks",
    "transform_factory",
]
