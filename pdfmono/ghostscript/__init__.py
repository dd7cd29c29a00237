"""Ghostscript-backed PDF to monochrome bitmap conversion.

Public API (re-exported):
    - ImageResolution, DEFAULT_RESOLUTION, build_invocation
    - create_transform, PdfToBitmapTransform, SessionState
    - iter_bitmap_chunks, convert_pdf_bytes, transform_factory
    - resolve_engine_path
    - the error types from ``errors``
"""

from .command import DEFAULT_RESOLUTION, ImageResolution, build_invocation
from .engine import resolve_engine_path
from .errors import (
    ConfigurationError,
    EngineRuntimeError,
    InvalidResolutionError,
    SpawnError,
    TransformClosedError,
    TransformError,
)
from .pipeline import convert_pdf_bytes, iter_bitmap_chunks, transform_factory
from .transform import PdfToBitmapTransform, SessionState, create_transform


__all__ = [
    "DEFAULT_RESOLUTION",
    "ImageResolution",
    "build_invocation",
    "resolve_engine_path",
    "ConfigurationError",
    "EngineRuntimeError",
    "InvalidResolutionError",
    "SpawnError",
    "TransformClosedError",
    "TransformError",
    "convert_pdf_bytes",
    "iter_bitmap_chunks",
    "transform_factory",
    "PdfToBitmapTransform",
    "SessionState",
    "create_transform",
]
