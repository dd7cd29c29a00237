"""Command-line entry points for pdfmono."""

from .main import app


__all__ = ["app"]
