"""Configuration helpers for pdfmono.

Expose `get_settings` as the canonical accessor for environment-driven
configuration. Modules should avoid loading `.env` directly and instead
import from this package to retrieve typed snapshots.
"""

from .settings import GS_EXE_ENV_VAR, PdfMonoSettings, get_settings


__all__ = ["GS_EXE_ENV_VAR", "PdfMonoSettings", "get_settings"]
