"""Centralised environment configuration for pdfmono.

This module ensures `.env` loading happens in one place and exposes a
typed snapshot of the engine location and default render resolution.
Downstream modules call `get_settings()` instead of touching `os.environ`
directly, making it easier to validate values and override behaviour in
tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv


_DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

GS_EXE_ENV_VAR = "GS_EXE"

DEFAULT_DPI = 300
DEFAULT_PAGE_WIDTH = 1025.0
DEFAULT_PAGE_HEIGHT = 1500.0


def _coerce_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _coerce_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _positive_or(value: int | float | None, default: int | float) -> int | float:
    if value is None or value <= 0:
        return default
    return value


@dataclass(frozen=True)
class EngineSettings:
    gs_exe: str | None


@dataclass(frozen=True)
class ResolutionSettings:
    dpi: int
    width: float
    height: float


@dataclass(frozen=True)
class PdfMonoSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    engine: EngineSettings
    resolution: ResolutionSettings


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> PdfMonoSettings:
    # Existing environment variables take precedence over `.env` defaults.
    load_dotenv(dotenv_path=env_path, override=False)

    engine = EngineSettings(gs_exe=os.getenv(GS_EXE_ENV_VAR) or None)
    resolution = ResolutionSettings(
        dpi=int(_positive_or(_coerce_int(os.getenv("PDFMONO_DPI")), DEFAULT_DPI)),
        width=float(
            _positive_or(_coerce_float(os.getenv("PDFMONO_PAGE_WIDTH")), DEFAULT_PAGE_WIDTH)
        ),
        height=float(
            _positive_or(_coerce_float(os.getenv("PDFMONO_PAGE_HEIGHT")), DEFAULT_PAGE_HEIGHT)
        ),
    )

    return PdfMonoSettings(env_file=env_path, engine=engine, resolution=resolution)


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> PdfMonoSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the repo
            root `.env` file is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
