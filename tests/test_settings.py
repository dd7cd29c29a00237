"""Tests for the centralised configuration loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfmono.config.settings import get_settings
from pdfmono.ghostscript import ConfigurationError, resolve_engine_path


def _write_env(path: Path, content: str) -> None:
    lines = [line.strip() for line in content.strip().splitlines()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def clean_resolution_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("PDFMONO_DPI", "PDFMONO_PAGE_WIDTH", "PDFMONO_PAGE_HEIGHT"):
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)


def test_env_file_values_are_loaded(
    tmp_path: Path, clean_gs_env: None, clean_resolution_env: None
) -> None:
    """Ensure values from a dedicated env file are parsed into the snapshot."""
    env_file = tmp_path / "test.env"
    _write_env(
        env_file,
        """
        GS_EXE=/opt/ghostscript/bin/gs
        PDFMONO_DPI=150
        PDFMONO_PAGE_WIDTH=850
        PDFMONO_PAGE_HEIGHT=1100.5
        """,
    )
    settings = get_settings(env_file=env_file, reload=True)

    assert settings.env_file == env_file.resolve()
    assert settings.engine.gs_exe == "/opt/ghostscript/bin/gs"
    assert settings.resolution.dpi == 150
    assert settings.resolution.width == 850.0
    assert settings.resolution.height == 1100.5


def test_environment_variables_override_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_resolution_env: None
) -> None:
    """Existing environment variables should take precedence over .env contents."""
    env_file = tmp_path / "override.env"
    _write_env(
        env_file,
        """
        GS_EXE=/from/env/file/gs
        PDFMONO_DPI=72
        """,
    )
    monkeypatch.setenv("GS_EXE", "/from/environment/gs")
    monkeypatch.setenv("PDFMONO_DPI", "600")

    settings = get_settings(env_file=env_file, reload=True)

    assert settings.engine.gs_exe == "/from/environment/gs"
    assert settings.resolution.dpi == 600


def test_invalid_resolution_values_fall_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_resolution_env: None
) -> None:
    monkeypatch.setenv("PDFMONO_DPI", "lots")
    monkeypatch.setenv("PDFMONO_PAGE_WIDTH", "-5")
    monkeypatch.setenv("PDFMONO_PAGE_HEIGHT", "")

    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert settings.resolution.dpi == 300
    assert settings.resolution.width == 1025.0
    assert settings.resolution.height == 1500.0


def test_missing_engine_path_is_none(tmp_path: Path, clean_gs_env: None) -> None:
    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)
    assert settings.engine.gs_exe is None


def test_resolve_engine_path_prefers_explicit_argument(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GS_EXE", "/from/environment/gs")
    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert resolve_engine_path("/explicit/gs", settings=settings) == "/explicit/gs"
    assert resolve_engine_path(None, settings=settings) == "/from/environment/gs"


def test_resolve_engine_path_without_any_source_fails(tmp_path: Path, clean_gs_env: None) -> None:
    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    with pytest.raises(ConfigurationError, match="GS_EXE"):
        resolve_engine_path(None, settings=settings)
