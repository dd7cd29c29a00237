"""Engine executable lookup."""

from __future__ import annotations

from pdfmono.config import GS_EXE_ENV_VAR, PdfMonoSettings, get_settings

from .errors import ConfigurationError


def resolve_engine_path(
    engine_path: str | None = None,
    *,
    settings: PdfMonoSettings | None = None,
) -> str:
    """Return the Ghostscript executable path to spawn.

    An explicit ``engine_path`` wins; otherwise the ``GS_EXE`` value from the
    settings snapshot is used.

    Raises:
        ConfigurationError: If neither source provides a path.
    """
    if engine_path:
        return engine_path
    snapshot = settings if settings is not None else get_settings()
    if snapshot.engine.gs_exe:
        return snapshot.engine.gs_exe
    raise ConfigurationError(
        f"{GS_EXE_ENV_VAR} environment variable must be set when no engine path is given"
    )


__all__ = ["resolve_engine_path"]
