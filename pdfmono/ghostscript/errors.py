"""Exception types raised by the Ghostscript transform."""

from __future__ import annotations


class TransformError(RuntimeError):
    """Base class for failures surfaced through a transform's error channel."""

    pass


class ConfigurationError(TransformError):
    """Raised when no engine executable path can be resolved.

    This is always raised synchronously, before any child process is spawned.
    """

    pass


class SpawnError(TransformError):
    """Raised when the engine process could not be started.

    The underlying ``OSError`` (missing binary, permission denied, ...) is
    attached as ``__cause__``.
    """

    pass


class EngineRuntimeError(TransformError):
    """Raised when the engine exits abnormally or a pipe I/O error occurs."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class TransformClosedError(TransformError):
    """Raised when a transform is used after teardown or after end of input."""

    pass


class InvalidResolutionError(ValueError):
    """Raised for resolutions that would yield an unusable pixel geometry."""

    pass


__all__ = [
    "TransformError",
    "ConfigurationError",
    "SpawnError",
    "EngineRuntimeError",
    "TransformClosedError",
    "InvalidResolutionError",
]
