"""Subprocess-backed streaming transform: PDF bytes in, bitmap bytes out.

A :class:`PdfToBitmapTransform` owns exactly one engine process. Input chunks
are written to the child's stdin as they arrive; once input ends, stdin is
closed and stdout is drained into an output queue that consumers read with
:meth:`PdfToBitmapTransform.read` or ``async for``.

Failures are latched: the first error observed (spawn failure, early exit, pipe
error) is stored on the session and every later operation re-raises that same
object. The failure is delivered to the output side exactly once, after any
partial output already produced.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
import contextlib
from dataclasses import dataclass
import enum
import shlex

from rich.markup import escape

from pdfmono.config import PdfMonoSettings
from pdfmono.utils.log_utils import logger

from .command import DEFAULT_RESOLUTION, ImageResolution, build_invocation
from .engine import resolve_engine_path
from .errors import EngineRuntimeError, SpawnError, TransformClosedError


DEFAULT_READ_SIZE = 64 * 1024

Spawner = Callable[..., Awaitable[asyncio.subprocess.Process]]


class SessionState(enum.Enum):
    SPAWNING = "spawning"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class _OutputEnd:
    """Terminal marker on the output queue; carries the failure, if any."""

    error: BaseException | None = None


class PdfToBitmapTransform:
    """Expose one engine process as an async bidirectional byte transform.

    Instances are created through :func:`create_transform`, which spawns the
    process immediately. Use as an async context manager to guarantee the
    child is killed and reaped when the caller is done.
    """

    def __init__(
        self,
        *,
        engine_path: str,
        resolution: ImageResolution,
        invocation: Sequence[str],
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        if read_size < 1:
            raise ValueError("read_size must be >= 1")
        self._engine_path = engine_path
        self._resolution = resolution
        self._invocation = tuple(invocation)
        self._read_size = read_size

        self._state = SessionState.SPAWNING
        self._error: BaseException | None = None
        self._failure_reported = False
        self._process: asyncio.subprocess.Process | None = None
        self._watcher: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self._output: asyncio.Queue[bytes | _OutputEnd] = asyncio.Queue()
        self._output_finished = False

    @property
    def engine_path(self) -> str:
        return self._engine_path

    @property
    def resolution(self) -> ImageResolution:
        return self._resolution

    @property
    def invocation(self) -> tuple[str, ...]:
        return self._invocation

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> BaseException | None:
        """The latched terminal error, if any."""
        return self._error

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process is not None else None

    async def _spawn(self, spawn: Spawner) -> None:
        logger.debug(f"Spawning engine: {escape(shlex.join([self._engine_path, *self._invocation]))}")
        try:
            process = await spawn(
                self._engine_path,
                *self._invocation,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
            )
        except OSError as exc:
            self._latch(SpawnError(f"Failed to start engine '{self._engine_path}': {exc}"), cause=exc)
            return
        self._process = process
        self._set_state(SessionState.RUNNING)
        self._watcher = asyncio.create_task(
            self._watch_process(process), name=f"pdfmono-engine-watch-{process.pid}"
        )

    async def _watch_process(self, process: asyncio.subprocess.Process) -> None:
        returncode = await process.wait()
        # Exits after end of input belong to the drain step.
        if self._state is not SessionState.RUNNING:
            return
        if returncode != 0:
            message = f"Engine exited with status {returncode} before end of input"
        else:
            message = "Engine exited before end of input"
        self._latch(EngineRuntimeError(message, returncode=returncode))

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"Engine session {self.pid}: {self._state.value} -> {state.value}")
        self._state = state

    def _latch(self, error: BaseException, *, cause: BaseException | None = None) -> BaseException:
        """Record ``error`` unless one is already latched; return the latched error."""
        if self._error is None:
            if cause is not None:
                error.__cause__ = cause
            self._error = error
            logger.warning(f"Engine session {self.pid} failed: {escape(str(error))}")
            self._set_state(SessionState.FAILED)
        return self._error

    async def _report_failure(self) -> None:
        if self._failure_reported:
            return
        self._failure_reported = True
        self._output.put_nowait(_OutputEnd(self._error))
        await self._terminate()

    async def _terminate(self) -> None:
        process = self._process
        if process is None:
            return
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            logger.debug(f"Killed engine process {process.pid}")
        if process.stdin is not None and not process.stdin.is_closing():
            process.stdin.close()
        await process.wait()
        watcher = self._watcher
        if watcher is not None and watcher is not asyncio.current_task():
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

    async def _fail(self, error: BaseException, *, cause: BaseException | None = None) -> BaseException:
        latched = self._latch(error, cause=cause)
        await self._report_failure()
        return latched

    async def write(self, chunk: bytes | bytearray | memoryview) -> None:
        """Forward one chunk of PDF bytes to the engine's stdin.

        Raises:
            TypeError: If ``chunk`` is not bytes-like.
            TransformError: The latched error if the session has failed, or
                ``TransformClosedError`` after end of input.
        """
        if not isinstance(chunk, bytes | bytearray | memoryview):
            raise TypeError(f"chunk must be bytes-like, got {type(chunk).__name__}")
        async with self._lock:
            if self._error is not None:
                await self._report_failure()
                raise self._error
            if self._state is not SessionState.RUNNING or self._process is None:
                raise TransformClosedError("Cannot write after end of input")
            if not chunk:
                return
            stdin = self._process.stdin
            assert stdin is not None
            try:
                stdin.write(chunk)
                await stdin.drain()
            except OSError as exc:
                raise await self._fail(
                    EngineRuntimeError(
                        "Failed writing to engine input", returncode=self._process.returncode
                    ),
                    cause=exc,
                )

    async def end(self) -> None:
        """Signal end of input and wait until the engine's output is drained.

        Returns only after the engine's stdout has ended and the process has
        exited cleanly; all output is then available from :meth:`read`.
        """
        async with self._lock:
            if self._error is not None:
                await self._report_failure()
                raise self._error
            if self._state is not SessionState.RUNNING or self._process is None:
                raise TransformClosedError("End of input was already signalled")
            self._set_state(SessionState.DRAINING)
            await self._drain(self._process)

    async def _drain(self, process: asyncio.subprocess.Process) -> None:
        stdin, stdout = process.stdin, process.stdout
        assert stdin is not None and stdout is not None
        try:
            stdin.close()
            await stdin.wait_closed()
        except OSError as exc:
            raise await self._fail(
                EngineRuntimeError("Failed closing engine input", returncode=process.returncode),
                cause=exc,
            )

        try:
            while chunk := await stdout.read(self._read_size):
                self._output.put_nowait(chunk)
        except OSError as exc:
            raise await self._fail(
                EngineRuntimeError("Failed reading engine output", returncode=process.returncode),
                cause=exc,
            )

        returncode = await process.wait()
        if returncode != 0:
            raise await self._fail(
                EngineRuntimeError(f"Engine exited with status {returncode}", returncode=returncode)
            )
        if self._error is not None:
            # Torn down while draining.
            await self._report_failure()
            raise self._error

        self._set_state(SessionState.COMPLETED)
        self._output.put_nowait(_OutputEnd())

    async def read(self) -> bytes:
        """Return the next chunk of bitmap bytes, or ``b""`` once output has ended.

        The latched error is raised once, after any output produced before it.
        """
        if self._output_finished:
            return b""
        item = await self._output.get()
        if isinstance(item, _OutputEnd):
            self._output_finished = True
            if item.error is not None:
                raise item.error
            return b""
        return item

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while chunk := await self.read():
            yield chunk

    async def abort(self, error: BaseException | None = None) -> None:
        """Fail the session with ``error`` and tear it down.

        A no-op once the session has completed. If an error is already latched
        it wins over ``error``.
        """
        if self._state is SessionState.COMPLETED:
            return
        await self._fail(error if error is not None else TransformClosedError("Transform aborted"))

    async def aclose(self) -> None:
        """Tear down the session, killing the engine if it is still running."""
        if self._state is SessionState.COMPLETED:
            await self._terminate()
            return
        await self._fail(TransformClosedError("Transform closed before conversion completed"))

    async def __aenter__(self) -> PdfToBitmapTransform:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def create_transform(
    engine_path: str | None = None,
    resolution: ImageResolution = DEFAULT_RESOLUTION,
    *,
    settings: PdfMonoSettings | None = None,
    spawn: Spawner | None = None,
    read_size: int = DEFAULT_READ_SIZE,
) -> PdfToBitmapTransform:
    """Spawn the engine and return a transform bound to it.

    Args:
        engine_path: Ghostscript executable. Falls back to ``GS_EXE``.
        resolution: Target dpi and logical page size.
        settings: Settings snapshot used for the ``GS_EXE`` fallback.
        spawn: Process factory with the ``asyncio.create_subprocess_exec``
            signature; mainly a seam for tests.
        read_size: Maximum size of each output chunk.

    Raises:
        ConfigurationError: If no engine path can be resolved. Nothing is
            spawned in that case. Spawn failures are *not* raised here; they are
            latched and surface on the first ``write`` or ``end``.
    """
    resolved_path = resolve_engine_path(engine_path, settings=settings)
    transform = PdfToBitmapTransform(
        engine_path=resolved_path,
        resolution=resolution,
        invocation=build_invocation(resolution),
        read_size=read_size,
    )
    await transform._spawn(spawn or asyncio.create_subprocess_exec)
    return transform


__all__ = [
    "DEFAULT_READ_SIZE",
    "PdfToBitmapTransform",
    "SessionState",
    "Spawner",
    "create_transform",
]
