"""Convenience wrappers that pipe a PDF byte source through a transform."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable

from pdfmono.config import PdfMonoSettings
from pdfmono.utils.log_utils import logger

from .command import DEFAULT_RESOLUTION, ImageResolution
from .engine import resolve_engine_path
from .errors import TransformError
from .transform import (
    DEFAULT_READ_SIZE,
    PdfToBitmapTransform,
    Spawner,
    create_transform,
)


ChunkSource = Iterable[bytes] | AsyncIterable[bytes]

DEFAULT_CHUNK_SIZE = 64 * 1024


def transform_factory(
    engine_path: str | None = None,
    *,
    settings: PdfMonoSettings | None = None,
    spawn: Spawner | None = None,
    read_size: int = DEFAULT_READ_SIZE,
) -> Callable[[ImageResolution], Awaitable[PdfToBitmapTransform]]:
    """Bind an engine path once and return a per-resolution transform constructor.

    The engine path is resolved eagerly, so a missing ``GS_EXE`` raises
    ``ConfigurationError`` here rather than on first use.
    """
    resolved_path = resolve_engine_path(engine_path, settings=settings)

    async def _create(resolution: ImageResolution) -> PdfToBitmapTransform:
        return await create_transform(
            resolved_path, resolution, spawn=spawn, read_size=read_size
        )

    return _create


async def _iterate_source(source: ChunkSource) -> AsyncIterator[bytes]:
    if isinstance(source, AsyncIterable):
        async for chunk in source:
            yield chunk
    else:
        for chunk in source:
            yield chunk


async def _feed(transform: PdfToBitmapTransform, source: ChunkSource) -> None:
    try:
        async for chunk in _iterate_source(source):
            await transform.write(chunk)
        await transform.end()
    except TransformError:
        # Already delivered on the transform's output side.
        raise
    except Exception as exc:
        await transform.abort(exc)
        raise


def _log_feeder_outcome(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"PDF input feeder stopped: {exc!r}")


async def iter_bitmap_chunks(
    source: ChunkSource,
    engine_path: str | None = None,
    resolution: ImageResolution = DEFAULT_RESOLUTION,
    *,
    settings: PdfMonoSettings | None = None,
    spawn: Spawner | None = None,
    read_size: int = DEFAULT_READ_SIZE,
) -> AsyncIterator[bytes]:
    """Stream ``source`` through a fresh transform and yield bitmap chunks.

    Input is written from a background task while output is yielded, so the
    caller only has to consume this generator. Errors from the engine, or from
    ``source`` itself, are raised from the iteration.
    """
    if isinstance(source, bytes | bytearray | memoryview):
        raise TypeError("source must be an iterable of byte chunks, not a single bytes object")

    transform = await create_transform(
        engine_path, resolution, settings=settings, spawn=spawn, read_size=read_size
    )
    feeder = asyncio.create_task(_feed(transform, source), name="pdfmono-input-feeder")
    feeder.add_done_callback(_log_feeder_outcome)
    try:
        async for chunk in transform:
            yield chunk
    finally:
        feeder.cancel()
        await transform.aclose()


async def convert_pdf_bytes(
    data: bytes,
    engine_path: str | None = None,
    resolution: ImageResolution = DEFAULT_RESOLUTION,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    settings: PdfMonoSettings | None = None,
    spawn: Spawner | None = None,
) -> bytes:
    """Convert an in-memory PDF and return the complete bitmap."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    view = memoryview(data)
    chunks = (bytes(view[i : i + chunk_size]) for i in range(0, len(view), chunk_size))
    parts: list[bytes] = []
    async for part in iter_bitmap_chunks(
        chunks, engine_path, resolution, settings=settings, spawn=spawn
    ):
        parts.append(part)
    return b"".join(parts)


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "convert_pdf_bytes",
    "iter_bitmap_chunks",
    "transform_factory",
]
