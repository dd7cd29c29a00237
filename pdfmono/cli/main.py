from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Iterator
from functools import wraps
from pathlib import Path
import shlex
from typing import Any, ParamSpec, TypeVar

import typer

from pdfmono.config import PdfMonoSettings, get_settings
from pdfmono.ghostscript import (
    ImageResolution,
    InvalidResolutionError,
    TransformError,
    build_invocation,
    iter_bitmap_chunks,
    resolve_engine_path,
)
from pdfmono.ghostscript.pipeline import DEFAULT_CHUNK_SIZE
from pdfmono.utils.log_utils import configure_logging, logger


app = typer.Typer(
    help="Render PDF documents to monochrome bitmaps with Ghostscript",
)


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _synchronous(handler: Callable[_P, Coroutine[Any, Any, _T]]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return asyncio.run(handler(*args, **kwargs))
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


def _resolution_from_options(
    settings: PdfMonoSettings,
    dpi: int | None,
    width: float | None,
    height: float | None,
) -> ImageResolution:
    defaults = settings.resolution
    return ImageResolution(
        dpi=dpi if dpi is not None else defaults.dpi,
        width=width if width is not None else defaults.width,
        height=height if height is not None else defaults.height,
    )


def _read_chunks(path: Path, chunk_size: int) -> Iterator[bytes]:
    with path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            yield chunk


@app.command("convert")
@_synchronous
async def convert_command(
    input_pdf: Path = typer.Argument(
        ...,
        help="PDF document to render.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: Path = typer.Argument(..., help="Destination bitmap file.", dir_okay=False),
    gs_path: str | None = typer.Option(
        None, "--gs-path", help="Ghostscript executable (defaults to $GS_EXE)."
    ),
    dpi: int | None = typer.Option(None, "--dpi", help="Render resolution in dots per inch."),
    width: float | None = typer.Option(None, "--width", help="Logical page width."),
    height: float | None = typer.Option(None, "--height", help="Logical page height."),
    chunk_size: int = typer.Option(
        DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Bytes per input chunk."
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Also write DEBUG logs to this file."
    ),
) -> None:
    """Stream INPUT_PDF through Ghostscript and write the bitmap to OUTPUT."""
    if log_file is not None:
        configure_logging(file_path=log_file, force=True)

    settings = get_settings()
    try:
        resolution = _resolution_from_options(settings, dpi, width, height)
        engine_path = resolve_engine_path(gs_path, settings=settings)
        output.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with output.open("wb") as sink:
            async for chunk in iter_bitmap_chunks(
                _read_chunks(input_pdf, chunk_size), engine_path, resolution
            ):
                sink.write(chunk)
                written += len(chunk)
    except (TransformError, InvalidResolutionError) as exc:
        logger.error(f"Conversion of {input_pdf} failed: {exc}")
        raise typer.Exit(code=1) from exc

    logger.info(f"Wrote {written} bytes ({resolution.geometry} @ {resolution.dpi} dpi) to {output}")


@app.command("show-command")
def show_command(
    gs_path: str | None = typer.Option(
        None, "--gs-path", help="Ghostscript executable (defaults to $GS_EXE)."
    ),
    dpi: int | None = typer.Option(None, "--dpi", help="Render resolution in dots per inch."),
    width: float | None = typer.Option(None, "--width", help="Logical page width."),
    height: float | None = typer.Option(None, "--height", help="Logical page height."),
) -> None:
    """Print the Ghostscript command line that `convert` would run."""
    settings = get_settings()
    try:
        resolution = _resolution_from_options(settings, dpi, width, height)
        engine_path = resolve_engine_path(gs_path, settings=settings)
    except (TransformError, InvalidResolutionError) as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(shlex.join([engine_path, *build_invocation(resolution)]))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
