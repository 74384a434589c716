"""CLI for blur placeholder generation."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click

from blur64_converter import blur64_image
from blur64_shared.protocol import (
    SUPPORTED_FITS,
    SUPPORTED_FORMATS,
    SUPPORTED_KERNELS,
    Blur64Error,
    Blur64Options,
    Dimensions,
    ValidationError,
    parse_ratio_text,
    parse_size_text,
)


def _size_callback(ctx: click.Context, param: click.Parameter, value: str | None) -> Any:
    if value is None:
        return None
    try:
        return parse_size_text(value)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e


def _ratio_callback(ctx: click.Context, param: click.Parameter, value: str | None) -> Any:
    if value is None:
        return None
    try:
        return parse_ratio_text(value)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e


def _source(src: str) -> str | bytes:
    """A source of "-" reads the image from stdin."""
    if src == "-":
        return click.get_binary_stream("stdin").read()
    return src


@click.command()
@click.argument("src")
@click.option("--size", callback=_size_callback, help="Major dimension N, or WxH")
@click.option("--scale", type=float, help="Fraction of the original size, in (0, 1]")
@click.option("--ratio", callback=_ratio_callback, help="Aspect ratio R, or W:H")
@click.option("-f", "--format", "fmt", type=click.Choice(SUPPORTED_FORMATS), default="avif", show_default=True)
@click.option("-q", "--quality", default=20, type=int, show_default=True)
@click.option("--blur", "blur_radius", default=4.0, type=float, show_default=True, help="Gaussian sigma")
@click.option("--no-blur", is_flag=True, help="Skip the blur step")
@click.option("--fit", type=click.Choice(SUPPORTED_FITS), default="inside", show_default=True)
@click.option("--kernel", type=click.Choice(SUPPORTED_KERNELS), default="lanczos3", show_default=True)
@click.option("--brightness", default=1.0, type=float, show_default=True)
@click.option("--saturation", default=1.2, type=float, show_default=True)
@click.option("--hue", default=0.0, type=float, show_default=True)
@click.option("--lightness", default=0.0, type=float, show_default=True)
@click.option("--retries", default=2, type=int, envvar="BLUR64_RETRIES", show_default=True)
@click.option("--retry-delay", default=300, type=int, envvar="BLUR64_RETRY_DELAY_MS", show_default=True, help="ms")
@click.option("--timeout", default=30000, type=int, envvar="BLUR64_TIMEOUT_MS", show_default=True, help="ms")
@click.option("--revalidate", default=0, type=int, envvar="BLUR64_REVALIDATE_SECONDS", help="Cache hint in seconds, 0 disables")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def cli(src: str, size: float | Dimensions | None, scale: float | None,
        ratio: float | Dimensions | None, fmt: str, quality: int,
        blur_radius: float, no_blur: bool, fit: str, kernel: str,
        brightness: float, saturation: float, hue: float, lightness: float,
        retries: int, retry_delay: int, timeout: int, revalidate: int,
        verbose: bool) -> None:
    """Print a blur placeholder for SRC (path, URL, or - for stdin) as JSON.

    An unreachable or unprocessable image still exits 0 and reports
    "placeholder": "empty". Invalid options or an unreadable image exit 2.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    options = Blur64Options(
        src=_source(src),
        size=size,
        scale=scale,
        ratio=ratio,
        blur_radius=False if no_blur else blur_radius,
        quality=quality,
        format=fmt,
        brightness=brightness,
        saturation=saturation,
        hue=hue,
        lightness=lightness,
        fit=fit,
        kernel=kernel,
        retries=retries,
        retry_delay=retry_delay,
        timeout=timeout,
        revalidate=revalidate or None,
    )

    try:
        result = blur64_image(options)
    except Blur64Error as e:
        raise click.UsageError(str(e)) from e

    click.echo(json.dumps({**result.to_dict(), "placeholder": result.placeholder}))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
