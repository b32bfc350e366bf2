#!/usr/bin/env python
"""Example worker: render a message on a gradient image and publish it."""

from __future__ import annotations

import argparse
from typing import BinaryIO

from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel, ConfigDict, Field

from artifact_worker import EnvironmentOptions, WorkerRuntime, get_settings
from artifact_worker.core import ArtifactWorkerError, MAX_ATTEMPTS, configure_logging, get_logger

LOGGER = get_logger("text_on_image")

WIDTH = 1024
HEIGHT = 512
FONT_PATH = "./CaveatBrush-Regular.ttf"


class ImageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    background_url: str | None = Field(default=None, alias="background-url")
    background_artifact: str | None = Field(default=None, alias="background-artifact")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--msg", default="Hello World", help="Message to print on image")
    parser.add_argument("--img-art", default="", help="URN of artifact to add as background")
    parser.add_argument("--img-url", default="", help="URL of external image to add as background")
    parser.add_argument("--local", action="store_true", help="Run in local mode for testing")
    parser.add_argument("--no-caching", action="store_true", help="Do not use the cache sidecar if available")
    parser.add_argument("--skip-sidecar-check", action="store_true", help="Skip checking for a sidecar")
    return parser.parse_args()


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError as exc:
        LOGGER.error("text_on_image.font_missing", size=size, error=str(exc))
        return ImageFont.load_default(size=size)


def render(message: str, background: Image.Image | None, order_id: str) -> Image.Image:
    mask = Image.new("L", (WIDTH, HEIGHT), 0)
    draw = ImageDraw.Draw(mask)
    draw.text((WIDTH - 30, HEIGHT - 20), f"Order: {order_id}", fill=255, font=_load_font(32), anchor="rs")
    draw.text((WIDTH / 2, HEIGHT / 2), message, fill=255, font=_load_font(128), anchor="mm")

    gradient = Image.new("RGB", (WIDTH, HEIGHT))
    pixels = gradient.load()
    for x in range(WIDTH):
        for y in range(HEIGHT):
            t = (x / WIDTH + y / HEIGHT) / 2
            pixels[x, y] = (int(255 * (1 - t)), 0, int(255 * t))

    canvas = Image.new("RGB", (WIDTH, HEIGHT), (255, 255, 255))
    if background is not None:
        canvas.paste(background.convert("RGB"), (0, 0))
    canvas.paste(gradient, (0, 0), mask)
    return canvas


def main() -> None:
    args = parse_args()
    settings = get_settings()
    runtime_logger = configure_logging(settings=settings, order_id=settings.order_id)
    runtime = WorkerRuntime(
        EnvironmentOptions(
            local_mode=args.local,
            no_caching=args.no_caching,
            logger=runtime_logger,
        ),
        settings=settings,
    )
    LOGGER.info("text_on_image.parameters", msg=args.msg, img_art=args.img_art, img_url=args.img_url)

    with runtime:
        if not args.skip_sidecar_check:
            try:
                runtime.wait_for_environment_ready(MAX_ATTEMPTS)
            except ArtifactWorkerError as exc:
                raise SystemExit(f"Sidecars not reachable: {exc}") from exc

        background = None
        reference = args.img_art or args.img_url
        if reference:
            try:
                background = runtime.get_resource(reference, lambda reader: Image.open(reader).copy())
            except (ArtifactWorkerError, OSError) as exc:
                raise SystemExit(f"While getting background image: {exc}") from exc

        meta = ImageMeta(
            message=args.msg,
            background_url=args.img_url or None,
            background_artifact=args.img_art or None,
        )
        image = render(args.msg, background, runtime.order_id)

        def write_png(writer: BinaryIO) -> None:
            image.save(writer, format="PNG")

        outcome = runtime.publish_async("image.png", "image/png", meta, write_png).wait()

    if outcome.metadata_error is not None:
        LOGGER.error("text_on_image.metadata_failed", error=str(outcome.metadata_error))
    if not outcome.uploaded:
        raise SystemExit(f"Publishing image failed: {outcome.failure}")
    LOGGER.info("text_on_image.done", artifact_id=outcome.artifact_id, local=outcome.local)


if __name__ == "__main__":
    main()
