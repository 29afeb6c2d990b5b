"""Pillow-backed image resolution for manifests stored on disk."""

from __future__ import annotations

import os
from logging import getLogger
from pathlib import Path

from PIL import Image

from .formats import PixelFormat, SourceImage, is_convertible, to_pil

logger = getLogger("spriteatlas_core.atlas.images")

PIL_MODE_FORMATS: dict[str, PixelFormat] = {
    "L": PixelFormat.R8_UNORM,
    "LA": PixelFormat.RG8_UNORM,
    "RGBA": PixelFormat.RGBA8_UNORM_SRGB,
}


def default_resolve_workers() -> int:
    raw = str(os.environ.get("SPRITEATLAS_RESOLVE_WORKERS") or "").strip()
    if not raw:
        return 1
    try:
        return max(1, int(raw))
    except ValueError:
        logger.warning("[IMAGES] Ignoring non-integer SPRITEATLAS_RESOLVE_WORKERS=%r", raw)
        return 1


def load_source_image(path: Path) -> SourceImage:
    with Image.open(path) as img:
        img.load()
        pixel_format = PIL_MODE_FORMATS.get(img.mode)
        if pixel_format is None:
            logger.debug("[IMAGES] Converting '%s' from mode %s to RGBA", path, img.mode)
            img = img.convert("RGBA")
            pixel_format = PixelFormat.RGBA8_UNORM_SRGB
        return SourceImage(
            pixels=img.tobytes(),
            width=img.width,
            height=img.height,
            format=pixel_format,
        )


class FileImageResolver:
    """Resolve manifest entry paths relative to an asset root directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def resolve_path(self, path: str) -> Path:
        candidate = (self.root / path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValueError(f"Path escapes asset root: {path}")
        return candidate

    def __call__(self, path: str) -> SourceImage:
        file_path = self.resolve_path(path)
        logger.debug("[IMAGES] Loading '%s' from %s", path, file_path)
        return load_source_image(file_path)


def atlas_to_pil(pixels: bytes, width: int, height: int, pixel_format: PixelFormat) -> Image.Image:
    if not is_convertible(pixel_format):
        raise ValueError(f"No Pillow representation for pixel format {pixel_format}")
    return to_pil(SourceImage(pixels=pixels, width=width, height=height, format=pixel_format))
