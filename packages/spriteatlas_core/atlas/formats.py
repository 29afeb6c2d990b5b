"""Pixel formats and source-image format normalization."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from logging import getLogger

from PIL import Image

from .errors import FormatConversionError, FormatIncompatibleError

logger = getLogger("spriteatlas_core.atlas.formats")


class PixelFormat(str, Enum):
    R8_UNORM = "R8Unorm"
    RG8_UNORM = "Rg8Unorm"
    RGBA8_UNORM = "Rgba8Unorm"
    RGBA8_UNORM_SRGB = "Rgba8UnormSrgb"
    BGRA8_UNORM = "Bgra8Unorm"
    BGRA8_UNORM_SRGB = "Bgra8UnormSrgb"
    R16_UNORM = "R16Unorm"
    RGBA16_UNORM = "Rgba16Unorm"
    R32_FLOAT = "R32Float"
    RGBA16_FLOAT = "Rgba16Float"
    RGBA32_FLOAT = "Rgba32Float"

    def __str__(self) -> str:
        return self.value


DEFAULT_FORMAT = PixelFormat.RGBA8_UNORM_SRGB

_BYTES_PER_PIXEL: dict[PixelFormat, int] = {
    PixelFormat.R8_UNORM: 1,
    PixelFormat.RG8_UNORM: 2,
    PixelFormat.RGBA8_UNORM: 4,
    PixelFormat.RGBA8_UNORM_SRGB: 4,
    PixelFormat.BGRA8_UNORM: 4,
    PixelFormat.BGRA8_UNORM_SRGB: 4,
    PixelFormat.R16_UNORM: 2,
    PixelFormat.RGBA16_UNORM: 8,
    PixelFormat.R32_FLOAT: 4,
    PixelFormat.RGBA16_FLOAT: 8,
    PixelFormat.RGBA32_FLOAT: 16,
}

# Pillow mode and channel order for each convertible format. Formats that only
# differ by the sRGB flag share a layout and their bytes are reinterpreted as-is.
_PIL_LAYOUTS: dict[PixelFormat, tuple[str, str]] = {
    PixelFormat.R8_UNORM: ("L", "L"),
    PixelFormat.RG8_UNORM: ("LA", "LA"),
    PixelFormat.RGBA8_UNORM: ("RGBA", "RGBA"),
    PixelFormat.RGBA8_UNORM_SRGB: ("RGBA", "RGBA"),
    PixelFormat.BGRA8_UNORM: ("RGBA", "BGRA"),
    PixelFormat.BGRA8_UNORM_SRGB: ("RGBA", "BGRA"),
}


def bytes_per_pixel(pixel_format: PixelFormat) -> int:
    return _BYTES_PER_PIXEL[PixelFormat(pixel_format)]


def is_convertible(pixel_format: PixelFormat) -> bool:
    return PixelFormat(pixel_format) in _PIL_LAYOUTS


@dataclass(frozen=True)
class SourceImage:
    """A decoded image as handed over by an image resolver."""

    pixels: bytes
    width: int
    height: int
    format: PixelFormat

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def expected_length(self) -> int:
        return self.width * self.height * bytes_per_pixel(self.format)


def _swap_red_blue(img: Image.Image) -> Image.Image:
    r, g, b, a = img.split()
    return Image.merge("RGBA", (b, g, r, a))


def to_pil(image: SourceImage) -> Image.Image:
    """Decode a SourceImage in an 8-bit format into a Pillow image."""
    mode, order = _PIL_LAYOUTS[image.format]
    img = Image.frombytes(mode, image.size, bytes(image.pixels))
    if order == "BGRA":
        img = _swap_red_blue(img)
    return img


def from_pil(img: Image.Image, pixel_format: PixelFormat) -> SourceImage:
    mode, order = _PIL_LAYOUTS[pixel_format]
    if img.mode != mode:
        img = img.convert(mode)
    if order == "BGRA":
        img = _swap_red_blue(img)
    return SourceImage(
        pixels=img.tobytes(),
        width=img.width,
        height=img.height,
        format=pixel_format,
    )


def convert_image(image: SourceImage, target: PixelFormat, *, path: str = "<inline>") -> SourceImage:
    source = image.format
    if not is_convertible(source) or not is_convertible(target):
        raise FormatConversionError(path, str(source), str(target))

    if _PIL_LAYOUTS[source] == _PIL_LAYOUTS[target]:
        return replace(image, format=target)

    if image.width == 0 or image.height == 0:
        return SourceImage(pixels=b"", width=image.width, height=image.height, format=target)

    try:
        return from_pil(to_pil(image), target)
    except (ValueError, OSError) as exc:
        logger.warning("[FORMATS] Pillow conversion failed for '%s': %s", path, exc)
        raise FormatConversionError(path, str(source), str(target)) from exc


def normalize_image(
    image: SourceImage,
    target: PixelFormat,
    *,
    auto_convert: bool,
    path: str = "<inline>",
) -> SourceImage:
    """Return ``image`` in the ``target`` format, converting it when allowed."""
    if image.format == target:
        return image

    if not auto_convert:
        logger.warning(
            "[FORMATS] Format mismatch with conversion disabled: path='%s', %s -> %s",
            path, image.format, target,
        )
        raise FormatIncompatibleError(path, str(image.format), str(target))

    logger.debug("[FORMATS] Converting '%s' from %s to %s", path, image.format, target)
    return convert_image(image, target, path=path)
