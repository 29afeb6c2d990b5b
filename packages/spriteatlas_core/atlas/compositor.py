"""Row-by-row copy of source regions into the atlas pixel buffer."""

from __future__ import annotations

from logging import getLogger
from typing import Mapping, Sequence

from .formats import PixelFormat, SourceImage, bytes_per_pixel
from .packer import PackedPlacement
from .regions import SubImageDescriptor

logger = getLogger("spriteatlas_core.atlas.compositor")


def copy_region(
    atlas: bytearray,
    atlas_width: int,
    image: SourceImage,
    descriptor: SubImageDescriptor,
    dest: tuple[int, int],
    bpp: int,
) -> None:
    src_x, src_y = descriptor.position
    region_w, region_h = descriptor.size
    dest_x, dest_y = dest
    row_bytes = region_w * bpp
    src = memoryview(image.pixels)
    dst = memoryview(atlas)

    for i in range(region_h):
        src_begin = ((src_y + i) * image.width + src_x) * bpp
        dst_begin = ((dest_y + i) * atlas_width + dest_x) * bpp
        dst[dst_begin:dst_begin + row_bytes] = src[src_begin:src_begin + row_bytes]


def composite(
    width: int,
    height: int,
    pixel_format: PixelFormat,
    images: Sequence[SourceImage],
    placements: Mapping[SubImageDescriptor, PackedPlacement],
    padding: tuple[int, int] = (0, 0),
) -> bytes:
    """Return a ``width`` x ``height`` buffer with every placed region copied in.

    Every image must already be in ``pixel_format``. Padding around each
    region is left zeroed.
    """
    bpp = bytes_per_pixel(pixel_format)
    atlas = bytearray(width * height * bpp)
    pad_x, pad_y = padding

    for descriptor, placement in placements.items():
        image = images[descriptor.source_index]
        copy_region(
            atlas,
            width,
            image,
            descriptor,
            (placement.x + pad_x, placement.y + pad_y),
            bpp,
        )

    logger.debug("[COMPOSITOR] Composited %d region(s) into %dx%d %s buffer",
                 len(placements), width, height, pixel_format)
    return bytes(atlas)
