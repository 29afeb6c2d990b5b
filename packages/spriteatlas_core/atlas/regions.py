"""Expansion of manifest entries into packable sub-image descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Iterable, Sequence

from .errors import InvalidRegionError
from .manifest import Entry, HeterogeneousSheet, HomogeneousSheet

logger = getLogger("spriteatlas_core.atlas.regions")


@dataclass(frozen=True, order=True)
class SubImageDescriptor:
    """One region of one source image, in source pixel coordinates."""

    source_index: int
    position: tuple[int, int]
    size: tuple[int, int]

    @property
    def area(self) -> int:
        return self.size[0] * self.size[1]

    def fits_within(self, image_size: tuple[int, int]) -> bool:
        return (
            self.position[0] + self.size[0] <= image_size[0]
            and self.position[1] + self.size[1] <= image_size[1]
        )


def _validated(
    entry: Entry,
    source_index: int,
    position: tuple[int, int],
    size: tuple[int, int],
    image_size: tuple[int, int],
) -> SubImageDescriptor:
    descriptor = SubImageDescriptor(source_index=source_index, position=tuple(position), size=tuple(size))
    if not descriptor.fits_within(image_size):
        logger.warning(
            "[REGIONS] Region out of bounds: path='%s', position=%s, size=%s, image=%s",
            entry.path, position, size, image_size,
        )
        raise InvalidRegionError(entry.path, tuple(position), tuple(size), tuple(image_size))
    return descriptor


def grid_positions(sheet: HomogeneousSheet) -> Iterable[tuple[int, int]]:
    """Yield top-left corners of grid cells, row by row.

    Tiles are separated by a full ``padding`` gutter, with half of it before
    the first tile.
    """
    tile_w, tile_h = sheet.tile_size
    pad_x, pad_y = sheet.padding
    off_x, off_y = sheet.offset
    for i in range(sheet.rows):
        for j in range(sheet.columns):
            x = j * tile_w + off_x + (1 + 2 * j) * pad_x
            y = i * tile_h + off_y + (1 + 2 * i) * pad_y
            yield x, y


def derive_descriptors(
    entry: Entry,
    source_index: int,
    image_size: tuple[int, int],
) -> list[SubImageDescriptor]:
    sheet = entry.sprite_sheet
    out: list[SubImageDescriptor] = []

    if isinstance(sheet, HomogeneousSheet):
        for position in grid_positions(sheet):
            out.append(_validated(entry, source_index, position, sheet.tile_size, image_size))
    elif isinstance(sheet, HeterogeneousSheet):
        for position, size in sheet.regions:
            out.append(_validated(entry, source_index, position, size, image_size))
    else:
        out.append(SubImageDescriptor(source_index=source_index, position=(0, 0), size=tuple(image_size)))

    logger.debug(
        "[REGIONS] Derived %d region(s) for '%s' (%s)",
        len(out), entry.path, sheet.kind,
    )
    return out


def flatten_descriptors(
    entries: Sequence[Entry],
    image_sizes: Sequence[tuple[int, int]],
) -> list[SubImageDescriptor]:
    """Descriptors of all entries, in entry order then within-entry order."""
    out: list[SubImageDescriptor] = []
    for index, (entry, image_size) in enumerate(zip(entries, image_sizes)):
        out.extend(derive_descriptors(entry, index, image_size))
    return out
