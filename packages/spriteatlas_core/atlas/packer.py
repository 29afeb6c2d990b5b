"""Single-bin rectangle packing with bounded size growth.

Boxes are placed largest-area first into a list of disjoint free sections.
Each box goes to the top-left corner of the free section that keeps the
bounding box of everything placed so far smallest. When a box does not fit,
the bin doubles per axis (clamped to ``max_size``) and packing restarts from
scratch. A bin that already equals ``max_size`` and still fails is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import Sequence

from .errors import PackingExhaustedError
from .regions import SubImageDescriptor

logger = getLogger("spriteatlas_core.atlas.packer")

Section = tuple[int, int, int, int]


@dataclass(frozen=True)
class PackedPlacement:
    """Box assigned to a descriptor; includes padding on every side."""

    x: int
    y: int
    width: int
    height: int

    def overlaps(self, other: "PackedPlacement") -> bool:
        if self.width == 0 or self.height == 0 or other.width == 0 or other.height == 0:
            return False
        return not (
            self.x + self.width <= other.x
            or other.x + other.width <= self.x
            or self.y + self.height <= other.y
            or other.y + other.height <= self.y
        )


@dataclass
class PackResult:
    width: int
    height: int
    placements: dict[SubImageDescriptor, PackedPlacement]
    attempts: list[tuple[int, int]] = field(default_factory=list)


def _split(section: Section, box_w: int, box_h: int) -> list[Section]:
    fx, fy, fw, fh = section
    # Keep whichever split leaves the single largest free section.
    if fw * (fh - box_h) >= (fw - box_w) * fh:
        right = (fx + box_w, fy, fw - box_w, box_h)
        below = (fx, fy + box_h, fw, fh - box_h)
    else:
        right = (fx + box_w, fy, fw - box_w, fh)
        below = (fx, fy + box_h, box_w, fh - box_h)
    return [s for s in (right, below) if s[2] > 0 and s[3] > 0]


def pack_into_bin(
    descriptors: Sequence[SubImageDescriptor],
    bin_size: tuple[int, int],
    padding: tuple[int, int] = (0, 0),
) -> dict[SubImageDescriptor, PackedPlacement] | None:
    """Try to place every descriptor into one bin; None when something does not fit."""
    pad_x, pad_y = padding
    free: list[Section] = [(0, 0, bin_size[0], bin_size[1])]
    used_w = 0
    used_h = 0
    placements: dict[SubImageDescriptor, PackedPlacement] = {}

    ordered = sorted(dict.fromkeys(descriptors), key=lambda d: -d.area)
    for descriptor in ordered:
        box_w = descriptor.size[0] + 2 * pad_x
        box_h = descriptor.size[1] + 2 * pad_y

        if box_w == 0 or box_h == 0:
            placements[descriptor] = PackedPlacement(0, 0, box_w, box_h)
            continue

        best: tuple[tuple[int, int], int] | None = None
        for idx, (fx, fy, fw, fh) in enumerate(free):
            if box_w > fw or box_h > fh:
                continue
            ext_w = max(used_w, fx + box_w)
            ext_h = max(used_h, fy + box_h)
            score = (ext_w * ext_h, max(ext_w, ext_h))
            if best is None or score < best[0]:
                best = (score, idx)

        if best is None:
            logger.debug(
                "[PACKER] No room for %dx%d box in %dx%d bin",
                box_w, box_h, bin_size[0], bin_size[1],
            )
            return None

        idx = best[1]
        section = free.pop(idx)
        free[idx:idx] = _split(section, box_w, box_h)
        placements[descriptor] = PackedPlacement(section[0], section[1], box_w, box_h)
        used_w = max(used_w, section[0] + box_w)
        used_h = max(used_h, section[1] + box_h)

    return placements


def next_bin_size(current: tuple[int, int], max_size: tuple[int, int]) -> tuple[int, int]:
    return (min(current[0] * 2, max_size[0]), min(current[1] * 2, max_size[1]))


def pack_descriptors(
    descriptors: Sequence[SubImageDescriptor],
    *,
    initial_size: tuple[int, int],
    max_size: tuple[int, int],
    padding: tuple[int, int] = (0, 0),
) -> PackResult:
    bin_size = (int(initial_size[0]), int(initial_size[1]))
    max_size = (int(max_size[0]), int(max_size[1]))
    attempts: list[tuple[int, int]] = []
    unique_count = len(set(descriptors))

    while True:
        attempts.append(bin_size)
        logger.debug("[PACKER] Attempt %d: %dx%d bin for %d region(s)",
                     len(attempts), bin_size[0], bin_size[1], unique_count)
        placements = pack_into_bin(descriptors, bin_size, padding)
        if placements is not None:
            logger.info("[PACKER] Packed %d region(s) into %dx%d after %d attempt(s)",
                        unique_count, bin_size[0], bin_size[1], len(attempts))
            return PackResult(bin_size[0], bin_size[1], placements, attempts)

        if bin_size[0] >= max_size[0] and bin_size[1] >= max_size[1]:
            logger.warning("[PACKER] Packing exhausted at max size %dx%d: regions=%d",
                           bin_size[0], bin_size[1], unique_count)
            raise PackingExhaustedError(attempts, unique_count)

        bin_size = next_bin_size(bin_size, max_size)
