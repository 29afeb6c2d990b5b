#!/usr/bin/env python3
"""Render a compact ASCII preview of a baked atlas layout."""

from __future__ import annotations

import argparse
import json
import string
from pathlib import Path

MARKERS = string.digits + string.ascii_letters


def render_layout(payload: dict, scale: int) -> list[str]:
    texture = payload["texture"]
    cols = max(1, -(-int(texture["width"]) // scale))
    rows = max(1, -(-int(texture["height"]) // scale))
    canvas = [["." for _ in range(cols)] for _ in range(rows)]

    for region in payload.get("regions", []):
        marker = MARKERS[int(region["index"]) % len(MARKERS)]
        (min_x, min_y), (max_x, max_y) = region["rect"]["min"], region["rect"]["max"]
        for y in range(min_y // scale, min(rows, -(-max_y // scale))):
            for x in range(min_x // scale, min(cols, -(-max_x // scale))):
                canvas[y][x] = marker
    return ["".join(row) for row in canvas]


def main() -> int:
    parser = argparse.ArgumentParser(description="Preview an atlas layout as ASCII")
    parser.add_argument("layout_path", type=Path)
    parser.add_argument("--scale", type=int, default=16, help="Atlas pixels per character")
    args = parser.parse_args()

    payload = json.loads(args.layout_path.read_text(encoding="utf-8"))
    texture = payload["texture"]

    print(f"Layout: {args.layout_path}")
    print(f"Texture: {texture['file']} {texture['width']}x{texture['height']} {texture['pixel_format']}")
    print(f"Legend: . empty, 0-9a-zA-Z region index (mod {len(MARKERS)}), 1 char = {args.scale}px")
    for row in render_layout(payload, max(1, args.scale)):
        print(row)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
