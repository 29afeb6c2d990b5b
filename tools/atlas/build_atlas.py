#!/usr/bin/env python3
"""Build a packed texture atlas from a sprite manifest."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.spriteatlas_core.atlas.bake import bake_atlas_to_file, is_bare_filename
from packages.spriteatlas_core.atlas.errors import AtlasError


def main() -> int:
    parser = argparse.ArgumentParser(description="Pack a sprite manifest into a texture atlas")
    parser.add_argument("manifest_path", type=Path, help="Path to manifest JSON")
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Output directory (default: next to the manifest)",
    )
    parser.add_argument("--name", default=None, help="Base filename for texture and layout outputs")
    parser.add_argument(
        "--asset-root",
        type=Path,
        default=None,
        help="Directory entry paths are resolved against (default: manifest folder)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Resolve source images with this many threads",
    )
    parser.add_argument("--json", action="store_true", help="Print the layout payload as JSON")
    args = parser.parse_args()

    if not args.manifest_path.exists():
        print(f"ERR: manifest not found: {args.manifest_path}")
        return 1

    if args.name is not None and not is_bare_filename(args.name):
        print(f"ERR: --name must be a bare filename: {args.name}")
        return 1

    try:
        result, payload, texture_path, layout_path = bake_atlas_to_file(
            args.manifest_path,
            out_dir=args.out_dir,
            name=args.name,
            asset_root=args.asset_root,
            max_workers=args.workers,
        )
    except AtlasError as exc:
        if args.json:
            print(json.dumps({"ok": False, **exc.to_dict()}, indent=2))
        else:
            print(f"ERROR: atlas build failed ({exc.error_code})")
            print(f"ERR: {exc}")
        return 1

    if args.json:
        print(json.dumps({"ok": True, "layout": payload}, indent=2))
        return 0

    print(f"OK: packed {len(result.layout)} region(s) into {result.width}x{result.height} {result.format.value}")
    print(f"Wrote texture to {texture_path}")
    print(f"Wrote layout to {layout_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
