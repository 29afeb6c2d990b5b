#!/usr/bin/env python3
"""Validate a sprite manifest without writing any output."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.spriteatlas_core.atlas.builder import build_atlas
from packages.spriteatlas_core.atlas.errors import AtlasError
from packages.spriteatlas_core.atlas.images import FileImageResolver, default_resolve_workers
from packages.spriteatlas_core.atlas.manifest import load_manifest, summarize_manifest


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a sprite manifest JSON")
    parser.add_argument("manifest_path", type=Path, help="Path to manifest JSON")
    parser.add_argument(
        "--check-images",
        action="store_true",
        help="Also load source images and run a full build in memory",
    )
    parser.add_argument(
        "--asset-root",
        type=Path,
        default=None,
        help="Directory entry paths are resolved against (default: manifest folder)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable JSON output",
    )
    args = parser.parse_args()

    errors: list[dict[str, object]] = []
    summary: dict[str, object] = {}
    try:
        manifest = load_manifest(args.manifest_path)
        summary = summarize_manifest(manifest)
        if args.check_images:
            result = build_atlas(
                manifest,
                FileImageResolver(args.asset_root or args.manifest_path.parent),
                max_workers=default_resolve_workers(),
            )
            summary["atlas"] = {
                "width": result.width,
                "height": result.height,
                "packed": result.packed,
            }
    except AtlasError as exc:
        errors.append(exc.to_dict())
    except FileNotFoundError as exc:
        errors.append({"detail": str(exc), "error_code": "not_found", "context": {}})

    payload = {
        "ok": len(errors) == 0,
        "errors": errors,
        "summary": summary,
    }

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        if payload["ok"]:
            print("OK: manifest validation passed")
        else:
            print("ERROR: manifest validation failed")

        for error in errors:
            print(f"ERR: [{error['error_code']}] {error['detail']}")

        if summary:
            print("Summary:")
            print(json.dumps(summary, indent=2))

    return 0 if payload["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
