"""Write a built atlas to disk as a texture file plus a layout JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .builder import AtlasResult, build_atlas
from .formats import is_convertible
from .images import FileImageResolver, atlas_to_pil, default_resolve_workers
from .manifest import load_manifest, manifest_sha256

logger = logging.getLogger("spriteatlas_core.atlas.bake")

LAYOUT_FORMAT = "spriteatlas-layout-v1"


def texture_suffix(result: AtlasResult) -> str:
    return ".png" if is_convertible(result.format) else ".raw"


def build_layout_payload(
    result: AtlasResult,
    *,
    source_manifest_file: str = "<inline>",
    source_sha256: str | None = None,
    texture_file: str | None = None,
) -> dict[str, Any]:
    regions = []
    for index, (descriptor, rect) in enumerate(zip(result.descriptors, result.layout)):
        regions.append(
            {
                "index": index,
                "entry_index": descriptor.source_index,
                "entry_path": result.entry_paths[index] if index < len(result.entry_paths) else None,
                "source": {
                    "position": list(descriptor.position),
                    "size": list(descriptor.size),
                },
                "rect": rect.as_dict(),
            }
        )

    return {
        "format": LAYOUT_FORMAT,
        "source": {
            "manifest_file": source_manifest_file,
            "sha256": source_sha256,
        },
        "texture": {
            "file": texture_file,
            "width": result.width,
            "height": result.height,
            "pixel_format": result.format.value,
        },
        "packing": {
            "packed": result.packed,
            "attempts": [list(size) for size in result.attempts],
        },
        "regions": regions,
    }


def write_texture(result: AtlasResult, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if is_convertible(result.format):
        atlas_to_pil(result.pixels, result.width, result.height, result.format).save(out_path, format="PNG")
    else:
        out_path.write_bytes(result.pixels)
    return out_path


def is_bare_filename(name: str) -> bool:
    return bool(name) and name not in {".", ".."} and "/" not in name and "\\" not in name and Path(name).name == name


def _output_path(target_dir: Path, filename: str) -> Path:
    if not is_bare_filename(filename):
        raise ValueError(f"Output name must be a bare filename: {filename!r}")
    target = (target_dir / filename).resolve()
    if target.parent != target_dir.resolve():
        raise ValueError(f"Output path escapes output directory: {filename!r}")
    return target_dir / filename


def bake_atlas_to_file(
    manifest_path: Path,
    *,
    out_dir: Path | None = None,
    name: str | None = None,
    asset_root: Path | None = None,
    max_workers: int | None = None,
) -> tuple[AtlasResult, dict[str, Any], Path, Path]:
    """Build the manifest at ``manifest_path`` and write ``<name>.png`` + ``<name>.layout.json``.

    Entry paths resolve against ``asset_root`` (default: the manifest's folder).
    Outputs land in ``out_dir`` (default: next to the manifest).
    """
    logger.info("[BAKE] Baking atlas: manifest='%s', out_dir='%s'", manifest_path, out_dir)
    if name is not None and not is_bare_filename(name):
        raise ValueError(f"Output name must be a bare filename: {name!r}")
    manifest = load_manifest(manifest_path)
    resolver = FileImageResolver(asset_root or manifest_path.parent)
    workers = max_workers if max_workers is not None else default_resolve_workers()

    result = build_atlas(manifest, resolver, max_workers=workers)

    stem = name or manifest_path.name.split(".")[0]
    target_dir = out_dir or manifest_path.parent
    texture_path = _output_path(target_dir, f"{stem}{texture_suffix(result)}")
    layout_path = _output_path(target_dir, f"{stem}.layout.json")

    write_texture(result, texture_path)
    payload = build_layout_payload(
        result,
        source_manifest_file=str(manifest_path),
        source_sha256=manifest_sha256(manifest_path),
        texture_file=texture_path.name,
    )
    layout_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    logger.info("[BAKE] Atlas written: texture='%s', layout='%s', %dx%d, regions=%d",
                texture_path, layout_path, result.width, result.height, len(result.layout))
    return result, payload, texture_path, layout_path
