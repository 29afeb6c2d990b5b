"""Manifest validation and atlas build endpoints."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from packages.spriteatlas_core.atlas.bake import bake_atlas_to_file, is_bare_filename
from packages.spriteatlas_core.atlas.errors import AtlasError
from packages.spriteatlas_core.atlas.manifest import load_manifest, parse_manifest, summarize_manifest

logger = logging.getLogger("spriteatlas_api.atlas")

router = APIRouter(prefix="/api/v1/atlas", tags=["atlas"])


def workspace_root() -> Path:
    configured = str(os.environ.get("SPRITEATLAS_WORKSPACE_ROOT") or "").strip()
    if configured:
        return Path(configured).resolve()
    return Path(__file__).resolve().parents[4]


class ValidateManifestRequest(BaseModel):
    manifest: dict[str, Any]


class ValidateManifestFileRequest(BaseModel):
    manifest_path: str = Field(description="Absolute or workspace-relative path to manifest JSON")


class BuildAtlasFileRequest(BaseModel):
    manifest_path: str = Field(description="Absolute or workspace-relative path to manifest JSON")
    out_dir: Optional[str] = Field(default=None, description="Output directory (default: manifest folder)")
    name: Optional[str] = Field(default=None, description="Base filename for texture and layout")
    asset_root: Optional[str] = Field(default=None, description="Directory entry paths resolve against")


def _resolve_workspace_path(path_str: str) -> Path:
    root = workspace_root()
    candidate = Path(path_str)
    if not candidate.is_absolute():
        candidate = (root / candidate).resolve()
    else:
        candidate = candidate.resolve()

    if candidate != root and root not in candidate.parents:
        raise HTTPException(status_code=400, detail="Path must be within workspace")
    return candidate


def _rel_workspace(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(workspace_root()))
    except ValueError:
        return str(path.resolve())


def _existing_manifest(path_str: str) -> Path:
    manifest_path = _resolve_workspace_path(path_str)
    if not manifest_path.is_file():
        logger.warning("[ATLAS] Manifest file not found: '%s'", manifest_path)
        raise HTTPException(status_code=404, detail=f"Manifest file not found: {manifest_path}")
    return manifest_path


@router.post("/validate")
def validate_manifest_inline(req: ValidateManifestRequest) -> dict[str, Any]:
    logger.info("[ATLAS] Inline manifest validation request")
    try:
        manifest = parse_manifest(req.manifest)
    except AtlasError as exc:
        logger.info("[ATLAS] Inline validation failed: %s", exc.error_code)
        return {"ok": False, "errors": [exc.to_dict()], "summary": {}}
    return {"ok": True, "errors": [], "summary": summarize_manifest(manifest)}


@router.post("/validate-file")
def validate_manifest_file(req: ValidateManifestFileRequest) -> dict[str, Any]:
    logger.info("[ATLAS] File manifest validation request: manifest_path='%s'", req.manifest_path)
    manifest_path = _existing_manifest(req.manifest_path)
    try:
        manifest = load_manifest(manifest_path)
    except AtlasError as exc:
        return {
            "ok": False,
            "manifest_path": _rel_workspace(manifest_path),
            "errors": [exc.to_dict()],
            "summary": {},
        }
    return {
        "ok": True,
        "manifest_path": _rel_workspace(manifest_path),
        "errors": [],
        "summary": summarize_manifest(manifest),
    }


@router.post("/build-file")
def build_atlas_file(req: BuildAtlasFileRequest) -> dict[str, Any]:
    logger.info("[ATLAS] Build request: manifest_path='%s', out_dir='%s'", req.manifest_path, req.out_dir)
    manifest_path = _existing_manifest(req.manifest_path)
    out_dir = _resolve_workspace_path(req.out_dir) if req.out_dir else None
    asset_root = _resolve_workspace_path(req.asset_root) if req.asset_root else None
    if req.name is not None and not is_bare_filename(req.name):
        logger.warning("[ATLAS] Rejected output name: '%s'", req.name)
        raise HTTPException(status_code=400, detail="Output name must be a bare filename")

    result, payload, texture_path, layout_path = bake_atlas_to_file(
        manifest_path,
        out_dir=out_dir,
        name=req.name,
        asset_root=asset_root,
    )
    logger.info("[ATLAS] Build complete: %dx%d, regions=%d", result.width, result.height, len(result.layout))
    return {
        "ok": True,
        "manifest_path": _rel_workspace(manifest_path),
        "texture_path": _rel_workspace(texture_path),
        "layout_path": _rel_workspace(layout_path),
        "layout": payload,
    }
