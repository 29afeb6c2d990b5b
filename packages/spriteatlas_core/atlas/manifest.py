"""Typed manifest model for atlas builds.

Manifests are JSON documents. Sprite-sheet variants use the externally tagged
shape written by hand in manifest files::

    {"path": "hero.png", "sprite_sheet": "None"}
    {"path": "run.png", "sprite_sheet": {"Homogeneous": {"tile_size": [24, 24], "columns": 7, "rows": 1}}}
    {"path": "ui.png", "sprite_sheet": {"Heterogeneous": [[[0, 0], [16, 16]], [[16, 0], [8, 8]]]}}

The internally tagged form (``{"kind": "Homogeneous", ...}``) is accepted too.
"""

from __future__ import annotations

import hashlib
import json
from logging import getLogger
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigSizeError, NoEntriesError, SchemaError
from .formats import DEFAULT_FORMAT, PixelFormat

logger = getLogger("spriteatlas_core.atlas.manifest")

UInt = Annotated[int, Field(ge=0)]
PositiveInt = Annotated[int, Field(ge=1)]
Size = tuple[UInt, UInt]
NonEmptySize = tuple[PositiveInt, PositiveInt]

SPRITE_SHEET_KINDS = ("None", "Homogeneous", "Heterogeneous")


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Configuration(_Model):
    always_pack: bool = False
    initial_size: NonEmptySize = (256, 256)
    max_size: NonEmptySize = (2048, 2048)
    format: PixelFormat = DEFAULT_FORMAT
    auto_format_conversion: bool = True
    padding: Size = (0, 0)


class NoneSheet(_Model):
    kind: Literal["None"] = "None"


class HomogeneousSheet(_Model):
    kind: Literal["Homogeneous"] = "Homogeneous"
    tile_size: Size
    columns: UInt
    rows: UInt
    padding: Size = (0, 0)
    offset: Size = (0, 0)


class HeterogeneousSheet(_Model):
    kind: Literal["Heterogeneous"] = "Heterogeneous"
    regions: list[tuple[Size, Size]]


SpriteSheet = Annotated[
    Union[NoneSheet, HomogeneousSheet, HeterogeneousSheet],
    Field(discriminator="kind"),
]


def _untag_sprite_sheet(raw: Any) -> Any:
    if raw is None or raw == "None":
        return {"kind": "None"}
    if isinstance(raw, dict) and "kind" not in raw and len(raw) == 1:
        tag, body = next(iter(raw.items()))
        if tag == "None":
            return {"kind": "None"}
        if tag == "Homogeneous" and isinstance(body, dict):
            return {"kind": "Homogeneous", **body}
        if tag == "Heterogeneous":
            return {"kind": "Heterogeneous", "regions": body}
    return raw


class Entry(_Model):
    path: str
    sprite_sheet: SpriteSheet = Field(default_factory=NoneSheet)

    @field_validator("sprite_sheet", mode="before")
    @classmethod
    def _accept_tagged_variants(cls, value: Any) -> Any:
        return _untag_sprite_sheet(value)

    def region_count(self) -> int:
        sheet = self.sprite_sheet
        if isinstance(sheet, HomogeneousSheet):
            return sheet.columns * sheet.rows
        if isinstance(sheet, HeterogeneousSheet):
            return len(sheet.regions)
        return 1


class Manifest(_Model):
    configuration: Configuration = Field(default_factory=Configuration)
    textures: list[Entry]


def _format_validation_errors(exc: ValidationError) -> list[str]:
    out: list[str] = []
    for item in exc.errors():
        loc = ".".join(str(part) for part in item.get("loc", ()))
        out.append(f"{loc or '<root>'}: {item.get('msg', 'invalid value')}")
    return out


def parse_manifest(raw: Any) -> Manifest:
    """Build a Manifest from decoded JSON data, applying defaults and checks."""
    try:
        manifest = Manifest.model_validate(raw)
    except ValidationError as exc:
        errors = _format_validation_errors(exc)
        logger.warning("[MANIFEST] Schema validation failed: %s", errors)
        raise SchemaError("Manifest does not match schema: " + "; ".join(errors), errors=errors) from exc

    if not manifest.textures:
        logger.warning("[MANIFEST] Manifest has no texture entries")
        raise NoEntriesError()

    config = manifest.configuration
    if config.max_size[0] < config.initial_size[0] or config.max_size[1] < config.initial_size[1]:
        logger.warning(
            "[MANIFEST] max_size %s smaller than initial_size %s",
            config.max_size, config.initial_size,
        )
        raise ConfigSizeError(config.initial_size, config.max_size)

    logger.debug(
        "[MANIFEST] Parsed manifest: entries=%d, format=%s, initial=%s, max=%s",
        len(manifest.textures), config.format, config.initial_size, config.max_size,
    )
    return manifest


def load_manifest(path: Path) -> Manifest:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SchemaError(f"Invalid manifest JSON in {path}: {exc}", errors=[str(exc)]) from exc
    return parse_manifest(raw)


def manifest_sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def expected_region_count(manifest: Manifest) -> int:
    return sum(entry.region_count() for entry in manifest.textures)


def summarize_manifest(manifest: Manifest) -> dict[str, Any]:
    config = manifest.configuration
    kinds = {kind: 0 for kind in SPRITE_SHEET_KINDS}
    for entry in manifest.textures:
        kinds[entry.sprite_sheet.kind] += 1
    return {
        "entries": len(manifest.textures),
        "regions": expected_region_count(manifest),
        "sprite_sheets": kinds,
        "configuration": {
            "always_pack": config.always_pack,
            "initial_size": list(config.initial_size),
            "max_size": list(config.max_size),
            "format": config.format.value,
            "auto_format_conversion": config.auto_format_conversion,
            "padding": list(config.padding),
        },
    }
