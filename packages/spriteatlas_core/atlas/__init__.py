"""Sprite atlas building primitives."""

from .bake import bake_atlas_to_file, build_layout_payload
from .builder import AtlasResult, Rect, build_atlas, emit_layout, resolve_images
from .compositor import composite
from .errors import (
    AtlasError,
    ConfigSizeError,
    FormatConversionError,
    FormatIncompatibleError,
    ImageResolutionError,
    InvalidRegionError,
    NoEntriesError,
    PackingExhaustedError,
    SchemaError,
)
from .formats import PixelFormat, SourceImage, bytes_per_pixel, normalize_image
from .images import FileImageResolver, load_source_image
from .manifest import Manifest, expected_region_count, load_manifest, parse_manifest
from .packer import PackedPlacement, PackResult, pack_descriptors
from .regions import SubImageDescriptor, derive_descriptors, flatten_descriptors

__all__ = [
    "bake_atlas_to_file",
    "build_layout_payload",
    "AtlasResult",
    "Rect",
    "build_atlas",
    "emit_layout",
    "resolve_images",
    "composite",
    "AtlasError",
    "ConfigSizeError",
    "FormatConversionError",
    "FormatIncompatibleError",
    "ImageResolutionError",
    "InvalidRegionError",
    "NoEntriesError",
    "PackingExhaustedError",
    "SchemaError",
    "PixelFormat",
    "SourceImage",
    "bytes_per_pixel",
    "normalize_image",
    "FileImageResolver",
    "load_source_image",
    "Manifest",
    "expected_region_count",
    "load_manifest",
    "parse_manifest",
    "PackedPlacement",
    "PackResult",
    "pack_descriptors",
    "SubImageDescriptor",
    "derive_descriptors",
    "flatten_descriptors",
]
