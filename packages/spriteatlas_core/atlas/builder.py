"""End-to-end atlas build: resolve, derive, normalize, pack, composite, emit."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import Any, Callable, Mapping, Sequence, Union

from .compositor import composite
from .errors import AtlasError, ImageResolutionError
from .formats import PixelFormat, SourceImage, normalize_image
from .manifest import Entry, Manifest
from .packer import PackedPlacement, pack_descriptors
from .regions import SubImageDescriptor, flatten_descriptors

logger = getLogger("spriteatlas_core.atlas.builder")

ResolvedImage = Union[SourceImage, tuple[bytes, int, int, Union[PixelFormat, str]]]
ImageResolver = Callable[[str], ResolvedImage]


@dataclass(frozen=True)
class Rect:
    """Atlas-local pixel rectangle, ``max`` exclusive."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def as_dict(self) -> dict[str, Any]:
        return {"min": [self.min_x, self.min_y], "max": [self.max_x, self.max_y]}


@dataclass(frozen=True)
class AtlasResult:
    pixels: bytes
    width: int
    height: int
    format: PixelFormat
    layout: tuple[Rect, ...]
    descriptors: tuple[SubImageDescriptor, ...] = ()
    entry_paths: tuple[str, ...] = ()
    packed: bool = True
    attempts: tuple[tuple[int, int], ...] = field(default=())


def _coerce_resolved(path: str, resolved: ResolvedImage) -> SourceImage:
    try:
        if isinstance(resolved, SourceImage):
            image = replace(resolved, pixels=bytes(resolved.pixels), format=PixelFormat(resolved.format))
        else:
            pixels, width, height, pixel_format = resolved
            image = SourceImage(
                pixels=bytes(pixels),
                width=int(width),
                height=int(height),
                format=PixelFormat(pixel_format),
            )
    except (TypeError, ValueError) as exc:
        raise ImageResolutionError(path, f"resolver returned an unusable value: {exc}") from exc

    if image.width < 0 or image.height < 0 or len(image.pixels) != image.expected_length():
        raise ImageResolutionError(
            path,
            f"pixel buffer has {len(image.pixels)} bytes, expected {max(image.expected_length(), 0)} "
            f"for {image.width}x{image.height} {image.format}",
        )
    return image


def _resolve_one(resolver: ImageResolver, path: str) -> SourceImage:
    try:
        resolved = resolver(path)
    except AtlasError:
        raise
    except Exception as exc:
        logger.warning("[BUILDER] Image resolver failed for '%s': %s", path, exc)
        raise ImageResolutionError(path, str(exc) or type(exc).__name__) from exc
    return _coerce_resolved(path, resolved)


def resolve_images(
    entries: Sequence[Entry],
    resolver: ImageResolver,
    *,
    max_workers: int | None = None,
) -> list[SourceImage]:
    """Resolve every entry's image, in entry order."""
    paths = [entry.path for entry in entries]
    if not max_workers or max_workers <= 1 or len(paths) <= 1:
        return [_resolve_one(resolver, path) for path in paths]

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="atlas-resolve") as pool:
        futures = [pool.submit(_resolve_one, resolver, path) for path in paths]
        return [future.result() for future in futures]


def emit_layout(
    descriptors: Sequence[SubImageDescriptor],
    placements: Mapping[SubImageDescriptor, PackedPlacement],
    padding: tuple[int, int] = (0, 0),
) -> list[Rect]:
    pad_x, pad_y = padding
    out: list[Rect] = []
    for descriptor in descriptors:
        placement = placements[descriptor]
        min_x = placement.x + pad_x
        min_y = placement.y + pad_y
        out.append(Rect(min_x, min_y, min_x + descriptor.size[0], min_y + descriptor.size[1]))
    return out


def _bypass_layout(descriptor: SubImageDescriptor) -> Rect:
    x, y = descriptor.position
    return Rect(x, y, x + descriptor.size[0], y + descriptor.size[1])


def build_atlas(
    manifest: Manifest,
    image_resolver: ImageResolver,
    *,
    max_workers: int | None = None,
) -> AtlasResult:
    """Build the atlas described by ``manifest``.

    ``image_resolver(path)`` returns a :class:`SourceImage` or a
    ``(pixels, width, height, format)`` tuple. Any failure raises an
    :class:`AtlasError`; no partial atlas is ever returned.
    """
    config = manifest.configuration
    entries = manifest.textures
    logger.info("[BUILDER] Building atlas: entries=%d, format=%s", len(entries), config.format)

    images = resolve_images(entries, image_resolver, max_workers=max_workers)
    descriptors = flatten_descriptors(entries, [image.size for image in images])

    normalized = [
        normalize_image(
            image,
            config.format,
            auto_convert=config.auto_format_conversion,
            path=entry.path,
        )
        for entry, image in zip(entries, images)
    ]
    entry_paths = tuple(entries[d.source_index].path for d in descriptors)

    if len(descriptors) == 1 and not config.always_pack:
        descriptor = descriptors[0]
        image = normalized[descriptor.source_index]
        logger.info("[BUILDER] Single region, using '%s' directly as %dx%d atlas",
                    entries[descriptor.source_index].path, image.width, image.height)
        return AtlasResult(
            pixels=image.pixels,
            width=image.width,
            height=image.height,
            format=config.format,
            layout=(_bypass_layout(descriptor),),
            descriptors=tuple(descriptors),
            entry_paths=entry_paths,
            packed=False,
        )

    packed = pack_descriptors(
        descriptors,
        initial_size=config.initial_size,
        max_size=config.max_size,
        padding=config.padding,
    )
    pixels = composite(
        packed.width,
        packed.height,
        config.format,
        normalized,
        packed.placements,
        config.padding,
    )
    layout = emit_layout(descriptors, packed.placements, config.padding)

    logger.info("[BUILDER] Atlas built: %dx%d, regions=%d, attempts=%d",
                packed.width, packed.height, len(layout), len(packed.attempts))
    return AtlasResult(
        pixels=pixels,
        width=packed.width,
        height=packed.height,
        format=config.format,
        layout=tuple(layout),
        descriptors=tuple(descriptors),
        entry_paths=entry_paths,
        packed=True,
        attempts=tuple(packed.attempts),
    )
