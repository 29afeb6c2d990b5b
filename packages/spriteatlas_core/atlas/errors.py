"""Error taxonomy for atlas builds.

Every error is terminal for the build that raised it. Each carries a stable
``error_code`` plus a ``context`` dict so callers can render an actionable
message without parsing strings.
"""

from __future__ import annotations

from typing import Any


class AtlasError(RuntimeError):
    def __init__(self, message: str, *, error_code: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "error_code": self.error_code,
            "context": self.context,
        }


class SchemaError(AtlasError):
    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message, error_code="schema_error", context={"errors": list(errors or [])})
        self.errors = list(errors or [])


class NoEntriesError(AtlasError):
    def __init__(self) -> None:
        super().__init__("Manifest has no texture entries", error_code="no_entries")


class ConfigSizeError(AtlasError):
    def __init__(self, initial_size: tuple[int, int], max_size: tuple[int, int]) -> None:
        super().__init__(
            f"max_size {max_size[0]}x{max_size[1]} is smaller than "
            f"initial_size {initial_size[0]}x{initial_size[1]}",
            error_code="config_size",
            context={"initial_size": list(initial_size), "max_size": list(max_size)},
        )
        self.initial_size = initial_size
        self.max_size = max_size


class ImageResolutionError(AtlasError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Could not resolve image '{path}': {reason}",
            error_code="image_resolution",
            context={"path": path, "reason": reason},
        )
        self.path = path


class InvalidRegionError(AtlasError):
    def __init__(
        self,
        path: str,
        position: tuple[int, int],
        size: tuple[int, int],
        image_size: tuple[int, int],
    ) -> None:
        super().__init__(
            f"Region with position {position} and size {size} exceeds "
            f"image '{path}' of size {image_size}",
            error_code="invalid_region",
            context={
                "path": path,
                "position": list(position),
                "size": list(size),
                "image_size": list(image_size),
            },
        )
        self.path = path
        self.position = position
        self.size = size
        self.image_size = image_size


class FormatIncompatibleError(AtlasError):
    def __init__(self, path: str, source: str, target: str) -> None:
        super().__init__(
            f"Placing texture '{path}' of format {source} into atlas of format {target}",
            error_code="format_incompatible",
            context={"path": path, "source_format": source, "target_format": target},
        )
        self.path = path
        self.source_format = source
        self.target_format = target


class FormatConversionError(AtlasError):
    def __init__(self, path: str, source: str, target: str) -> None:
        super().__init__(
            f"Pixel format conversion failed for '{path}': {source} to {target}",
            error_code="format_conversion",
            context={"path": path, "source_format": source, "target_format": target},
        )
        self.path = path
        self.source_format = source
        self.target_format = target


class PackingExhaustedError(AtlasError):
    def __init__(self, attempted_sizes: list[tuple[int, int]], region_count: int) -> None:
        last = attempted_sizes[-1] if attempted_sizes else (0, 0)
        super().__init__(
            f"Could not pack {region_count} region(s) into an atlas of at most {last[0]}x{last[1]}",
            error_code="packing_exhausted",
            context={
                "attempted_sizes": [list(size) for size in attempted_sizes],
                "region_count": region_count,
            },
        )
        self.attempted_sizes = list(attempted_sizes)
        self.region_count = region_count
