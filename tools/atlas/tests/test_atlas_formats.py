#!/usr/bin/env python3

from __future__ import annotations

import unittest

from packages.spriteatlas_core.atlas.errors import FormatConversionError, FormatIncompatibleError
from packages.spriteatlas_core.atlas.formats import (
    PixelFormat,
    SourceImage,
    bytes_per_pixel,
    convert_image,
    normalize_image,
)

RGBA_PIXELS = bytes([10, 20, 30, 40, 50, 60, 70, 80])


def _rgba(fmt: PixelFormat = PixelFormat.RGBA8_UNORM_SRGB) -> SourceImage:
    return SourceImage(pixels=RGBA_PIXELS, width=2, height=1, format=fmt)


class FormatNormalizerTests(unittest.TestCase):
    def test_bytes_per_pixel(self) -> None:
        self.assertEqual(bytes_per_pixel(PixelFormat.R8_UNORM), 1)
        self.assertEqual(bytes_per_pixel(PixelFormat.RG8_UNORM), 2)
        self.assertEqual(bytes_per_pixel(PixelFormat.RGBA8_UNORM_SRGB), 4)
        self.assertEqual(bytes_per_pixel(PixelFormat.RGBA32_FLOAT), 16)

    def test_matching_format_passes_through(self) -> None:
        image = _rgba()
        self.assertIs(normalize_image(image, PixelFormat.RGBA8_UNORM_SRGB, auto_convert=False), image)

    def test_mismatch_without_conversion_is_incompatible(self) -> None:
        with self.assertRaises(FormatIncompatibleError) as ctx:
            normalize_image(_rgba(), PixelFormat.BGRA8_UNORM, auto_convert=False, path="hero.png")
        self.assertEqual(ctx.exception.path, "hero.png")
        self.assertEqual(ctx.exception.source_format, "Rgba8UnormSrgb")
        self.assertEqual(ctx.exception.target_format, "Bgra8Unorm")

    def test_srgb_flag_change_keeps_bytes(self) -> None:
        out = normalize_image(_rgba(PixelFormat.RGBA8_UNORM), PixelFormat.RGBA8_UNORM_SRGB, auto_convert=True)
        self.assertEqual(out.format, PixelFormat.RGBA8_UNORM_SRGB)
        self.assertEqual(out.pixels, RGBA_PIXELS)

    def test_rgba_to_bgra_swaps_channels(self) -> None:
        out = normalize_image(_rgba(), PixelFormat.BGRA8_UNORM_SRGB, auto_convert=True)
        self.assertEqual(out.pixels, bytes([30, 20, 10, 40, 70, 60, 50, 80]))
        back = convert_image(out, PixelFormat.RGBA8_UNORM_SRGB)
        self.assertEqual(back.pixels, RGBA_PIXELS)

    def test_gray_to_rgba(self) -> None:
        gray = SourceImage(pixels=bytes([0, 200]), width=2, height=1, format=PixelFormat.R8_UNORM)
        out = normalize_image(gray, PixelFormat.RGBA8_UNORM_SRGB, auto_convert=True)
        self.assertEqual(out.pixels, bytes([0, 0, 0, 255, 200, 200, 200, 255]))

    def test_rgba_to_gray_alpha(self) -> None:
        white = SourceImage(pixels=bytes([255, 255, 255, 128]), width=1, height=1, format=PixelFormat.RGBA8_UNORM)
        out = normalize_image(white, PixelFormat.RG8_UNORM, auto_convert=True)
        self.assertEqual(out.pixels, bytes([255, 128]))
        self.assertEqual(out.size, (1, 1))

    def test_float_formats_fail_conversion(self) -> None:
        image = SourceImage(pixels=bytes(16), width=1, height=1, format=PixelFormat.RGBA32_FLOAT)
        with self.assertRaises(FormatConversionError) as ctx:
            normalize_image(image, PixelFormat.RGBA8_UNORM_SRGB, auto_convert=True, path="hdr.exr")
        self.assertEqual(ctx.exception.error_code, "format_conversion")
        self.assertEqual(ctx.exception.path, "hdr.exr")

    def test_conversion_into_unsupported_target_fails(self) -> None:
        with self.assertRaises(FormatConversionError):
            normalize_image(_rgba(), PixelFormat.R16_UNORM, auto_convert=True)


if __name__ == "__main__":
    unittest.main()
