#!/usr/bin/env python3

from __future__ import annotations

import unittest

from packages.spriteatlas_core.atlas.errors import InvalidRegionError
from packages.spriteatlas_core.atlas.manifest import Entry
from packages.spriteatlas_core.atlas.regions import (
    SubImageDescriptor,
    derive_descriptors,
    flatten_descriptors,
)


def _entry(path: str, sprite_sheet: object = "None") -> Entry:
    return Entry.model_validate({"path": path, "sprite_sheet": sprite_sheet})


class DeriveDescriptorsTests(unittest.TestCase):
    def test_none_covers_whole_image(self) -> None:
        descriptors = derive_descriptors(_entry("hero.png"), 3, (40, 20))
        self.assertEqual(descriptors, [SubImageDescriptor(3, (0, 0), (40, 20))])

    def test_homogeneous_single_row(self) -> None:
        entry = _entry(
            "run.png",
            {"Homogeneous": {"tile_size": [24, 24], "columns": 7, "rows": 1}},
        )
        descriptors = derive_descriptors(entry, 0, (168, 24))

        self.assertEqual(len(descriptors), 7)
        self.assertEqual([d.position for d in descriptors], [(24 * j, 0) for j in range(7)])
        self.assertTrue(all(d.size == (24, 24) for d in descriptors))

    def test_homogeneous_padding_and_offset(self) -> None:
        entry = _entry(
            "grid.png",
            {
                "Homogeneous": {
                    "tile_size": [10, 8],
                    "columns": 2,
                    "rows": 2,
                    "padding": [1, 2],
                    "offset": [3, 4],
                }
            },
        )
        descriptors = derive_descriptors(entry, 0, (100, 100))

        # Row-major: (row 0, col 0), (row 0, col 1), (row 1, col 0), (row 1, col 1).
        self.assertEqual(
            [d.position for d in descriptors],
            [(4, 6), (16, 6), (4, 18), (16, 18)],
        )

    def test_homogeneous_grid_touching_image_edge_is_valid(self) -> None:
        entry = _entry(
            "grid.png",
            {"Homogeneous": {"tile_size": [8, 8], "columns": 2, "rows": 1, "padding": [1, 0]}},
        )
        # Last tile spans x in [1*8 + 3*1, 19 + 8) = [11, 19).
        descriptors = derive_descriptors(entry, 0, (19, 8))
        self.assertEqual(descriptors[-1].position, (11, 0))

    def test_heterogeneous_regions_are_verbatim(self) -> None:
        entry = _entry(
            "ui.png",
            {"Heterogeneous": [[[5, 5], [10, 2]], [[0, 0], [4, 4]], [[5, 5], [10, 2]]]},
        )
        descriptors = derive_descriptors(entry, 1, (32, 32))
        self.assertEqual(
            descriptors,
            [
                SubImageDescriptor(1, (5, 5), (10, 2)),
                SubImageDescriptor(1, (0, 0), (4, 4)),
                SubImageDescriptor(1, (5, 5), (10, 2)),
            ],
        )

    def test_heterogeneous_out_of_bounds_names_entry(self) -> None:
        entry = _entry("ui.png", {"Heterogeneous": [[[0, 0], [4, 4]], [[30, 0], [4, 4]]]})
        with self.assertRaises(InvalidRegionError) as ctx:
            derive_descriptors(entry, 0, (32, 32))

        err = ctx.exception
        self.assertEqual(err.path, "ui.png")
        self.assertEqual(err.position, (30, 0))
        self.assertEqual(err.size, (4, 4))
        self.assertEqual(err.context["image_size"], [32, 32])

    def test_homogeneous_out_of_bounds_is_not_clamped(self) -> None:
        entry = _entry(
            "run.png",
            {"Homogeneous": {"tile_size": [24, 24], "columns": 8, "rows": 1}},
        )
        with self.assertRaises(InvalidRegionError) as ctx:
            derive_descriptors(entry, 0, (168, 24))
        self.assertEqual(ctx.exception.position, (168, 0))

    def test_empty_grid_yields_nothing(self) -> None:
        entry = _entry("run.png", {"Homogeneous": {"tile_size": [24, 24], "columns": 0, "rows": 3}})
        self.assertEqual(derive_descriptors(entry, 0, (10, 10)), [])


class FlattenDescriptorsTests(unittest.TestCase):
    def test_entry_order_then_within_entry_order(self) -> None:
        entries = [
            _entry("a.png"),
            _entry("b.png", {"Homogeneous": {"tile_size": [4, 4], "columns": 2, "rows": 1}}),
            _entry("c.png", {"Heterogeneous": [[[1, 1], [2, 2]]]}),
        ]
        descriptors = flatten_descriptors(entries, [(6, 6), (8, 4), (4, 4)])

        self.assertEqual(
            [(d.source_index, d.position) for d in descriptors],
            [(0, (0, 0)), (1, (0, 0)), (1, (4, 0)), (2, (1, 1))],
        )

    def test_descriptors_are_hashable_and_ordered(self) -> None:
        a = SubImageDescriptor(0, (0, 0), (4, 4))
        b = SubImageDescriptor(0, (4, 0), (4, 4))
        self.assertEqual(len({a, b, SubImageDescriptor(0, (0, 0), (4, 4))}), 2)
        self.assertLess(a, b)


if __name__ == "__main__":
    unittest.main()
