#!/usr/bin/env python3
"""
Tests for LivePDF Viewer adaptive rasterizer.

Validates the effective pixel ratio (oversampling and cap), backing
store sizing, and the cairo calls made while rendering a page. cairo is
replaced by a recording fake so no display or poppler is needed.
"""

import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(__file__))
from test_helpers import (
    FailingPage,
    FakeCairo,
    FakePage,
    StubGError,
    install_viewer_mocks,
)
install_viewer_mocks()

from livepdf_viewer import rasterizer
from livepdf_viewer.config import RenderSettings
from livepdf_viewer.errors import RenderError
from livepdf_viewer.rasterizer import (
    Rasterizer,
    backing_store_size,
    effective_pixel_ratio,
    round_half_up,
)


# ═══════════════════════════════════════════════════════════════════════════
# Pixel ratio
# ═══════════════════════════════════════════════════════════════════════════
class TestEffectivePixelRatio(unittest.TestCase):

    def test_zoomed_out_is_boosted_and_capped(self):
        self.assertEqual(effective_pixel_ratio(0.5, 2.0), 3.0)

    def test_actual_size_uses_device_ratio(self):
        self.assertEqual(effective_pixel_ratio(1.0, 2.0), 2.0)

    def test_boost_below_cap(self):
        self.assertAlmostEqual(effective_pixel_ratio(0.5, 1.0), 1.5)

    def test_never_below_one(self):
        self.assertEqual(effective_pixel_ratio(2.0, 0.5), 1.0)

    def test_cap(self):
        self.assertEqual(effective_pixel_ratio(3.0, 4.0), 3.0)

    def test_custom_settings(self):
        settings = RenderSettings(max_pixel_ratio=2.0, oversample_boost=2.0)
        self.assertEqual(effective_pixel_ratio(0.5, 1.0, settings), 2.0)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(2.49), 2)


# ═══════════════════════════════════════════════════════════════════════════
# Backing store size
# ═══════════════════════════════════════════════════════════════════════════
class TestBackingStoreSize(unittest.TestCase):

    def test_letter_page_hidpi(self):
        width, height, ratio, logical = backing_store_size((612, 792), 1.0, 2.0)
        self.assertEqual((width, height), (1224, 1584))
        self.assertEqual(ratio, 2.0)
        self.assertEqual(logical, (612, 792))

    def test_zoomed_out(self):
        width, height, ratio, logical = backing_store_size((100, 200), 0.5, 1.0)
        self.assertEqual(ratio, 1.5)
        self.assertEqual(logical, (50.0, 100.0))
        self.assertEqual((width, height), (75, 150))

    def test_rounds_half_up(self):
        width, height, _, _ = backing_store_size((5, 3), 0.5, 1.0)
        # 5 * 0.5 * 1.5 = 3.75, 3 * 0.5 * 1.5 = 2.25
        self.assertEqual((width, height), (4, 2))

    def test_at_least_one_pixel(self):
        width, height, _, _ = backing_store_size((0.1, 0.1), 0.1, 1.0)
        self.assertEqual((width, height), (1, 1))


# ═══════════════════════════════════════════════════════════════════════════
# Rendering
# ═══════════════════════════════════════════════════════════════════════════
class TestRasterizerRender(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.object(rasterizer, "cairo", FakeCairo)
        patcher.start()
        self.addCleanup(patcher.stop)
        FakeCairo.ImageSurface.created.clear()
        self.rasterizer = Rasterizer()

    def test_bitmap_matches_backing_store(self):
        result = self.rasterizer.render(FakePage(100, 200), 1.0, 2.0)
        self.assertEqual(result.bitmap.size, (200, 400))
        self.assertEqual(result.pixel_ratio, 2.0)
        self.assertEqual(result.logical_size, (100.0, 200.0))

    def test_surface_wraps_bitmap_memory(self):
        result = self.rasterizer.render(FakePage(10, 10), 1.0, 1.0)
        surface = FakeCairo.ImageSurface.created[-1]
        self.assertIs(surface.data, result.bitmap.pixels)
        self.assertEqual(surface.format, FakeCairo.FORMAT_ARGB32)
        self.assertEqual(surface.stride, result.bitmap.stride)
        self.assertTrue(surface.finished)

    def test_page_drawn_once_without_antialiasing(self):
        page = FakePage(50, 50)
        contexts = []

        class RecordingContext(FakeCairo.Context):
            def __init__(self, surface):
                super().__init__(surface)
                contexts.append(self)

        with mock.patch.object(FakeCairo, "Context", RecordingContext):
            self.rasterizer.render(page, 2.0, 1.0)

        self.assertEqual(page.render_calls, 1)
        ctx = contexts[0]
        self.assertEqual(ctx.antialias, FakeCairo.ANTIALIAS_NONE)
        self.assertEqual(ctx.font_options.antialias, FakeCairo.ANTIALIAS_NONE)
        self.assertEqual(ctx.scale_factors, (2.0, 2.0))

    def test_background_fill_under_page(self):
        result = self.rasterizer.render(FakePage(10, 10, ink=None), 1.0, 1.0,
                                        background=(244, 244, 244))
        self.assertEqual(result.bitmap.get_pixel(9, 9), (244, 244, 244, 255))

    def test_page_ink_lands_in_bitmap(self):
        result = self.rasterizer.render(FakePage(10, 10, ink=(10, 20, 30)), 1.0, 1.0)
        self.assertEqual(result.bitmap.get_pixel(0, 0), (10, 20, 30, 255))
        self.assertEqual(result.bitmap.get_pixel(9, 9), (255, 255, 255, 255))

    def test_missing_page(self):
        with self.assertRaises(RenderError) as ctx:
            self.rasterizer.render(None, 1.0, 1.0, page_index=4)
        self.assertEqual(ctx.exception.page_index, 4)

    def test_invalid_page_size(self):
        with self.assertRaises(RenderError):
            self.rasterizer.render(FakePage(0, 100), 1.0, 1.0)

    def test_cairo_error_becomes_render_error(self):
        with self.assertRaises(RenderError) as ctx:
            self.rasterizer.render(FailingPage(10, 10), 1.0, 1.0, page_index=2)
        self.assertIn("invalid matrix", str(ctx.exception))

    def test_glib_error_becomes_render_error(self):
        class BrokenPage(FakePage):
            def render(self, ctx):
                raise StubGError("poppler failed")

        with self.assertRaises(RenderError):
            self.rasterizer.render(BrokenPage(10, 10), 1.0, 1.0)

    def test_allocation_failure_becomes_render_error(self):
        with mock.patch.object(rasterizer.Bitmap, "blank", side_effect=MemoryError("backing store")):
            with self.assertRaises(RenderError) as ctx:
                self.rasterizer.render(FakePage(10, 10), 5.0, 3.0, page_index=4)
        self.assertEqual(ctx.exception.page_index, 4)
        self.assertEqual(FakeCairo.ImageSurface.created, [])


if __name__ == "__main__":
    unittest.main()
