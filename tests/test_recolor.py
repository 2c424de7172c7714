#!/usr/bin/env python3
"""
Tests for LivePDF Viewer recolor engine.

Covers the display filters (light/dark/sepia color matrices), the
canvas fill chosen for each scheme, and the custom two-color overlay:
pixel classification, thresholds and in-place recoloring.
"""

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.dirname(__file__))
from test_helpers import install_viewer_mocks
install_viewer_mocks()

from livepdf_viewer.bitmap import ALPHA, Bitmap
from livepdf_viewer.colors import ColorScheme
from livepdf_viewer.config import RenderSettings
from livepdf_viewer.recolor import (
    DISPLAY_FILTERS,
    IDENTITY_FILTER,
    apply_color_overlay,
    canvas_fill,
    classify,
    display_filter_for,
    overlay_threshold,
    recolor,
)


def gray_bitmap(levels):
    """One opaque gray pixel per level, in a single row."""
    bitmap = Bitmap.blank(len(levels), 1)
    for x, level in enumerate(levels):
        bitmap.set_pixel(x, 0, (level, level, level, 255))
    return bitmap


# ═══════════════════════════════════════════════════════════════════════════
# Display filters
# ═══════════════════════════════════════════════════════════════════════════
class TestDisplayFilters(unittest.TestCase):

    def test_light_is_identity(self):
        self.assertTrue(DISPLAY_FILTERS["light"].is_identity)

    def test_light_twice_equals_once(self):
        bitmap = gray_bitmap([0, 64, 128, 255])
        once = DISPLAY_FILTERS["light"].apply(bitmap)
        twice = DISPLAY_FILTERS["light"].apply(once)
        self.assertEqual(once, twice)
        self.assertEqual(once, bitmap)

    def test_identity_returns_same_object(self):
        bitmap = gray_bitmap([10])
        self.assertIs(IDENTITY_FILTER.apply(bitmap), bitmap)

    def test_dark_inverts_paper_and_ink(self):
        dark = DISPLAY_FILTERS["dark"]
        paper = dark.apply_rgb((255, 255, 255))
        ink = dark.apply_rgb((0, 0, 0))
        for channel in paper:
            self.assertAlmostEqual(channel, 17, delta=1)
        for channel in ink:
            self.assertAlmostEqual(channel, 212, delta=1)

    def test_dark_apply_does_not_touch_input(self):
        bitmap = Bitmap.blank(2, 2)
        out = DISPLAY_FILTERS["dark"].apply(bitmap)
        self.assertIsNot(out, bitmap)
        self.assertEqual(bitmap.get_pixel(0, 0), (255, 255, 255, 255))
        r, g, b, a = out.get_pixel(1, 1)
        self.assertEqual(a, 255)
        self.assertAlmostEqual(r, 17, delta=1)
        self.assertEqual(r, g)
        self.assertEqual(g, b)

    def test_filter_keeps_transparent_pixels(self):
        bitmap = Bitmap.blank(1, 1)
        bitmap.set_pixel(0, 0, (0, 0, 0, 0))
        out = DISPLAY_FILTERS["dark"].apply(bitmap)
        self.assertEqual(out.get_pixel(0, 0), (0, 0, 0, 0))

    def test_sepia_warms_midtones(self):
        sepia = DISPLAY_FILTERS["sepia"]
        r, g, b = sepia.apply_rgb((128, 128, 128))
        self.assertGreater(r, g)
        self.assertGreater(g, b)

    def test_sepia_keeps_black_and_white(self):
        sepia = DISPLAY_FILTERS["sepia"]
        self.assertEqual(sepia.apply_rgb((0, 0, 0)), (0, 0, 0))
        self.assertEqual(sepia.apply_rgb((255, 255, 255)), (255, 255, 255))

    def test_overlay_uses_identity(self):
        scheme = ColorScheme.for_theme("dark").with_custom_colors("#112233", "#aabbcc")
        self.assertIs(display_filter_for(scheme), IDENTITY_FILTER)

    def test_filter_for_theme(self):
        self.assertIs(display_filter_for(ColorScheme.for_theme("dark")), DISPLAY_FILTERS["dark"])


# ═══════════════════════════════════════════════════════════════════════════
# Canvas fill
# ═══════════════════════════════════════════════════════════════════════════
class TestCanvasFill(unittest.TestCase):

    def test_light_is_white(self):
        self.assertEqual(canvas_fill(ColorScheme()), (255, 255, 255))

    def test_dark_fill_shows_theme_background(self):
        scheme = ColorScheme.for_theme("dark")
        fill = canvas_fill(scheme)
        shown = DISPLAY_FILTERS["dark"].apply_rgb(fill)
        for channel in shown:
            self.assertAlmostEqual(channel, 0x1A, delta=1)

    def test_dark_fill_is_light(self):
        fill = canvas_fill(ColorScheme.for_theme("dark"))
        self.assertTrue(all(c >= 200 for c in fill))

    def test_overlay_fill_classifies_as_paper(self):
        for base in ("light", "dark", "sepia"):
            with self.subTest(base=base):
                scheme = ColorScheme.for_theme(base).with_custom_colors("#112233", "#aabbcc")
                fill = canvas_fill(scheme)
                bitmap = Bitmap.blank(1, 1, fill)
                fg, bg = classify(bitmap, overlay_threshold(base))
                self.assertFalse(fg[0, 0])
                self.assertTrue(bg[0, 0])


# ═══════════════════════════════════════════════════════════════════════════
# Overlay classification
# ═══════════════════════════════════════════════════════════════════════════
class TestClassification(unittest.TestCase):

    def test_thresholds(self):
        self.assertEqual(overlay_threshold("dark"), 200)
        self.assertEqual(overlay_threshold("light"), 128)
        self.assertEqual(overlay_threshold("sepia"), 128)

    def test_custom_threshold_settings(self):
        settings = RenderSettings(dark_threshold=180, light_threshold=100)
        self.assertEqual(overlay_threshold("dark", settings), 180)
        self.assertEqual(overlay_threshold("sepia", settings), 100)

    def test_dark_threshold(self):
        bitmap = gray_bitmap([10, 220])
        fg, bg = classify(bitmap, overlay_threshold("dark"))
        self.assertEqual(fg[0].tolist(), [True, False])
        self.assertEqual(bg[0].tolist(), [False, True])

    def test_light_threshold(self):
        bitmap = gray_bitmap([100, 150])
        for theme in ("light", "sepia"):
            with self.subTest(theme=theme):
                fg, bg = classify(bitmap, overlay_threshold(theme))
                self.assertEqual(fg[0].tolist(), [True, False])
                self.assertEqual(bg[0].tolist(), [False, True])

    def test_threshold_is_strict(self):
        fg, bg = classify(gray_bitmap([128]), 128)
        self.assertFalse(fg[0, 0])
        self.assertTrue(bg[0, 0])

    def test_uses_channel_mean(self):
        bitmap = Bitmap.blank(1, 1)
        bitmap.set_pixel(0, 0, (255, 0, 0, 255))  # mean 85
        fg, _ = classify(bitmap, 128)
        self.assertTrue(fg[0, 0])

    def test_transparent_in_neither_mask(self):
        bitmap = Bitmap.blank(1, 1)
        bitmap.set_pixel(0, 0, (0, 0, 0, 0))
        fg, bg = classify(bitmap, 128)
        self.assertFalse(fg[0, 0])
        self.assertFalse(bg[0, 0])

    def test_semi_transparent_uses_unpremultiplied_level(self):
        bitmap = Bitmap.blank(1, 1)
        bitmap.set_pixel(0, 0, (200, 200, 200, 100))
        fg, bg = classify(bitmap, 128)
        self.assertFalse(fg[0, 0])
        self.assertTrue(bg[0, 0])


# ═══════════════════════════════════════════════════════════════════════════
# Overlay recoloring
# ═══════════════════════════════════════════════════════════════════════════
class TestColorOverlay(unittest.TestCase):

    FG = (0x11, 0x22, 0x33)
    BG = (0xAA, 0xBB, 0xCC)

    def test_every_opaque_pixel_is_fg_or_bg(self):
        rng = np.random.default_rng(7)
        bitmap = Bitmap.blank(32, 16)
        levels = rng.integers(0, 256, size=(16, 32, 3), dtype=np.uint8)
        for y in range(16):
            for x in range(32):
                bitmap.set_pixel(x, y, tuple(int(v) for v in levels[y, x]) + (255,))

        scheme = ColorScheme().with_custom_colors("#112233", "#aabbcc")
        out = recolor(bitmap, scheme)

        allowed = {self.FG + (255,), self.BG + (255,)}
        for y in range(16):
            for x in range(32):
                self.assertIn(out.get_pixel(x, y), allowed)

    def test_runs_in_place(self):
        bitmap = gray_bitmap([0, 255])
        out = apply_color_overlay(bitmap, self.FG, self.BG, 128)
        self.assertIs(out, bitmap)
        self.assertEqual(bitmap.get_pixel(0, 0), self.FG + (255,))
        self.assertEqual(bitmap.get_pixel(1, 0), self.BG + (255,))

    def test_preserves_alpha(self):
        bitmap = Bitmap.blank(2, 1)
        bitmap.set_pixel(0, 0, (0, 0, 0, 128))
        bitmap.set_pixel(1, 0, (0, 0, 0, 0))
        apply_color_overlay(bitmap, self.FG, self.BG, 128)
        self.assertEqual(int(bitmap.pixels[0, 0, ALPHA]), 128)
        self.assertEqual(bitmap.get_pixel(1, 0), (0, 0, 0, 0))
        r, g, b, _ = bitmap.get_pixel(0, 0)
        self.assertAlmostEqual(r, self.FG[0], delta=1)
        self.assertAlmostEqual(b, self.FG[2], delta=1)

    def test_base_theme_selects_threshold(self):
        over_dark = ColorScheme.for_theme("dark").with_custom_colors("#112233", "#aabbcc")
        over_light = ColorScheme.for_theme("light").with_custom_colors("#112233", "#aabbcc")

        dark_out = recolor(gray_bitmap([150]), over_dark)
        light_out = recolor(gray_bitmap([150]), over_light)

        self.assertEqual(dark_out.get_pixel(0, 0), self.FG + (255,))
        self.assertEqual(light_out.get_pixel(0, 0), self.BG + (255,))

    def test_filter_themes_leave_pixels_alone(self):
        for theme in ("light", "dark", "sepia"):
            with self.subTest(theme=theme):
                bitmap = gray_bitmap([0, 100, 200])
                before = bitmap.copy()
                out = recolor(bitmap, ColorScheme.for_theme(theme))
                self.assertIs(out, bitmap)
                self.assertEqual(out, before)

    def test_malformed_custom_color_is_black(self):
        scheme = ColorScheme().with_custom_colors("bogus", "#ffffff")
        out = recolor(gray_bitmap([0]), scheme)
        self.assertEqual(out.get_pixel(0, 0), (0, 0, 0, 255))


if __name__ == "__main__":
    unittest.main()
