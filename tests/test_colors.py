#!/usr/bin/env python3
"""
Tests for LivePDF Viewer color model.

Validates hex parsing (strict and fail-closed), user input
normalization, theme palettes and ColorScheme transitions between the
filter themes and the custom overlay.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(__file__))
from test_helpers import install_viewer_mocks
install_viewer_mocks()

from livepdf_viewer.colors import (
    ALL_THEMES,
    FILTER_THEMES,
    THEME_COLORS,
    ColorScheme,
    hex_to_rgb,
    is_valid_hex,
    normalize_hex,
    parse_hex,
    rgb_to_hex,
    theme_colors,
)
from livepdf_viewer.errors import ColorParseError, ViewerError


# ═══════════════════════════════════════════════════════════════════════════
# Hex conversion
# ═══════════════════════════════════════════════════════════════════════════
class TestParseHex(unittest.TestCase):
    """parse_hex accepts exactly six hex digits."""

    def test_with_hash(self):
        self.assertEqual(parse_hex("#112233"), (0x11, 0x22, 0x33))

    def test_without_hash(self):
        self.assertEqual(parse_hex("aabbcc"), (0xAA, 0xBB, 0xCC))

    def test_uppercase(self):
        self.assertEqual(parse_hex("#FFFFFF"), (255, 255, 255))

    def test_rejects_malformed(self):
        for value in ("#12", "#1234567", "#ggg000", "", "#abc", None, 42):
            with self.subTest(value=value):
                with self.assertRaises(ColorParseError):
                    parse_hex(value)

    def test_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_hex("nope")

    def test_error_is_viewer_error(self):
        with self.assertRaises(ViewerError):
            parse_hex("nope")


class TestHexToRgb(unittest.TestCase):
    """hex_to_rgb fails closed to black."""

    def test_valid(self):
        self.assertEqual(hex_to_rgb("#1a1a1a"), (26, 26, 26))

    def test_malformed_is_black(self):
        self.assertEqual(hex_to_rgb("#zzzzzz"), (0, 0, 0))

    def test_none_is_black(self):
        self.assertEqual(hex_to_rgb(None), (0, 0, 0))

    def test_rgb_to_hex(self):
        self.assertEqual(rgb_to_hex((17, 34, 51)), "#112233")

    def test_rgb_to_hex_clamps(self):
        self.assertEqual(rgb_to_hex((-5, 300, 127.6)), "#00ff80")


class TestUserInput(unittest.TestCase):
    """Validation of hex text typed by the user."""

    def test_valid_forms(self):
        for value in ("#abc", "#ABC", "#a1b2c3"):
            with self.subTest(value=value):
                self.assertTrue(is_valid_hex(value))

    def test_invalid_forms(self):
        for value in ("abc", "#abcd", "#a1b2c", "", "#xyz", None):
            with self.subTest(value=value):
                self.assertFalse(is_valid_hex(value))

    def test_normalize_short(self):
        self.assertEqual(normalize_hex("#AbC"), "#aabbcc")

    def test_normalize_long(self):
        self.assertEqual(normalize_hex("#A1B2C3"), "#a1b2c3")

    def test_normalize_invalid(self):
        with self.assertRaises(ColorParseError):
            normalize_hex("#12")


# ═══════════════════════════════════════════════════════════════════════════
# Themes
# ═══════════════════════════════════════════════════════════════════════════
class TestThemes(unittest.TestCase):
    """Built-in palettes."""

    def test_palettes(self):
        self.assertEqual(THEME_COLORS["light"], ("#000000", "#ffffff"))
        self.assertEqual(THEME_COLORS["dark"], ("#ffffff", "#1a1a1a"))
        self.assertEqual(THEME_COLORS["sepia"], ("#5c4b37", "#f4f1e8"))

    def test_custom_is_not_a_filter_theme(self):
        self.assertNotIn("custom", FILTER_THEMES)
        self.assertIn("custom", ALL_THEMES)

    def test_unknown_falls_back_to_light(self):
        self.assertEqual(theme_colors("neon"), THEME_COLORS["light"])


# ═══════════════════════════════════════════════════════════════════════════
# ColorScheme
# ═══════════════════════════════════════════════════════════════════════════
class TestColorScheme(unittest.TestCase):
    """Theme selection and the custom overlay switch."""

    def test_default_is_light(self):
        scheme = ColorScheme()
        self.assertEqual(scheme.active_theme, "light")
        self.assertFalse(scheme.overlay_enabled)

    def test_for_theme(self):
        scheme = ColorScheme.for_theme("dark")
        self.assertEqual(scheme.foreground, "#ffffff")
        self.assertEqual(scheme.background, "#1a1a1a")
        self.assertEqual(scheme.base_theme, "dark")

    def test_for_unknown_theme(self):
        self.assertEqual(ColorScheme.for_theme("custom").active_theme, "light")

    def test_custom_colors_enable_overlay(self):
        scheme = ColorScheme.for_theme("sepia").with_custom_colors("#112233", "#aabbcc")
        self.assertTrue(scheme.overlay_enabled)
        self.assertEqual(scheme.active_theme, "custom")
        self.assertEqual(scheme.base_theme, "sepia")
        self.assertEqual(scheme.foreground_rgb, (0x11, 0x22, 0x33))
        self.assertEqual(scheme.background_rgb, (0xAA, 0xBB, 0xCC))

    def test_custom_twice_keeps_base(self):
        scheme = (ColorScheme.for_theme("dark")
                  .with_custom_colors("#000000", "#ffffff")
                  .with_custom_colors("#112233", "#aabbcc"))
        self.assertEqual(scheme.base_theme, "dark")

    def test_builtin_theme_disables_overlay(self):
        scheme = ColorScheme().with_custom_colors("#112233", "#aabbcc")
        self.assertFalse(ColorScheme.for_theme("light").overlay_enabled)
        self.assertTrue(scheme.overlay_enabled)

    def test_immutable(self):
        scheme = ColorScheme()
        with self.assertRaises(Exception):
            scheme.foreground = "#123456"


if __name__ == "__main__":
    unittest.main()
