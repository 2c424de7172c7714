"""
LivePDF Viewer - Recolor Engine

Two mutually exclusive ways of coloring a rendered page:

  DisplayFilter  light / dark / sepia. A precomputed affine color matrix
                 (the CSS filter-effect primitives composed once at import)
                 applied when a frame is presented. Never touches the
                 rasterized buffer.
  Color overlay  custom. Classifies every pixel as text or paper by its
                 brightness and paints it with the user's foreground or
                 background color, in place.
"""

import logging
import math

import numpy as np

from .bitmap import RGB_CHANNELS
from .colors import (
    THEME_CUSTOM, THEME_DARK, THEME_LIGHT, THEME_SEPIA,
    hex_to_rgb, theme_colors,
)
from .config import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

# Rec. 709 luma weights used by the W3C filter-effect matrices.
_LUMA = np.array([0.2126, 0.7152, 0.0722])


# ── Filter primitives (normalized RGB, column vectors) ────────────────────────

def _affine(matrix=None, offset=None):
    m = np.eye(3) if matrix is None else np.asarray(matrix, dtype=float)
    t = np.zeros(3) if offset is None else np.asarray(offset, dtype=float)
    return m, t


def invert(amount=1.0):
    return _affine(np.eye(3) * (1 - 2 * amount), np.full(3, amount))


def hue_rotate(degrees):
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return _affine([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ])


def contrast(amount):
    return _affine(np.eye(3) * amount, np.full(3, 0.5 - 0.5 * amount))


def brightness(amount):
    return _affine(np.eye(3) * amount)


def saturate(amount):
    gray = np.tile(_LUMA, (3, 1))
    return _affine(gray + amount * (np.eye(3) - gray))


def sepia(amount):
    full = np.array([
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ])
    return _affine(np.eye(3) + amount * (full - np.eye(3)))


def compose(*steps):
    """Compose affine steps in application order (first step applied first)."""
    m, t = _affine()
    for sm, st in steps:
        m = sm @ m
        t = sm @ t + st
    return m, t


# ── DisplayFilter ─────────────────────────────────────────────────────────────

class DisplayFilter:
    """
    A fixed color transform applied at presentation time.

    Attributes:
        name:   Theme name.
        matrix: 3x3 matrix over normalized RGB.
        offset: 3-vector added after the matrix.
    """

    def __init__(self, name, matrix, offset):
        self.name = name
        self.matrix = np.asarray(matrix, dtype=float)
        self.offset = np.asarray(offset, dtype=float)

    @property
    def is_identity(self):
        return bool(np.allclose(self.matrix, np.eye(3)) and np.allclose(self.offset, 0.0))

    def apply(self, bitmap):
        """
        Return the filtered bitmap.

        The identity filter returns its input unchanged, so applying it
        any number of times is the same as applying it once.
        """
        if self.is_identity:
            return bitmap

        alpha = bitmap.alpha_view().astype(np.float64)[..., None]
        rgb = bitmap.rgb_view().astype(np.float64)
        visible = alpha > 0
        # Work on unpremultiplied, normalized color.
        unpremul = np.where(visible, rgb / np.where(visible, alpha, 1.0), 0.0)
        out = np.clip(unpremul @ self.matrix.T + self.offset, 0.0, 1.0)
        out = np.rint(out * alpha)

        result = bitmap.copy()
        for i, channel in enumerate(RGB_CHANNELS):
            result.pixels[..., channel] = out[..., i].astype(np.uint8)
        return result

    def apply_rgb(self, rgb):
        """Filter a single (r, g, b) color."""
        vec = np.asarray(rgb, dtype=float) / 255.0
        out = np.clip(self.matrix @ vec + self.offset, 0.0, 1.0)
        return tuple(int(round(c * 255)) for c in out)

    def preimage(self, rgb):
        """
        Return the color that this filter maps onto rgb.

        Used to pick the canvas fill so that the visible page background
        equals the theme background after filtering.
        """
        target = np.asarray(rgb, dtype=float) / 255.0
        try:
            source = np.linalg.solve(self.matrix, target - self.offset)
        except np.linalg.LinAlgError:
            return tuple(rgb)
        source = np.clip(source, 0.0, 1.0)
        return tuple(int(round(c * 255)) for c in source)

    def __repr__(self):
        return f"DisplayFilter({self.name!r})"


IDENTITY_FILTER = DisplayFilter(THEME_LIGHT, *_affine())

DISPLAY_FILTERS = {
    THEME_LIGHT: IDENTITY_FILTER,
    THEME_DARK: DisplayFilter(THEME_DARK, *compose(
        invert(1.0), hue_rotate(180), contrast(0.85), brightness(0.9),
    )),
    THEME_SEPIA: DisplayFilter(THEME_SEPIA, *compose(
        saturate(0.8), sepia(0.35), brightness(1.05),
    )),
}


def display_filter_for(scheme):
    """The filter to present a frame with; identity while the overlay is active."""
    if scheme.overlay_enabled:
        return IDENTITY_FILTER
    return DISPLAY_FILTERS.get(scheme.active_theme, IDENTITY_FILTER)


def canvas_fill(scheme):
    """
    The (r, g, b) color painted under the page before rasterizing.

    Filter themes use the preimage of their background so the filtered
    page shows the theme background. The overlay uses the fill of its
    base theme, which is always light enough to classify as paper.
    """
    theme = scheme.base_theme if scheme.overlay_enabled else scheme.active_theme
    display_filter = DISPLAY_FILTERS.get(theme, IDENTITY_FILTER)
    if scheme.overlay_enabled:
        background = hex_to_rgb(theme_colors(theme)[1])
    else:
        background = scheme.background_rgb
    return display_filter.preimage(background)


# ── Color overlay ─────────────────────────────────────────────────────────────

def overlay_threshold(theme, settings=DEFAULT_SETTINGS):
    """Brightness threshold for the overlay; higher over a dark base theme."""
    if theme == THEME_DARK:
        return settings.dark_threshold
    return settings.light_threshold


def classify(bitmap, threshold):
    """
    Split pixels into text and paper.

    Args:
        bitmap: Bitmap to inspect.
        threshold: Pixels darker than this are foreground.

    Returns:
        Tuple (foreground_mask, background_mask) of (h, w) bool arrays.
        Fully transparent pixels are in neither mask.
    """
    alpha = bitmap.alpha_view().astype(np.float64)
    rgb = bitmap.rgb_view().astype(np.float64)
    visible = alpha > 0
    mean = rgb.mean(axis=2)
    # Premultiplied storage: scale back to the unpremultiplied brightness.
    level = np.where(visible, mean * 255.0 / np.where(visible, alpha, 1.0), 0.0)
    foreground = visible & (level < threshold)
    background = visible & ~foreground
    return foreground, background


def apply_color_overlay(bitmap, foreground, background, threshold):
    """
    Replace every visible pixel with the foreground or background color.

    Runs in place; alpha is preserved.

    Args:
        bitmap: Bitmap owned by the current render step.
        foreground: (r, g, b) for text-like pixels.
        background: (r, g, b) for paper pixels.
        threshold: Brightness threshold (see overlay_threshold).

    Returns:
        The same bitmap.
    """
    fg_mask, bg_mask = classify(bitmap, threshold)
    alpha = bitmap.alpha_view().astype(np.uint32)

    for i, channel in enumerate(RGB_CHANNELS):
        plane = bitmap.pixels[..., channel]
        fg_value = (foreground[i] * alpha + 127) // 255
        bg_value = (background[i] * alpha + 127) // 255
        plane[fg_mask] = fg_value[fg_mask].astype(np.uint8)
        plane[bg_mask] = bg_value[bg_mask].astype(np.uint8)

    logger.debug(
        "Overlay recolored %d foreground / %d background pixels",
        int(fg_mask.sum()), int(bg_mask.sum()),
    )
    return bitmap


def recolor(bitmap, scheme, settings=DEFAULT_SETTINGS):
    """
    Post-process a freshly rasterized bitmap for the active scheme.

    Only the custom theme touches pixels here; filter themes are applied
    at presentation time via display_filter_for().
    """
    if scheme.active_theme != THEME_CUSTOM:
        return bitmap
    threshold = overlay_threshold(scheme.base_theme, settings)
    return apply_color_overlay(
        bitmap, scheme.foreground_rgb, scheme.background_rgb, threshold
    )

