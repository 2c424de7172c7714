"""
LivePDF Viewer - Adaptive Rasterizer

Renders one page into a Bitmap sized for the display's physical pixel
density. The backing store is oversampled when zoomed out and capped to
keep memory bounded:

    ratio = clamp(1, max_pixel_ratio,
                  device_pixel_ratio * (oversample_boost if scale < 1 else 1))

Antialiasing is disabled for both geometry and text.
"""

import logging
import math
from dataclasses import dataclass

import cairo

import gi
gi.require_version('GLib', '2.0')
from gi.repository import GLib

from .bitmap import Bitmap
from .config import DEFAULT_SETTINGS
from .errors import RenderError

logger = logging.getLogger(__name__)


def round_half_up(value):
    """Round to the nearest integer with .5 rounding up."""
    return int(math.floor(value + 0.5))


def effective_pixel_ratio(scale, device_pixel_ratio, settings=DEFAULT_SETTINGS):
    """
    Backing-store pixels per logical pixel.

    Args:
        scale: Zoom factor (1.0 = 100%).
        device_pixel_ratio: Physical / logical pixels of the display.
        settings: RenderSettings providing the cap and the boost.
    """
    boost = settings.oversample_boost if scale < 1.0 else 1.0
    return max(1.0, min(settings.max_pixel_ratio, device_pixel_ratio * boost))


def backing_store_size(page_size, scale, device_pixel_ratio, settings=DEFAULT_SETTINGS):
    """
    Compute the device-pixel size of a page's backing store.

    Args:
        page_size: Intrinsic (width, height) of the page in points.
        scale: Zoom factor.
        device_pixel_ratio: Display pixel density.
        settings: RenderSettings.

    Returns:
        Tuple (width_px, height_px, ratio, (logical_w, logical_h)).
    """
    pw, ph = page_size
    logical_w = pw * scale
    logical_h = ph * scale
    ratio = effective_pixel_ratio(scale, device_pixel_ratio, settings)
    width = max(1, round_half_up(logical_w * ratio))
    height = max(1, round_half_up(logical_h * ratio))
    return width, height, ratio, (logical_w, logical_h)


@dataclass
class RenderedPage:
    """A rasterized page and the geometry it was produced with."""

    bitmap: Bitmap
    pixel_ratio: float
    logical_size: tuple


class Rasterizer:
    """
    Rasterizes pages into ARGB32 bitmaps with cairo.

    Pages only need the Poppler.Page surface: get_size() and render(ctx).
    """

    def __init__(self, settings=DEFAULT_SETTINGS):
        self.settings = settings

    def render(self, page, scale, device_pixel_ratio, background=(255, 255, 255),
               page_index=None):
        """
        Render a page to a freshly allocated bitmap.

        Args:
            page: Page object (Poppler.Page or compatible).
            scale: Zoom factor.
            device_pixel_ratio: Display pixel density.
            background: (r, g, b) canvas fill painted before the page.
            page_index: Only used for error reporting.

        Returns:
            A RenderedPage.

        Raises:
            RenderError: If the page cannot be drawn.
        """
        if page is None:
            raise RenderError(page_index, "page not available")

        page_size = page.get_size()
        if page_size[0] <= 0 or page_size[1] <= 0:
            raise RenderError(page_index, f"invalid page size {page_size}")

        width, height, ratio, logical = backing_store_size(
            page_size, scale, device_pixel_ratio, self.settings
        )

        try:
            bitmap = Bitmap.blank(width, height, background)
            surface = cairo.ImageSurface.create_for_data(
                bitmap.pixels, cairo.FORMAT_ARGB32, width, height, bitmap.stride
            )
            ctx = cairo.Context(surface)
            ctx.set_antialias(cairo.ANTIALIAS_NONE)
            font_options = cairo.FontOptions()
            font_options.set_antialias(cairo.ANTIALIAS_NONE)
            ctx.set_font_options(font_options)

            # Fill the backing store exactly; no later upscale.
            ctx.scale(width / page_size[0], height / page_size[1])
            page.render(ctx)

            surface.flush()
            surface.finish()
        except (cairo.Error, GLib.Error, MemoryError) as exc:
            raise RenderError(page_index, str(exc)) from exc

        logger.debug(
            "Rendered page %s at scale %.3f, ratio %.2f -> %dx%d",
            page_index, scale, ratio, width, height,
        )
        return RenderedPage(bitmap=bitmap, pixel_ratio=ratio, logical_size=logical)
