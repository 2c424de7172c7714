"""Configuration constants for LivePDF Viewer."""

import os
from dataclasses import dataclass

# --- Zoom ---
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_STEP = 1.2           # Multiplicative step for zoom in/out
WHEEL_ZOOM_DELTA = 0.1    # Additive step for Ctrl+scroll
DEFAULT_ZOOM = 1.0

# --- High-DPI backing store ---
MAX_PIXEL_RATIO = 3.0     # Upper bound on backing-store pixels per logical pixel
OVERSAMPLE_BOOST = 1.5    # Extra resolution when zoomed out (scale < 1.0)

# --- Recolor overlay brightness thresholds ---
DARK_THRESHOLD = 200
LIGHT_THRESHOLD = 128

# --- Render scheduling ---
COALESCE_RENDERS = False  # Drop (False) or defer (True) renders requested mid-render

# --- Window ---
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
VIEWPORT_MARGIN = 20      # Scrollbar/padding allowance when fitting pages

# --- Logging ---
LOG_LEVEL_ENV = "LIVEPDF_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class RenderSettings:
    """Tunables for the rasterizer, recolor engine and navigator."""

    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM
    zoom_step: float = ZOOM_STEP
    max_pixel_ratio: float = MAX_PIXEL_RATIO
    oversample_boost: float = OVERSAMPLE_BOOST
    dark_threshold: int = DARK_THRESHOLD
    light_threshold: int = LIGHT_THRESHOLD
    coalesce_renders: bool = COALESCE_RENDERS

    def clamp_zoom(self, value: float) -> float:
        """Clamp a zoom value into [min_zoom, max_zoom]."""
        return max(self.min_zoom, min(self.max_zoom, value))


DEFAULT_SETTINGS = RenderSettings()


def log_level_from_env(environ=None) -> str:
    """Return the configured log level name, falling back to the default.

    Args:
        environ: Mapping to read from (defaults to os.environ).
    """
    environ = os.environ if environ is None else environ
    level = environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return DEFAULT_LOG_LEVEL
    return level
