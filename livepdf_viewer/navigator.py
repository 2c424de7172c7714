"""
LivePDF Viewer - Viewport Navigator
=====================================

Page turning, page jumps, zoom and fit operations over an explicit
ViewerState. Each operation mutates the state it is given and returns an
Effect telling the caller whether the page must be re-rendered.

Out-of-range requests are not errors: they leave the state untouched and
return Effect.NONE.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from .colors import ColorScheme
from .config import DEFAULT_SETTINGS, DEFAULT_ZOOM, WHEEL_ZOOM_DELTA, RenderSettings
from .document import DocumentSession

logger = logging.getLogger(__name__)


class Effect(enum.Enum):
    """What the caller has to redraw after an operation."""

    NONE = 'none'
    RENDER = 'render'


@dataclass
class ViewState:
    """Zoom and display geometry."""

    scale: float = DEFAULT_ZOOM
    device_pixel_ratio: float = 1.0
    viewport_width: Optional[float] = None
    viewport_height: Optional[float] = None


@dataclass
class ViewerState:
    """Everything a render depends on, held by the orchestrating viewer."""

    session: DocumentSession = field(default_factory=DocumentSession)
    view: ViewState = field(default_factory=ViewState)
    colors: ColorScheme = field(default_factory=ColorScheme)
    settings: RenderSettings = DEFAULT_SETTINGS


# ── Pages ─────────────────────────────────────────────────────────────────────

def go_to_page(state, number):
    """Jump to a 1-based page number if it is inside the document."""
    session = state.session
    if not session.contains(number) or number == session.current_page:
        return Effect.NONE
    session.current_page = number
    return Effect.RENDER


def next_page(state):
    return go_to_page(state, state.session.current_page + 1)


def previous_page(state):
    return go_to_page(state, state.session.current_page - 1)


def first_page(state):
    return go_to_page(state, 1)


def last_page(state):
    return go_to_page(state, state.session.page_count)


# ── Zoom ──────────────────────────────────────────────────────────────────────

def set_zoom(state, value):
    """
    Set the scale, clamped into the configured zoom range.

    Returns:
        Effect.RENDER if the scale changed.
    """
    new_scale = state.settings.clamp_zoom(float(value))
    if new_scale == state.view.scale:
        return Effect.NONE
    state.view.scale = new_scale
    return Effect.RENDER


def zoom_in(state):
    return set_zoom(state, state.view.scale * state.settings.zoom_step)


def zoom_out(state):
    return set_zoom(state, state.view.scale / state.settings.zoom_step)


def reset_zoom(state):
    return set_zoom(state, DEFAULT_ZOOM)


def zoom_by(state, delta=WHEEL_ZOOM_DELTA):
    """Additive zoom used for Ctrl+scroll."""
    return set_zoom(state, state.view.scale + delta)


# ── Fit ───────────────────────────────────────────────────────────────────────

def fit_height(state):
    """
    Scale the current page so its height fills the viewport.

    A no-op until both a document and a viewport size are available, so
    it can be called again once they are.
    """
    if not state.session.is_loaded or not state.view.viewport_height:
        return Effect.NONE
    _, page_height = state.session.page_size()
    if page_height <= 0:
        return Effect.NONE
    return set_zoom(state, state.view.viewport_height / page_height)


def fit_width_fraction(state, fraction=1.0):
    """Scale the current page so its width fills `fraction` of the viewport."""
    if not state.session.is_loaded or not state.view.viewport_width:
        return Effect.NONE
    if fraction <= 0:
        logger.debug("Ignoring fit width with fraction %s", fraction)
        return Effect.NONE
    page_width, _ = state.session.page_size()
    if page_width <= 0:
        return Effect.NONE
    return set_zoom(state, state.view.viewport_width * fraction / page_width)


# ── Display geometry ──────────────────────────────────────────────────────────

def resize_viewport(state, width, height):
    """Record the logical viewport size; never re-renders on its own."""
    state.view.viewport_width = width if width and width > 0 else None
    state.view.viewport_height = height if height and height > 0 else None
    return Effect.NONE


def set_device_pixel_ratio(state, ratio):
    """Record the display density; re-render when it changed."""
    if ratio is None or ratio <= 0 or ratio == state.view.device_pixel_ratio:
        return Effect.NONE
    state.view.device_pixel_ratio = float(ratio)
    return Effect.RENDER
