"""
LivePDF Viewer - Color Model

Theme palettes, hex <-> RGB conversion and the ColorScheme value that
selects between the display-filter and pixel-overlay recolor paths.

Themes:
  light   black on white, identity filter
  dark    white on #1a1a1a, inverting filter
  sepia   brown on cream, warm filter
  custom  user-chosen pair, per-pixel overlay
"""

import logging
import re
from dataclasses import dataclass, replace

from .errors import ColorParseError

logger = logging.getLogger(__name__)

# ── Themes ────────────────────────────────────────────────────────────────────

THEME_LIGHT = 'light'
THEME_DARK = 'dark'
THEME_SEPIA = 'sepia'
THEME_CUSTOM = 'custom'

FILTER_THEMES = (THEME_LIGHT, THEME_DARK, THEME_SEPIA)
ALL_THEMES = FILTER_THEMES + (THEME_CUSTOM,)

# (foreground, background)
THEME_COLORS = {
    THEME_LIGHT: ('#000000', '#ffffff'),
    THEME_DARK: ('#ffffff', '#1a1a1a'),
    THEME_SEPIA: ('#5c4b37', '#f4f1e8'),
}

DEFAULT_CUSTOM_COLORS = ('#000000', '#ffffff')

_HEX6_RE = re.compile(r'^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$')
_HEX_INPUT_RE = re.compile(r'^#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$')


# ── Conversion ────────────────────────────────────────────────────────────────

def parse_hex(value):
    """
    Strictly parse a 6-digit hex color.

    Args:
        value: e.g. '#1a2b3c' or '1A2B3C'.

    Returns:
        Tuple (r, g, b) of ints in [0..255].

    Raises:
        ColorParseError: If the value is not a 6-digit hex color.
    """
    if not isinstance(value, str):
        raise ColorParseError(value)
    match = _HEX6_RE.match(value.strip())
    if match is None:
        raise ColorParseError(value)
    return tuple(int(part, 16) for part in match.groups())


def hex_to_rgb(value):
    """
    Convert a hex color to (r, g, b) ints, failing closed to black.

    A malformed value is logged and never propagates.
    """
    try:
        return parse_hex(value)
    except ColorParseError as exc:
        logger.debug("%s; using black", exc)
        return (0, 0, 0)


def rgb_to_hex(rgb):
    """Convert (r, g, b) ints to a lowercase '#rrggbb' string."""
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f'#{r:02x}{g:02x}{b:02x}'


def is_valid_hex(value):
    """Return True for user input of the form '#rgb' or '#rrggbb'."""
    return isinstance(value, str) and _HEX_INPUT_RE.match(value) is not None


def normalize_hex(value):
    """
    Expand user input to canonical '#rrggbb'.

    Args:
        value: '#rgb' or '#rrggbb'.

    Raises:
        ColorParseError: If the input is not valid.
    """
    if not is_valid_hex(value):
        raise ColorParseError(value)
    digits = value[1:].lower()
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    return '#' + digits


def theme_colors(theme):
    """
    Return the (foreground, background) pair of a built-in theme.

    Unknown names, including 'custom', fall back to the light palette.
    """
    return THEME_COLORS.get(theme, THEME_COLORS[THEME_LIGHT])


# ── ColorScheme ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ColorScheme:
    """
    The active colors and the recolor path that applies them.

    Attributes:
        foreground:   '#rrggbb' used for text-like pixels.
        background:   '#rrggbb' used for the page canvas.
        active_theme: One of ALL_THEMES.
        base_theme:   Built-in theme the custom colors were chosen over;
                      equals active_theme for built-in themes.
    """

    foreground: str = THEME_COLORS[THEME_LIGHT][0]
    background: str = THEME_COLORS[THEME_LIGHT][1]
    active_theme: str = THEME_LIGHT
    base_theme: str = THEME_LIGHT

    @property
    def overlay_enabled(self):
        """True only for the custom theme."""
        return self.active_theme == THEME_CUSTOM

    @property
    def foreground_rgb(self):
        return hex_to_rgb(self.foreground)

    @property
    def background_rgb(self):
        return hex_to_rgb(self.background)

    @classmethod
    def for_theme(cls, theme):
        """Build the scheme of a built-in theme (unknown names map to light)."""
        if theme not in FILTER_THEMES:
            theme = THEME_LIGHT
        fg, bg = theme_colors(theme)
        return cls(foreground=fg, background=bg, active_theme=theme, base_theme=theme)

    def with_custom_colors(self, foreground, background):
        """
        Switch to the custom theme with the given colors.

        The current built-in theme (or the existing base when already
        custom) becomes the base theme.
        """
        base = self.base_theme if self.overlay_enabled else self.active_theme
        return replace(
            self,
            foreground=foreground,
            background=background,
            active_theme=THEME_CUSTOM,
            base_theme=base,
        )
