"""
LivePDF Viewer - Window Theme

Styles the GTK3 chrome (menu bar, canvas surround, status bar, dialogs)
to match the active ColorScheme. The page itself is colored by the
recolor engine; this module only touches widgets.
"""

import gi
gi.require_version('Gtk', '3.0')
gi.require_version('Gdk', '3.0')
from gi.repository import Gtk, Gdk

from .colors import hex_to_rgb, rgb_to_hex

# ── CSS Template ──────────────────────────────────────────────────────────────

CSS_TEMPLATE = """
/* ─── Global ──────────────────────────────────────────────────────────────── */
* {{
    font-family: "Noto Sans", "DejaVu Sans", sans-serif;
}}

window, dialog {{
    background-color: {background};
    color: {foreground};
}}

/* ─── Menus ───────────────────────────────────────────────────────────────── */
menubar {{
    background-color: {raised};
    border-bottom: 1px solid {border};
}}

menubar > menuitem, menu menuitem {{
    color: {foreground};
    padding: 4px 10px;
}}

menu, .menu {{
    background-color: {raised};
    border: 1px solid {border};
}}

menuitem:hover {{
    background-color: {border};
}}

/* ─── Canvas ──────────────────────────────────────────────────────────────── */
scrolledwindow, scrolledwindow viewport, .pdf-canvas {{
    background-color: {surround};
}}

/* ─── Entries / Buttons ───────────────────────────────────────────────────── */
entry {{
    background-color: {raised};
    color: {foreground};
    border: 1px solid {border};
    border-radius: 4px;
    padding: 4px 8px;
}}

entry.invalid {{
    border-color: #bf616a;
}}

button {{
    border-radius: 4px;
    padding: 4px 10px;
}}

/* ─── Status bar ──────────────────────────────────────────────────────────── */
.statusbar {{
    background-color: {raised};
    color: {foreground};
    padding: 2px 8px;
    border-top: 1px solid {border};
    font-size: 0.9em;
}}

.page-indicator {{
    font-weight: bold;
}}
"""

_provider = None


def mix(color_a, color_b, amount):
    """
    Blend two hex colors.

    Args:
        color_a: Base color, e.g. '#ffffff'.
        color_b: Color blended in.
        amount: 0.0 returns color_a, 1.0 returns color_b.

    Returns:
        '#rrggbb' string.
    """
    a = hex_to_rgb(color_a)
    b = hex_to_rgb(color_b)
    return rgb_to_hex(tuple(ca + (cb - ca) * amount for ca, cb in zip(a, b)))


def build_css(scheme):
    """Render the chrome stylesheet for a ColorScheme."""
    return CSS_TEMPLATE.format(
        foreground=scheme.foreground,
        background=scheme.background,
        raised=mix(scheme.background, scheme.foreground, 0.06),
        border=mix(scheme.background, scheme.foreground, 0.2),
        surround=mix(scheme.background, scheme.foreground, 0.12),
    )


def apply_theme(scheme):
    """
    Apply the chrome stylesheet for `scheme` application-wide.

    Calling it again replaces the previously applied stylesheet.
    """
    global _provider

    screen = Gdk.Screen.get_default()
    if screen is None:
        return

    if _provider is None:
        _provider = Gtk.CssProvider()
        Gtk.StyleContext.add_provider_for_screen(
            screen,
            _provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION,
        )
    _provider.load_from_data(build_css(scheme).encode('utf-8'))
