"""
LivePDF Viewer

A single-window PDF viewer that follows the file on disk and reloads it
live. Features: adaptive high-DPI rendering via Poppler and cairo,
light/dark/sepia display filters, and a custom two-color recolor overlay.
"""

__version__ = "1.0.0"
__app_id__ = "io.github.livepdf.Viewer"
