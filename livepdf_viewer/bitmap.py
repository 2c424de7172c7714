"""
LivePDF Viewer - Pixel Buffer

A Bitmap is the backing store of one rendered page: a numpy uint8 array
of shape (height, width, 4) laid out exactly like a cairo FORMAT_ARGB32
image surface (32-bit native-endian words, premultiplied alpha). The
array is handed to cairo directly, so rasterization and recoloring work
on the same memory without copies.
"""

import sys

import numpy as np

# Byte offsets of each channel inside a native-endian ARGB32 word.
if sys.byteorder == 'little':
    BLUE, GREEN, RED, ALPHA = 0, 1, 2, 3
else:
    ALPHA, RED, GREEN, BLUE = 0, 1, 2, 3

RGB_CHANNELS = (RED, GREEN, BLUE)
BYTES_PER_PIXEL = 4


class Bitmap:
    """
    Mutable ARGB32 pixel buffer.

    Attributes:
        pixels: numpy array of shape (height, width, 4), dtype uint8.
    """

    def __init__(self, pixels):
        if pixels.ndim != 3 or pixels.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(f"Expected (h, w, 4) pixels, got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        self.pixels = np.ascontiguousarray(pixels)

    @classmethod
    def blank(cls, width, height, rgb=(255, 255, 255)):
        """Create an opaque bitmap filled with a single color."""
        bitmap = cls(np.zeros((height, width, BYTES_PER_PIXEL), dtype=np.uint8))
        bitmap.fill(rgb)
        return bitmap

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    @property
    def stride(self):
        """Bytes per row; ARGB32 rows never need padding."""
        return self.width * BYTES_PER_PIXEL

    @property
    def size(self):
        return (self.width, self.height)

    def fill(self, rgb):
        """Paint every pixel with an opaque color."""
        r, g, b = rgb
        self.pixels[..., RED] = r
        self.pixels[..., GREEN] = g
        self.pixels[..., BLUE] = b
        self.pixels[..., ALPHA] = 255

    def rgb_view(self):
        """Return the color channels as (h, w, 3) in R, G, B order (a copy)."""
        return self.pixels[..., list(RGB_CHANNELS)]

    def alpha_view(self):
        """Return the alpha channel as (h, w) (a view)."""
        return self.pixels[..., ALPHA]

    def set_pixel(self, x, y, rgba):
        """Store an unpremultiplied (r, g, b, a) pixel."""
        r, g, b, a = rgba
        self.pixels[y, x, RED] = r * a // 255
        self.pixels[y, x, GREEN] = g * a // 255
        self.pixels[y, x, BLUE] = b * a // 255
        self.pixels[y, x, ALPHA] = a

    def get_pixel(self, x, y):
        """Return the pixel at (x, y) as unpremultiplied (r, g, b, a)."""
        px = self.pixels[y, x]
        a = int(px[ALPHA])
        if a == 0:
            return (0, 0, 0, 0)
        if a == 255:
            return (int(px[RED]), int(px[GREEN]), int(px[BLUE]), 255)
        return tuple(
            min(255, (int(px[c]) * 255 + a // 2) // a) for c in RGB_CHANNELS
        ) + (a,)

    def copy(self):
        return Bitmap(self.pixels.copy())

    def __eq__(self, other):
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self):
        return f"Bitmap({self.width}x{self.height})"
