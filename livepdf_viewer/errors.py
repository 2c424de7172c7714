"""LivePDF Viewer - Error taxonomy.

None of these are fatal: the viewer always degrades to the last good
state. Only LoadError is shown to the user.
"""


class ViewerError(Exception):
    """Base class for all viewer errors."""


class LoadError(ViewerError):
    """The document is missing, unreadable, or malformed."""

    def __init__(self, path, reason):
        super().__init__(f"Failed to load {path}: {reason}")
        self.path = path
        self.reason = reason


class RenderError(ViewerError):
    """Decoding or drawing a specific page failed."""

    def __init__(self, page_index, reason):
        super().__init__(f"Failed to render page {page_index}: {reason}")
        self.page_index = page_index
        self.reason = reason


class ColorParseError(ViewerError, ValueError):
    """A color string is not a valid #rrggbb value."""

    def __init__(self, value):
        super().__init__(f"Invalid color value: {value!r}")
        self.value = value


class UnknownCommandError(ViewerError, KeyError):
    """The host sent a command channel the viewer does not know."""

    def __init__(self, channel):
        super().__init__(channel)
        self.channel = channel

    def __str__(self):
        return f"Unknown command channel: {self.channel!r}"
