"""
LivePDF Viewer - Command Messages

Typed messages the host sends to the viewer's command loop. The host's
menus, keyboard shortcuts and file watcher all speak in these; the
string channel names match the menu actions of the host window.
"""

from dataclasses import dataclass

from .errors import UnknownCommandError


@dataclass(frozen=True)
class Command:
    """Base class for viewer commands."""


@dataclass(frozen=True)
class OpenDocument(Command):
    path: str


@dataclass(frozen=True)
class DocumentChanged(Command):
    path: str


@dataclass(frozen=True)
class Reload(Command):
    pass


@dataclass(frozen=True)
class SetTheme(Command):
    name: str


@dataclass(frozen=True)
class ZoomIn(Command):
    pass


@dataclass(frozen=True)
class ZoomOut(Command):
    pass


@dataclass(frozen=True)
class ZoomReset(Command):
    pass


@dataclass(frozen=True)
class SetZoom(Command):
    value: float


@dataclass(frozen=True)
class ZoomBy(Command):
    delta: float


@dataclass(frozen=True)
class FitHeight(Command):
    pass


@dataclass(frozen=True)
class FitWidth(Command):
    fraction: float = 1.0


@dataclass(frozen=True)
class NextPage(Command):
    pass


@dataclass(frozen=True)
class PreviousPage(Command):
    pass


@dataclass(frozen=True)
class GoToPage(Command):
    number: int


@dataclass(frozen=True)
class FirstPage(Command):
    pass


@dataclass(frozen=True)
class LastPage(Command):
    pass


@dataclass(frozen=True)
class OpenColorPicker(Command):
    pass


@dataclass(frozen=True)
class ApplyCustomColors(Command):
    foreground: str
    background: str


@dataclass(frozen=True)
class ResetCustomColors(Command):
    pass


@dataclass(frozen=True)
class ResizeViewport(Command):
    width: float
    height: float


@dataclass(frozen=True)
class SetDevicePixelRatio(Command):
    ratio: float


CHANNELS = {
    'open-document': OpenDocument,
    'load-pdf': OpenDocument,
    'document-changed-on-disk': DocumentChanged,
    'pdf-file-changed': DocumentChanged,
    'reload': Reload,
    'set-theme': SetTheme,
    'zoom-in': ZoomIn,
    'zoom-out': ZoomOut,
    'zoom-reset': ZoomReset,
    'reset-zoom': ZoomReset,
    'set-zoom': SetZoom,
    'zoom-by': ZoomBy,
    'fit-height': FitHeight,
    'fit-width': FitWidth,
    'next-page': NextPage,
    'previous-page': PreviousPage,
    'go-to-page': GoToPage,
    'first-page': FirstPage,
    'last-page': LastPage,
    'open-color-picker': OpenColorPicker,
    'apply-custom-colors': ApplyCustomColors,
    'reset-custom-colors': ResetCustomColors,
    'resize-viewport': ResizeViewport,
    'set-device-pixel-ratio': SetDevicePixelRatio,
}


def command_from_message(channel, *args):
    """
    Build a command from a host channel name and its arguments.

    Args:
        channel: e.g. 'set-theme'.
        *args: Positional fields of the command, e.g. 'dark'.

    Raises:
        UnknownCommandError: If the channel is not known.
        TypeError: If the arguments do not match the command's fields.
    """
    try:
        command_cls = CHANNELS[channel]
    except KeyError:
        raise UnknownCommandError(channel) from None
    return command_cls(*args)
