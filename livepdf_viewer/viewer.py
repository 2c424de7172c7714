"""
LivePDF Viewer - Viewer Core

Owns the ViewerState and turns commands into renders. Runs on asyncio:
the host submits commands and a single consumer (run()) processes them
one at a time. Document decoding and page rasterization are the only
suspension points; both run in a worker thread.

Scheduling rules:
  - At most one render is in flight. A request made while rendering is
    dropped, or, with RenderSettings.coalesce_renders, deferred into one
    follow-up render of the latest state.
  - Every install of a new document bumps a generation counter; a render
    that started under an older generation is discarded when it lands.
  - File-change notifications coalesce into at most one queued reload.
"""

import asyncio
import inspect
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from . import commands
from . import navigator
from .bitmap import Bitmap
from .colors import (
    DEFAULT_CUSTOM_COLORS, FILTER_THEMES, THEME_CUSTOM,
    ColorScheme, is_valid_hex, normalize_hex,
)
from .config import DEFAULT_SETTINGS, DEFAULT_ZOOM
from .document import DocumentSession, PDFDocument
from .errors import LoadError, RenderError
from .navigator import Effect, ViewerState
from .rasterizer import Rasterizer
from .recolor import DisplayFilter, canvas_fill, display_filter_for, recolor

logger = logging.getLogger(__name__)

FIT_HEIGHT = 'height'
FIT_WIDTH = 'width'


@dataclass
class Frame:
    """One finished render+recolor cycle, ready to present."""

    bitmap: Bitmap
    pixel_ratio: float
    logical_size: tuple
    page: int
    generation: int
    display_filter: DisplayFilter
    presented: Optional[Bitmap] = field(default=None, repr=False, compare=False)

    def display_bitmap(self):
        """The bitmap with the display filter applied.

        Frames from the viewer arrive with it precomputed off the main
        thread; otherwise it is computed once here.
        """
        if self.presented is None:
            self.presented = self.display_filter.apply(self.bitmap)
        return self.presented


@dataclass(frozen=True)
class ViewerStatus:
    """State the host shows in its status bar and menus."""

    page: int
    page_count: int
    scale: float
    theme: str
    path: Optional[str]
    reload_enabled: bool
    title: str = ""


class Viewer:
    """
    The document viewer core.

    Listeners are plain callables set by the host (None to ignore):
        on_frame(frame), on_status(status), on_error(error),
        on_color_picker(color_scheme).
    """

    def __init__(self, settings=DEFAULT_SETTINGS, loader=PDFDocument.open,
                 rasterizer=None):
        """
        Args:
            settings: RenderSettings.
            loader: Callable(path) -> document handle; raises LoadError.
            rasterizer: Optional Rasterizer (built from settings if None).
        """
        self.state = ViewerState(settings=settings)
        self.frame = None
        self.reload_enabled = False

        self._loader = loader
        self._rasterizer = rasterizer or Rasterizer(settings)
        self._generation = 0
        self._rendering = False
        self._render_pending = False
        self._render_task = None
        self._queue = asyncio.Queue()
        self._reload_queued = False
        self._fit_mode = None
        self._custom_colors = DEFAULT_CUSTOM_COLORS

        self.on_frame = None
        self.on_status = None
        self.on_error = None
        self.on_color_picker = None

        self._handlers = {
            commands.OpenDocument: lambda c: self.open(c.path),
            commands.DocumentChanged: self._on_document_changed,
            commands.Reload: lambda c: self.reload(),
            commands.SetTheme: lambda c: self.set_theme(c.name),
            commands.ZoomIn: lambda c: self.zoom_in(),
            commands.ZoomOut: lambda c: self.zoom_out(),
            commands.ZoomReset: lambda c: self.reset_zoom(),
            commands.SetZoom: lambda c: self.set_zoom(c.value),
            commands.ZoomBy: lambda c: self.zoom_by(c.delta),
            commands.FitHeight: lambda c: self.fit_height(),
            commands.FitWidth: lambda c: self.fit_width(c.fraction),
            commands.NextPage: lambda c: self.next_page(),
            commands.PreviousPage: lambda c: self.previous_page(),
            commands.GoToPage: lambda c: self.go_to_page(c.number),
            commands.FirstPage: lambda c: self.first_page(),
            commands.LastPage: lambda c: self.last_page(),
            commands.OpenColorPicker: lambda c: self.open_color_picker(),
            commands.ApplyCustomColors: lambda c: self.apply_custom_colors(c.foreground, c.background),
            commands.ResetCustomColors: lambda c: self.reset_custom_colors(),
            commands.ResizeViewport: lambda c: self.resize_viewport(c.width, c.height),
            commands.SetDevicePixelRatio: lambda c: self.set_device_pixel_ratio(c.ratio),
        }

    # ══════════════════════════════════════════════════════════════════════════
    #  Command loop
    # ══════════════════════════════════════════════════════════════════════════

    def submit(self, command):
        """
        Queue a command for the command loop. Safe to call from callbacks.

        Returns:
            False if the command was coalesced into an already queued one.
        """
        if isinstance(command, commands.DocumentChanged):
            if self._reload_queued:
                logger.debug("Reload already queued, coalescing %s", command.path)
                return False
            self._reload_queued = True
        self._queue.put_nowait(command)
        return True

    async def run(self):
        """Process queued commands one at a time, forever."""
        while True:
            command = await self._queue.get()
            try:
                await self.dispatch(command)
            except Exception:
                logger.exception("Command %r failed", command)
            finally:
                self._queue.task_done()

    async def drain(self):
        """Wait until every queued command was processed."""
        await self._queue.join()

    async def dispatch(self, command):
        """Run the operation for a single command and return its result."""
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {command!r}")
        logger.debug("Dispatching %r", command)
        result = handler(command)
        if inspect.isawaitable(result):
            result = await result
        return result

    # ══════════════════════════════════════════════════════════════════════════
    #  Documents
    # ══════════════════════════════════════════════════════════════════════════

    async def open(self, path):
        """
        Load a document, show page 1 at 100%, then fit it to the viewport.

        On failure the previous document stays displayed and on_error is
        notified.

        Returns:
            True if the document was loaded.
        """
        try:
            session = await asyncio.to_thread(DocumentSession.open, path, self._loader)
        except LoadError as exc:
            logger.error("%s", exc)
            self._notify(self.on_error, exc)
            return False

        previous = self.state.session
        self.state.session = session
        self._generation += 1
        previous.close()

        self.state.view.scale = DEFAULT_ZOOM
        self._fit_mode = None
        self._render_pending = False
        self.reload_enabled = True

        # Renders of the old handle finish first; their frames are dropped.
        await self.wait_idle()
        await self.render()

        if navigator.fit_height(self.state) is Effect.RENDER:
            self._fit_mode = FIT_HEIGHT
            self.request_render()
        self._emit_status()
        return True

    async def reload(self):
        """Reload the current document from disk; no-op before the first open."""
        path = self.state.session.path
        if path is None:
            logger.debug("Nothing to reload")
            return False
        return await self.open(path)

    async def _on_document_changed(self, command):
        self._reload_queued = False
        current = self.state.session.path
        if current is None or os.path.abspath(command.path) != current:
            logger.debug("Ignoring change notification for %s", command.path)
            return False
        logger.info("Document changed on disk, reloading %s", current)
        return await self.reload()

    # ══════════════════════════════════════════════════════════════════════════
    #  Navigation and zoom
    # ══════════════════════════════════════════════════════════════════════════

    def next_page(self):
        return self._apply(navigator.next_page(self.state))

    def previous_page(self):
        return self._apply(navigator.previous_page(self.state))

    def go_to_page(self, number):
        return self._apply(navigator.go_to_page(self.state, number))

    def first_page(self):
        return self._apply(navigator.first_page(self.state))

    def last_page(self):
        return self._apply(navigator.last_page(self.state))

    def zoom_in(self):
        self._fit_mode = None
        return self._apply(navigator.zoom_in(self.state))

    def zoom_out(self):
        self._fit_mode = None
        return self._apply(navigator.zoom_out(self.state))

    def reset_zoom(self):
        self._fit_mode = None
        return self._apply(navigator.reset_zoom(self.state))

    def set_zoom(self, value):
        self._fit_mode = None
        return self._apply(navigator.set_zoom(self.state, value))

    def zoom_by(self, delta):
        self._fit_mode = None
        return self._apply(navigator.zoom_by(self.state, delta))

    def fit_height(self):
        if self.state.session.is_loaded:
            self._fit_mode = FIT_HEIGHT
        return self._apply(navigator.fit_height(self.state))

    def fit_width(self, fraction=1.0):
        if self.state.session.is_loaded:
            self._fit_mode = (FIT_WIDTH, fraction)
        return self._apply(navigator.fit_width_fraction(self.state, fraction))

    def resize_viewport(self, width, height):
        """Record the viewport size and keep an active fit mode fitted."""
        navigator.resize_viewport(self.state, width, height)
        if self._fit_mode == FIT_HEIGHT:
            return self._apply(navigator.fit_height(self.state))
        if isinstance(self._fit_mode, tuple):
            return self._apply(navigator.fit_width_fraction(self.state, self._fit_mode[1]))
        return Effect.NONE

    def set_device_pixel_ratio(self, ratio):
        return self._apply(navigator.set_device_pixel_ratio(self.state, ratio))

    # ══════════════════════════════════════════════════════════════════════════
    #  Colors
    # ══════════════════════════════════════════════════════════════════════════

    def set_theme(self, name):
        """
        Switch to a built-in theme, or to the last custom colors.

        Selecting 'custom' also asks the host to show the color picker.
        """
        if name == THEME_CUSTOM:
            effect = self.apply_custom_colors(*self._custom_colors)
            self.open_color_picker()
            return effect
        if name not in FILTER_THEMES:
            logger.warning("Unknown theme %r ignored", name)
            return Effect.NONE
        self.state.colors = ColorScheme.for_theme(name)
        return self._apply(Effect.RENDER)

    def apply_custom_colors(self, foreground, background):
        """Enable the recolor overlay with the given colors."""
        foreground = _canonical_color(foreground)
        background = _canonical_color(background)
        self._custom_colors = (foreground, background)
        self.state.colors = self.state.colors.with_custom_colors(foreground, background)
        return self._apply(Effect.RENDER)

    def reset_custom_colors(self):
        return self.apply_custom_colors(*DEFAULT_CUSTOM_COLORS)

    def open_color_picker(self):
        self._notify(self.on_color_picker, self.state.colors)
        return Effect.NONE

    # ══════════════════════════════════════════════════════════════════════════
    #  Rendering
    # ══════════════════════════════════════════════════════════════════════════

    def request_render(self):
        """
        Start a background render of the current state.

        Returns:
            The render task, or None if nothing was started.
        """
        if not self.state.session.is_loaded:
            return None
        if self._rendering:
            self._note_busy()
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; render not started")
            return None
        self._rendering = True
        self._render_task = loop.create_task(self._render_now())
        return self._render_task

    async def render(self):
        """
        Render the current state and wait for it.

        Returns:
            The new Frame, or None if dropped, stale, or failed.
        """
        if not self.state.session.is_loaded:
            return None
        if self._rendering:
            self._note_busy()
            return None
        self._rendering = True
        return await self._render_now()

    async def wait_idle(self):
        """Wait until no render is in flight."""
        while self._render_task is not None and not self._render_task.done():
            await asyncio.wait({self._render_task})

    def _note_busy(self):
        if self.state.settings.coalesce_renders:
            self._render_pending = True
            logger.debug("Render in flight; deferring request")
        else:
            logger.debug("Render in flight; request dropped")

    async def _render_now(self):
        generation = self._generation
        session = self.state.session
        page_number = session.current_page
        page = session.current_page_handle()
        scale = self.state.view.scale
        ratio = self.state.view.device_pixel_ratio
        colors = self.state.colors

        try:
            frame = await asyncio.to_thread(
                self._produce_frame, page, page_number, scale, ratio, colors, generation
            )
        except RenderError as exc:
            logger.warning("%s; keeping previous frame", exc)
            frame = None
        finally:
            self._rendering = False

        if frame is not None:
            if generation != self._generation:
                logger.debug("Discarding stale render of page %d", page_number)
                frame = None
            else:
                self.frame = frame
                self._notify(self.on_frame, frame)

        if self._render_pending:
            self._render_pending = False
            self.request_render()
        return frame

    def _produce_frame(self, page, page_number, scale, ratio, colors, generation):
        # Worker thread: rasterize, recolor the same buffer, then filter a copy.
        rendered = self._rasterizer.render(
            page, scale, ratio, background=canvas_fill(colors), page_index=page_number
        )
        display_filter = display_filter_for(colors)
        try:
            bitmap = recolor(rendered.bitmap, colors, self.state.settings)
            presented = display_filter.apply(bitmap)
        except (MemoryError, ValueError, FloatingPointError) as exc:
            raise RenderError(page_number, f"recolor failed: {exc!r}") from exc
        return Frame(
            bitmap=bitmap,
            pixel_ratio=rendered.pixel_ratio,
            logical_size=rendered.logical_size,
            page=page_number,
            generation=generation,
            display_filter=display_filter,
            presented=presented,
        )

    # ══════════════════════════════════════════════════════════════════════════
    #  Status
    # ══════════════════════════════════════════════════════════════════════════

    @property
    def status(self):
        session = self.state.session
        return ViewerStatus(
            page=session.current_page,
            page_count=session.page_count,
            scale=self.state.view.scale,
            theme=self.state.colors.active_theme,
            path=session.path,
            reload_enabled=self.reload_enabled,
            title=session.title,
        )

    def _apply(self, effect):
        if effect is Effect.RENDER:
            self.request_render()
        self._emit_status()
        return effect

    def _emit_status(self):
        self._notify(self.on_status, self.status)

    @staticmethod
    def _notify(listener, *args):
        if listener is not None:
            listener(*args)


def _canonical_color(value):
    """Expand valid '#rgb' input; anything else is kept and fails closed later."""
    if is_valid_hex(value):
        return normalize_hex(value)
    return value
