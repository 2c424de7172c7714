"""
LivePDF Viewer - Main Application Window

Assembles the GTK3 host around the Viewer core: menu bar, scrolling page
canvas, status bar, color picker and the file watcher that drives live
reload. Every user action becomes a command submitted to the viewer;
the viewer reports back through its listeners.
"""

import asyncio
import logging
import os
import time

import cairo

import gi
gi.require_version('Gtk', '3.0')
gi.require_version('Gdk', '3.0')
from gi.repository import Gtk, Gdk

from . import commands
from .colors import (
    DEFAULT_CUSTOM_COLORS, THEME_CUSTOM, THEME_DARK, THEME_LIGHT, THEME_SEPIA,
    is_valid_hex, normalize_hex, rgb_to_hex,
)
from .config import (
    DEFAULT_WINDOW_HEIGHT, DEFAULT_WINDOW_WIDTH, VIEWPORT_MARGIN,
    WHEEL_ZOOM_DELTA,
)
from .document import document_info
from .errors import LoadError, UnknownCommandError
from .theme import apply_theme
from .translations import detect_system_language, get_text
from .viewer import Viewer
from .watcher import FileWatcher

logger = logging.getLogger(__name__)

RESPONSE_RESET = 1


def rgba_to_hex(rgba):
    """Convert a Gdk.RGBA to '#rrggbb'."""
    return rgb_to_hex((rgba.red * 255, rgba.green * 255, rgba.blue * 255))


def hex_to_rgba(hex_color):
    """Convert '#rrggbb' to a Gdk.RGBA."""
    rgba = Gdk.RGBA()
    rgba.parse(hex_color)
    return rgba


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ColorPickerDialog
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ColorPickerDialog(Gtk.Dialog):
    """
    Foreground/background picker for the custom color overlay.

    Each color has a Gtk.ColorButton and a hex entry kept in sync. The
    entries accept '#rgb' or '#rrggbb'; invalid text is flagged and
    ignored.
    """

    def __init__(self, parent, foreground, background, lang):
        super().__init__(
            title=get_text('custom_colors', lang),
            transient_for=parent,
            modal=False,
        )
        self.set_default_size(320, -1)
        self.add_button(get_text('reset', lang), RESPONSE_RESET)
        self.add_button(get_text('close', lang), Gtk.ResponseType.CLOSE)
        self.add_button(get_text('apply', lang), Gtk.ResponseType.APPLY)
        self.set_default_response(Gtk.ResponseType.APPLY)

        content = self.get_content_area()
        content.set_spacing(8)
        content.set_margin_start(12)
        content.set_margin_end(12)
        content.set_margin_top(12)
        content.set_margin_bottom(12)

        grid = Gtk.Grid(column_spacing=8, row_spacing=8)
        content.pack_start(grid, True, True, 0)

        self.fg_button, self.fg_entry = self._add_row(
            grid, 0, get_text('foreground', lang), foreground)
        self.bg_button, self.bg_entry = self._add_row(
            grid, 1, get_text('background', lang), background)

        self.show_all()

    def _add_row(self, grid, row, label_text, color):
        label = Gtk.Label(label=label_text)
        label.set_halign(Gtk.Align.START)
        grid.attach(label, 0, row, 1, 1)

        button = Gtk.ColorButton()
        button.set_rgba(hex_to_rgba(color))
        grid.attach(button, 1, row, 1, 1)

        entry = Gtk.Entry()
        entry.set_width_chars(8)
        entry.set_text(color)
        grid.attach(entry, 2, row, 1, 1)

        button.connect('color-set', self._on_color_set, entry)
        entry.connect('changed', self._on_entry_changed, button)
        return button, entry

    def _on_color_set(self, button, entry):
        entry.set_text(rgba_to_hex(button.get_rgba()))

    def _on_entry_changed(self, entry, button):
        text = entry.get_text().strip()
        style = entry.get_style_context()
        if is_valid_hex(text):
            style.remove_class('invalid')
            button.set_rgba(hex_to_rgba(normalize_hex(text)))
        else:
            style.add_class('invalid')

    def get_colors(self):
        """Return the chosen (foreground, background) as '#rrggbb'."""
        return (rgba_to_hex(self.fg_button.get_rgba()),
                rgba_to_hex(self.bg_button.get_rgba()))

    def set_colors(self, foreground, background):
        self.fg_entry.set_text(foreground)
        self.bg_entry.set_text(background)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ViewerWindow
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ViewerWindow:
    """
    The LivePDF Viewer main window.

    Owns the Viewer core and its command loop task, and translates GTK
    events into viewer commands.
    """

    def __init__(self, application, filepath=None, viewer=None):
        """
        Args:
            application: The Gtk.Application owning the window.
            filepath: Optional path to a PDF file to open on startup.
            viewer: Optional Viewer (a default one is created).
        """
        # ── State ─────────────────────────────────────────────────────────
        self.lang = detect_system_language()
        self.viewer = viewer or Viewer()
        self.watcher = FileWatcher(self._on_file_changed)
        self._color_dialog = None
        self._fullscreen = False
        self._applied_colors = None

        self.viewer.on_frame = self._on_frame
        self.viewer.on_status = self._on_status
        self.viewer.on_error = self._on_error
        self.viewer.on_color_picker = self._on_color_picker

        # ── Build UI ──────────────────────────────────────────────────────
        self._build_window(application)
        self._build_menubar()
        self._build_canvas()
        self._build_statusbar()
        self._apply_colors()

        self.window.show_all()

        # ── Command loop ──────────────────────────────────────────────────
        self._loop_task = asyncio.get_running_loop().create_task(self.viewer.run())
        self.submit(commands.SetDevicePixelRatio(self.window.get_scale_factor()))

        if filepath:
            self.submit(commands.OpenDocument(filepath))

    def submit(self, command):
        self.viewer.submit(command)

    def send(self, channel, *args):
        """Submit a command by its channel name; unknown channels are logged."""
        try:
            command = commands.command_from_message(channel, *args)
        except UnknownCommandError as exc:
            logger.warning("%s", exc)
            return
        self.submit(command)

    # ══════════════════════════════════════════════════════════════════════════
    #  UI Construction
    # ══════════════════════════════════════════════════════════════════════════

    def _build_window(self, application):
        """Create the main application window."""
        self.window = Gtk.ApplicationWindow(application=application)
        self.window.set_title(get_text('title', self.lang))
        self.window.set_default_size(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)
        self.window.set_position(Gtk.WindowPosition.CENTER)

        self.window.connect('destroy', self._on_destroy)
        self.window.connect('key-press-event', self._on_key_press)
        self.window.connect('notify::scale-factor', self._on_scale_factor_changed)

        self.main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=0)
        self.window.add(self.main_box)

    def _build_menubar(self):
        """Create the File, View and Color Scheme menus."""
        menubar = Gtk.MenuBar()
        self.main_box.pack_start(menubar, False, False, 0)

        # ── File ──────────────────────────────────────────────────────────
        file_menu = self._add_menu(menubar, 'file')
        self._add_menu_item(file_menu, 'open', self._on_open)
        self.reload_item = self._add_menu_item(
            file_menu, 'reload', lambda w: self.send('reload'))
        self.reload_item.set_sensitive(False)
        file_menu.append(Gtk.SeparatorMenuItem())
        self._add_menu_item(file_menu, 'quit', lambda w: self.window.destroy())

        # ── View ──────────────────────────────────────────────────────────
        view_menu = self._add_menu(menubar, 'view')
        self._add_menu_item(view_menu, 'zoom_in', lambda w: self.send('zoom-in'))
        self._add_menu_item(view_menu, 'zoom_out', lambda w: self.send('zoom-out'))
        self._add_menu_item(view_menu, 'reset_zoom', lambda w: self.send('zoom-reset'))
        view_menu.append(Gtk.SeparatorMenuItem())
        self._add_menu_item(view_menu, 'fit_height', lambda w: self.send('fit-height'))
        self._add_menu_item(view_menu, 'fit_width', lambda w: self.send('fit-width'))
        view_menu.append(Gtk.SeparatorMenuItem())
        self._add_menu_item(view_menu, 'fullscreen', lambda w: self._toggle_fullscreen())

        # ── Color Scheme ──────────────────────────────────────────────────
        scheme_menu = self._add_menu(menubar, 'color_scheme')
        for theme in (THEME_LIGHT, THEME_DARK, THEME_SEPIA, THEME_CUSTOM):
            self._add_menu_item(
                scheme_menu, 'theme_' + theme,
                lambda w, name=theme: self.send('set-theme', name),
            )

    def _add_menu(self, menubar, label_key):
        item = Gtk.MenuItem(label=get_text(label_key, self.lang))
        menu = Gtk.Menu()
        item.set_submenu(menu)
        menubar.append(item)
        return menu

    def _add_menu_item(self, menu, label_key, callback):
        item = Gtk.MenuItem(label=get_text(label_key, self.lang))
        item.connect('activate', callback)
        menu.append(item)
        return item

    def _build_canvas(self):
        """Create the scrollable page canvas."""
        self.scrolled = Gtk.ScrolledWindow()
        self.scrolled.set_policy(
            Gtk.PolicyType.AUTOMATIC, Gtk.PolicyType.AUTOMATIC
        )
        self.scrolled.connect('size-allocate', self._on_viewport_allocate)
        self.main_box.pack_start(self.scrolled, True, True, 0)

        self.canvas = Gtk.DrawingArea()
        self.canvas.get_style_context().add_class('pdf-canvas')
        self.canvas.add_events(
            Gdk.EventMask.SCROLL_MASK |
            Gdk.EventMask.SMOOTH_SCROLL_MASK
        )
        self.canvas.connect('draw', self._on_canvas_draw)
        self.canvas.connect('scroll-event', self._on_canvas_scroll)

        self.scrolled.add(self.canvas)

    def _build_statusbar(self):
        """Create the status bar at the bottom."""
        self.statusbar = Gtk.Label()
        self.statusbar.set_halign(Gtk.Align.START)
        self.statusbar.set_margin_start(8)
        self.statusbar.set_margin_end(8)
        self.statusbar.set_margin_top(2)
        self.statusbar.set_margin_bottom(2)
        self.statusbar.get_style_context().add_class('statusbar')
        self.main_box.pack_start(self.statusbar, False, False, 0)
        self._update_status(get_text('no_file', self.lang))

    # ══════════════════════════════════════════════════════════════════════════
    #  File Operations
    # ══════════════════════════════════════════════════════════════════════════

    def _on_open(self, widget):
        """Show a file chooser and open the selected PDF."""
        chooser = Gtk.FileChooserDialog(
            title=get_text('open_file', self.lang),
            transient_for=self.window,
            action=Gtk.FileChooserAction.OPEN,
        )
        chooser.add_button(get_text('cancel', self.lang), Gtk.ResponseType.CANCEL)
        chooser.add_button(get_text('open_file', self.lang), Gtk.ResponseType.OK)

        ff = Gtk.FileFilter()
        ff.set_name(get_text('pdf_files', self.lang))
        ff.add_mime_type("application/pdf")
        ff.add_pattern("*.pdf")
        chooser.add_filter(ff)

        ff_all = Gtk.FileFilter()
        ff_all.set_name(get_text('all_files', self.lang))
        ff_all.add_pattern("*")
        chooser.add_filter(ff_all)

        chooser.connect('response', self._on_open_response)
        chooser.show()

    def _on_open_response(self, chooser, response):
        filename = chooser.get_filename() if response == Gtk.ResponseType.OK else None
        chooser.destroy()
        if filename:
            logger.info("Opening %s", filename)
            self.submit(commands.OpenDocument(filename))

    def _on_file_changed(self, path):
        self._update_file_tooltip(path)
        self.submit(commands.DocumentChanged(path))

    # ══════════════════════════════════════════════════════════════════════════
    #  Viewer Listeners
    # ══════════════════════════════════════════════════════════════════════════

    def _on_frame(self, frame):
        width, height = frame.logical_size
        self.canvas.set_size_request(
            int(width) + 2 * VIEWPORT_MARGIN, int(height) + 2 * VIEWPORT_MARGIN
        )
        self.canvas.queue_draw()

    def _on_status(self, status):
        self.reload_item.set_sensitive(status.reload_enabled)

        if status.path and status.path != self.watcher.path:
            self.watcher.watch(status.path)
            self._update_file_tooltip(status.path)

        if status.path:
            name = status.title or os.path.basename(status.path)
            self.window.set_title(f"{name} - {get_text('title', self.lang)}")
            self._update_status(
                f"{get_text('page', self.lang)} {status.page} "
                f"{get_text('of_pages', self.lang)} {status.page_count}"
                f"  |  {int(round(status.scale * 100))}%"
            )
        self._apply_colors()

    def _on_error(self, error):
        if isinstance(error, LoadError):
            self._show_error(get_text('load_failed', self.lang), str(error))
        else:
            self._show_error(get_text('error', self.lang), str(error))

    def _on_color_picker(self, scheme):
        if self._color_dialog is not None:
            self._color_dialog.present()
            return
        self._color_dialog = ColorPickerDialog(
            self.window, scheme.foreground, scheme.background, self.lang
        )
        self._color_dialog.connect('response', self._on_color_dialog_response)

    def _on_color_dialog_response(self, dialog, response):
        if response == Gtk.ResponseType.APPLY:
            self.submit(commands.ApplyCustomColors(*dialog.get_colors()))
            self._close_color_dialog(dialog)
        elif response == RESPONSE_RESET:
            dialog.set_colors(*DEFAULT_CUSTOM_COLORS)
            self.submit(commands.ResetCustomColors())
        else:
            self._close_color_dialog(dialog)

    def _close_color_dialog(self, dialog):
        dialog.destroy()
        self._color_dialog = None

    def _apply_colors(self):
        scheme = self.viewer.state.colors
        if scheme != self._applied_colors:
            apply_theme(scheme)
            self._applied_colors = scheme
            self.canvas.queue_draw()

    # ══════════════════════════════════════════════════════════════════════════
    #  Rendering
    # ══════════════════════════════════════════════════════════════════════════

    def _on_canvas_draw(self, widget, ctx):
        """Paint the current frame centred horizontally in the canvas."""
        frame = self.viewer.frame
        if frame is None:
            return False

        bitmap = frame.display_bitmap()
        surface = cairo.ImageSurface.create_for_data(
            bitmap.pixels, cairo.FORMAT_ARGB32,
            bitmap.width, bitmap.height, bitmap.stride,
        )
        surface.set_device_scale(frame.pixel_ratio, frame.pixel_ratio)

        logical_w, logical_h = frame.logical_size
        alloc_width = widget.get_allocated_width()
        x = max(VIEWPORT_MARGIN, (alloc_width - logical_w) / 2)
        y = VIEWPORT_MARGIN

        # Drop shadow
        ctx.set_source_rgba(0, 0, 0, 0.3)
        ctx.rectangle(x + 3, y + 3, logical_w, logical_h)
        ctx.fill()

        ctx.set_source_surface(surface, x, y)
        ctx.paint()
        return False

    def _on_viewport_allocate(self, widget, allocation):
        width = allocation.width - 2 * VIEWPORT_MARGIN
        height = allocation.height - 2 * VIEWPORT_MARGIN
        view = self.viewer.state.view
        if (width, height) != (view.viewport_width, view.viewport_height):
            self.submit(commands.ResizeViewport(width, height))

    def _on_scale_factor_changed(self, window, pspec):
        self.submit(commands.SetDevicePixelRatio(window.get_scale_factor()))

    # ══════════════════════════════════════════════════════════════════════════
    #  Mouse / Keyboard
    # ══════════════════════════════════════════════════════════════════════════

    def _on_canvas_scroll(self, widget, event):
        """Ctrl + scroll zooms; plain scrolling is left to the scrolled window."""
        if not event.state & Gdk.ModifierType.CONTROL_MASK:
            return False

        if event.direction == Gdk.ScrollDirection.UP:
            self.submit(commands.ZoomBy(WHEEL_ZOOM_DELTA))
        elif event.direction == Gdk.ScrollDirection.DOWN:
            self.submit(commands.ZoomBy(-WHEEL_ZOOM_DELTA))
        elif event.direction == Gdk.ScrollDirection.SMOOTH:
            _, dy = event.get_scroll_deltas()
            if dy < 0:
                self.submit(commands.ZoomBy(WHEEL_ZOOM_DELTA))
            elif dy > 0:
                self.submit(commands.ZoomBy(-WHEEL_ZOOM_DELTA))
        return True

    def _on_key_press(self, widget, event):
        """Handle global keyboard shortcuts."""
        command = self.command_for_key(event.keyval, event.state)
        if command is not None:
            self.submit(command)
            return True

        key = event.keyval
        ctrl = (event.state & Gdk.ModifierType.CONTROL_MASK) != 0
        if ctrl and key == Gdk.KEY_o:
            self._on_open(None)
            return True
        if key == Gdk.KEY_F11:
            self._toggle_fullscreen()
            return True
        return False

    @staticmethod
    def command_for_key(keyval, state):
        """Map a key press to a viewer command, or None."""
        state = state & Gtk.accelerator_get_default_mod_mask()
        ctrl = (state & Gdk.ModifierType.CONTROL_MASK) != 0

        if ctrl:
            if keyval == Gdk.KEY_r:
                return commands.Reload()
            if keyval in (Gdk.KEY_plus, Gdk.KEY_equal, Gdk.KEY_KP_Add):
                return commands.ZoomIn()
            if keyval in (Gdk.KEY_minus, Gdk.KEY_KP_Subtract):
                return commands.ZoomOut()
            if keyval == Gdk.KEY_0:
                return commands.ZoomReset()
            return None

        if keyval == Gdk.KEY_Left:
            return commands.PreviousPage()
        if keyval == Gdk.KEY_Right:
            return commands.NextPage()
        if keyval == Gdk.KEY_Home:
            return commands.FirstPage()
        if keyval == Gdk.KEY_End:
            return commands.LastPage()
        return None

    def _toggle_fullscreen(self):
        if self._fullscreen:
            self.window.unfullscreen()
        else:
            self.window.fullscreen()
        self._fullscreen = not self._fullscreen

    # ══════════════════════════════════════════════════════════════════════════
    #  Window Close
    # ══════════════════════════════════════════════════════════════════════════

    def _on_destroy(self, widget):
        logger.debug("Window closed, stopping viewer")
        self.watcher.stop()
        self._loop_task.cancel()
        self.viewer.state.session.close()

    # ══════════════════════════════════════════════════════════════════════════
    #  Utility
    # ══════════════════════════════════════════════════════════════════════════

    def _update_status(self, text):
        """Update the status bar text."""
        self.statusbar.set_text(text)

    def _update_file_tooltip(self, path):
        info = document_info(path)
        if info is None:
            self.statusbar.set_tooltip_text(None)
            return
        modified = time.strftime("%Y-%m-%d %H:%M", time.localtime(info.modified))
        self.statusbar.set_tooltip_text(
            f"{info.path}\n{info.size // 1024} KiB  |  {modified}"
        )

    def _show_error(self, title, message):
        """Show a non-blocking error message dialog."""
        dialog = Gtk.MessageDialog(
            transient_for=self.window,
            modal=True,
            message_type=Gtk.MessageType.ERROR,
            buttons=Gtk.ButtonsType.OK,
            text=title,
        )
        dialog.format_secondary_text(message)
        dialog.connect('response', lambda d, r: d.destroy())
        dialog.show()
