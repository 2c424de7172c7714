"""
LivePDF Viewer - File Watcher

Watches the open document with a Gio file monitor and reports writes
and re-creations (editors that save by rename) through a callback. The
callback runs on the GLib main loop.
"""

import logging

import gi
gi.require_version('Gio', '2.0')
from gi.repository import Gio

logger = logging.getLogger(__name__)

# Events that mean "the file has new contents".
CHANGE_EVENTS = (
    Gio.FileMonitorEvent.CHANGES_DONE_HINT,
    Gio.FileMonitorEvent.CREATED,
)


class FileWatcher:
    """
    Monitor a single file for changes.

    Args:
        on_change: Callable(path) invoked for every completed change.
    """

    def __init__(self, on_change):
        self.on_change = on_change
        self.path = None
        self._monitor = None
        self._handler_id = None

    @property
    def active(self):
        return self._monitor is not None

    def watch(self, path):
        """Start watching `path`, replacing any previous watch."""
        self.stop()
        gfile = Gio.File.new_for_path(path)
        self._monitor = gfile.monitor_file(Gio.FileMonitorFlags.NONE, None)
        self._handler_id = self._monitor.connect('changed', self._on_changed)
        self.path = path
        logger.debug("Watching %s", path)

    def stop(self):
        """Cancel the current watch, if any."""
        if self._monitor is None:
            return
        if self._handler_id is not None:
            self._monitor.disconnect(self._handler_id)
        self._monitor.cancel()
        logger.debug("Stopped watching %s", self.path)
        self._monitor = None
        self._handler_id = None
        self.path = None

    def _on_changed(self, monitor, gfile, other_file, event_type):
        if event_type not in CHANGE_EVENTS or self.path is None:
            return
        logger.info("File changed: %s (%s)", self.path, event_type)
        self.on_change(self.path)
