#!/usr/bin/env python3
"""LivePDF Viewer - Entry point"""

import asyncio
import sys

import gi

gi.require_version("Gtk", "3.0")
from gi.events import GLibEventLoopPolicy
from gi.repository import Gio, Gtk

from . import __app_id__
from .app import ViewerWindow
from .log import setup_logging


def main(argv=None):
    argv = sys.argv if argv is None else argv
    filepath = argv[1] if len(argv) > 1 else None

    setup_logging()
    asyncio.set_event_loop_policy(GLibEventLoopPolicy())

    app = Gtk.Application(
        application_id=__app_id__,
        flags=Gio.ApplicationFlags.NON_UNIQUE,
    )
    app.connect("activate", lambda a: setattr(a, "viewer_window", ViewerWindow(a, filepath)))
    return app.run(argv[:1])


if __name__ == "__main__":
    sys.exit(main())
