"""
LivePDF Viewer - Document Session

Uses poppler-glib (gi.repository.Poppler) to decode PDF files.

Provides:
  - PDFDocument:     an opened Poppler document with page accessors.
  - DocumentSession: the loaded document plus the current page; a new
                     session replaces the old one on every open/reload.
  - document_info:   size/mtime of a document file on disk.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import gi
gi.require_version('Poppler', '0.18')
from gi.repository import GLib, Poppler

from .errors import LoadError

logger = logging.getLogger(__name__)


class PDFDocument:
    """
    Wrapper around a Poppler.Document with convenience accessors.

    Attributes:
        uri:       The file URI of the loaded document.
        filepath:  The absolute filesystem path of the document.
        document:  The underlying Poppler.Document (None once closed).
        n_pages:   Number of pages in the document.
    """

    def __init__(self, filepath, uri, document):
        self.filepath = filepath
        self.uri = uri
        self.document = document
        self.n_pages = document.get_n_pages()

    @classmethod
    def open(cls, filepath):
        """
        Decode a PDF file from disk.

        Args:
            filepath: Absolute or relative path to a PDF file.

        Returns:
            A new PDFDocument.

        Raises:
            LoadError: If the file is missing, unreadable, or not a PDF
                       Poppler can parse.
        """
        filepath = os.path.abspath(filepath)
        if not os.path.isfile(filepath):
            raise LoadError(filepath, "file not found")
        if not os.access(filepath, os.R_OK):
            raise LoadError(filepath, "permission denied")

        try:
            uri = GLib.filename_to_uri(filepath, None)
            doc = Poppler.Document.new_from_file(uri, None)
        except GLib.Error as exc:
            raise LoadError(filepath, exc.message) from exc

        if doc is None:
            raise LoadError(filepath, "unsupported format")
        pdf = cls(filepath, uri, doc)
        if pdf.n_pages < 1:
            raise LoadError(filepath, "document has no pages")
        return pdf

    def get_page(self, index):
        """
        Return the Poppler.Page at the given 0-based index.

        Returns:
            Poppler.Page or None if index is out of range.
        """
        if self.document is None or index < 0 or index >= self.n_pages:
            return None
        return self.document.get_page(index)

    def get_title(self):
        """Return the document title or the filename."""
        if self.document is None:
            return ""
        title = self.document.get_property('title')
        if title:
            return title
        return os.path.basename(self.filepath)

    def close(self):
        """Drop the Poppler document so its memory can be reclaimed."""
        self.document = None


@dataclass
class DocumentInfo:
    """File-system facts about a document."""

    path: str
    size: int
    modified: float


def document_info(path) -> Optional[DocumentInfo]:
    """Stat a document file; None if it cannot be read."""
    try:
        stats = os.stat(path)
    except OSError as exc:
        logger.warning("Cannot stat %s: %s", path, exc)
        return None
    return DocumentInfo(path=os.path.abspath(path), size=stats.st_size,
                        modified=stats.st_mtime)


@dataclass
class DocumentSession:
    """
    The loaded document and the reader's position in it.

    An empty session (no handle) exists at startup. Loading never mutates
    a session in place: open() builds a new one and the caller closes the
    previous session when installing it.

    Attributes:
        path:         Absolute path the document was loaded from.
        handle:       Opaque decoded document (a PDFDocument in production).
        page_count:   Number of pages, fixed once the handle is set.
        current_page: 1-based page index; 0 only for an empty session.
    """

    path: Optional[str] = None
    handle: Any = None
    page_count: int = 0
    current_page: int = 0

    @classmethod
    def open(cls, path, loader=PDFDocument.open):
        """
        Load a document into a fresh session positioned on page 1.

        Args:
            path: Document path.
            loader: Callable(path) -> handle exposing n_pages and
                    get_page(index); raises LoadError on failure.

        Raises:
            LoadError: Propagated from the loader.
        """
        path = os.path.abspath(path)
        handle = loader(path)
        page_count = int(handle.n_pages)
        if page_count < 1:
            raise LoadError(path, "document has no pages")
        logger.info("Loaded %s (%d pages)", path, page_count)
        return cls(path=path, handle=handle, page_count=page_count, current_page=1)

    @property
    def is_loaded(self):
        return self.handle is not None

    @property
    def title(self):
        """Caption for the window: the PDF title or the file name."""
        if not self.is_loaded:
            return ""
        get_title = getattr(self.handle, 'get_title', None)
        title = get_title() if get_title is not None else ""
        return title or os.path.basename(self.path)

    def contains(self, page_number):
        """Return True if a 1-based page number is inside the document."""
        return self.is_loaded and 1 <= page_number <= self.page_count

    def current_page_handle(self):
        """Return the page object for the current page, or None."""
        if not self.is_loaded:
            return None
        return self.handle.get_page(self.current_page - 1)

    def page_size(self):
        """Return the intrinsic (width, height) of the current page."""
        page = self.current_page_handle()
        if page is None:
            return (0.0, 0.0)
        return page.get_size()

    def close(self):
        """Release the document handle."""
        if self.handle is not None and hasattr(self.handle, 'close'):
            self.handle.close()
        self.handle = None
