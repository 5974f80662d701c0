"""
PDF backend using PyMuPDF.

This is the only module that touches PDF internals. It answers four
questions about an opened document: how many pages, what text is on a
page, what the raw bookmark tree looks like, and which page a bookmark
destination points to. Metadata and page rendering ride along.

MuPDF reports problems with malformed files on its own message channel,
which writes to stdout unless redirected. Applications that own stdout
call route_mupdf_messages() once at startup to send it to logging.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pymupdf

from pdfscout.config import DEFAULT_MAX_FILE_SIZE, ImageConfig
from pdfscout.exceptions import DocumentError
from pdfscout.models import PageImage, RawOutlineItem
from pdfscout.readers.images import encode_pixmap

logger = logging.getLogger(__name__)

_PDF_DATE = re.compile(
    r"^D?:?(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?"
    r"(?:(Z)|([+-])(\d{2})'?(\d{2})?'?)?"
)


def route_mupdf_messages() -> None:
    """Send MuPDF warnings and errors to the "pymupdf" logger instead of stdout."""
    pymupdf.set_messages(pylogging=True)


def parse_pdf_date(value: str | None) -> str | None:
    """Convert a PDF date ("D:20240131120000+01'00'") to ISO 8601.

    Returns None for missing or corrupted dates.
    """
    if not value:
        return None
    m = _PDF_DATE.match(value.strip())
    if not m:
        return None
    year, month, day, hour, minute, second, zulu, sign, tz_h, tz_m = m.groups()
    try:
        tz = None
        if zulu:
            tz = timezone.utc
        elif sign:
            offset = timedelta(hours=int(tz_h), minutes=int(tz_m or 0))
            tz = timezone(offset if sign == "+" else -offset)
        parsed = datetime(
            int(year),
            int(month or 1),
            int(day or 1),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            tzinfo=tz,
        )
    except ValueError:
        return None
    return parsed.isoformat()


class PDFBackend:
    """
    One opened PDF document.

    Usage:
        with PDFBackend.open("/path/to/file.pdf") as backend:
            text = backend.get_page_text(3)
            outline = backend.get_raw_outline()
    """

    def __init__(self, doc: pymupdf.Document, path: Path):
        self._doc = doc
        self.path = path
        self._named_destinations: dict[str, Any] | None = None

    @classmethod
    def open(cls, path: str | Path, *, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> PDFBackend:
        """
        Open a PDF file.

        Args:
            path: Path to PDF file.
            max_file_size: Files larger than this many bytes are refused.

        Returns:
            An open backend; close it (or use it as a context manager).

        Raises:
            DocumentError: If the file is missing, too large, or not a readable PDF.
        """
        path = Path(path)
        if not path.exists():
            raise DocumentError(
                f"PDF file not found at {path}. "
                "Please check the file path and ensure the file exists."
            )
        if not path.is_file():
            raise DocumentError(f"Not a file: {path}")

        size = path.stat().st_size
        if size > max_file_size:
            raise DocumentError(
                f"File too large: {size / 1024 / 1024:.1f}MB "
                f"(max {max_file_size / 1024 / 1024:.0f}MB). "
                "Please reduce file size or use a smaller PDF."
            )

        try:
            doc = pymupdf.open(path)
        except Exception as e:
            raise DocumentError(f"Failed to open PDF {path}: {e}") from e

        if not doc.is_pdf:
            doc.close()
            raise DocumentError(f"Not a PDF document: {path}")

        # Some encrypted files accept an empty user password
        if doc.needs_pass and not doc.authenticate(""):
            doc.close()
            raise DocumentError(f"PDF is password protected: {path}")

        logger.debug("Opened %s (%d pages)", path, len(doc))
        return cls(doc, path)

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> PDFBackend:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""
        return len(self._doc)

    def _page(self, page_number: int) -> pymupdf.Page:
        if not 1 <= page_number <= self.page_count:
            raise DocumentError(
                f"Page {page_number} out of range (document has {self.page_count} pages)"
            )
        return self._doc[page_number - 1]

    # ─────────────────────────────────────────────────────────────────────────
    # Text
    # ─────────────────────────────────────────────────────────────────────────

    def get_page_text(
        self,
        page_number: int,
        *,
        preserve_formatting: bool = True,
        line_breaks: bool = True,
    ) -> str:
        """
        Extract the text of a 1-based page.

        Pages without a text layer, and pages whose extraction fails,
        yield "" so a caller can treat them as "nothing to find".

        Args:
            page_number: 1-based page number.
            preserve_formatting: Keep runs of whitespace as laid out.
            line_breaks: Keep line breaks; otherwise lines are joined with spaces.

        Raises:
            DocumentError: If page_number is outside the document.
        """
        page = self._page(page_number)

        flags = pymupdf.TEXTFLAGS_TEXT
        if preserve_formatting:
            flags |= pymupdf.TEXT_PRESERVE_WHITESPACE

        try:
            text = page.get_text("text", flags=flags)
        except Exception as e:
            logger.warning("Failed to extract text from page %d: %s", page_number, e)
            return ""

        if not preserve_formatting:
            text = re.sub(r"[ \t]+", " ", text)
        if not line_breaks:
            text = re.sub(r"\s*\n\s*", " ", text)
        return text.strip()

    # ─────────────────────────────────────────────────────────────────────────
    # Outline
    # ─────────────────────────────────────────────────────────────────────────

    def get_raw_outline(self) -> list[RawOutlineItem] | None:
        """
        Read the bookmark tree.

        PyMuPDF reports bookmarks as a flat list of [level, title, page,
        dest]; the tree is rebuilt from the levels. A level that jumps by
        more than one attaches to the nearest shallower bookmark.

        Returns:
            Top-level bookmarks, or None if the document has none.
        """
        try:
            toc = self._doc.get_toc(simple=False)
        except Exception as e:
            # Some PDFs have malformed outlines
            logger.warning("Failed to read outline of %s: %s", self.path, e)
            return None

        if not toc:
            return None

        roots: list[RawOutlineItem] = []
        stack: list[tuple[int, RawOutlineItem]] = []

        for entry in toc:
            level, title, page = entry[0], entry[1], entry[2]
            info = dict(entry[3]) if len(entry) > 3 and entry[3] else {}
            item = self._raw_item(title, page, info)

            while stack and stack[-1][0] >= level:
                stack.pop()
            if stack:
                stack[-1][1].children.append(item)
            else:
                roots.append(item)
            stack.append((level, item))

        return roots

    @staticmethod
    def _raw_item(title: str, page: int, info: dict[str, Any]) -> RawOutlineItem:
        kind = info.get("kind", pymupdf.LINK_NONE)
        url = info.get("uri") if kind == pymupdf.LINK_URI else None

        dest: dict[str, Any] | None = None
        if kind not in (pymupdf.LINK_NONE, pymupdf.LINK_URI):
            style_keys = ("bold", "italic", "color", "collapse")
            dest = {k: v for k, v in info.items() if k not in style_keys}
            dest.setdefault("page", page - 1)

        color = info.get("color")
        if color is not None and len(color) != 3:
            color = None

        return RawOutlineItem(
            title=(title or "").strip(),
            dest=dest,
            url=url,
            bold=bool(info.get("bold", False)),
            italic=bool(info.get("italic", False)),
            color=tuple(color) if color is not None else None,
        )

    def resolve_destination(self, dest: Any) -> int | None:
        """
        Map a raw bookmark destination to a 1-based page number.

        Handles direct page targets and named destinations. Returns None
        when the destination points nowhere inside this document.
        """
        if not isinstance(dest, dict):
            return None
        if dest.get("kind") == pymupdf.LINK_GOTOR:
            # Target lives in another file
            return None

        page_index = dest.get("page", -1)
        if isinstance(page_index, int) and 0 <= page_index < self.page_count:
            return page_index + 1

        name = dest.get("nameddest") or dest.get("name")
        if name:
            target = self._resolve_names().get(name)
            if target and 0 <= target.get("page", -1) < self.page_count:
                return target["page"] + 1
        return None

    def _resolve_names(self) -> dict[str, Any]:
        if self._named_destinations is None:
            self._named_destinations = self._doc.resolve_names()
        return self._named_destinations

    # ─────────────────────────────────────────────────────────────────────────
    # Metadata and rendering
    # ─────────────────────────────────────────────────────────────────────────

    def get_metadata(self) -> dict[str, Any]:
        """Extract PDF metadata."""
        meta = self._doc.metadata or {}
        return {
            "title": meta.get("title") or None,
            "author": meta.get("author") or None,
            "subject": meta.get("subject") or None,
            "creator": meta.get("creator") or None,
            "producer": meta.get("producer") or None,
            "creation_date": parse_pdf_date(meta.get("creationDate")),
            "modification_date": parse_pdf_date(meta.get("modDate")),
            "encrypted": bool(meta.get("encryption")),
        }

    def render_page(self, page_number: int, config: ImageConfig | None = None) -> PageImage:
        """
        Rasterize a 1-based page.

        Raises:
            DocumentError: If page_number is outside the document.
        """
        config = config or ImageConfig()
        page = self._page(page_number)
        pix = page.get_pixmap(dpi=config.dpi, alpha=False)
        data, width, height = encode_pixmap(pix, config)
        return PageImage(
            page=page_number,
            mime_type=f"image/{config.format}",
            data=data,
            width=width,
            height=height,
        )
