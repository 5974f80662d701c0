"""Document backend on PyMuPDF.

See pdf_reader.PDFBackend for the operations the query engine relies on.
"""

from pdfscout.readers.images import encode_pixmap, fit_within, pixmap_to_image
from pdfscout.readers.pdf_reader import PDFBackend, parse_pdf_date, route_mupdf_messages

__all__ = [
    # Classes
    "PDFBackend",
    # Utility functions
    "route_mupdf_messages",
    "parse_pdf_date",
    "encode_pixmap",
    "fit_within",
    "pixmap_to_image",
]
