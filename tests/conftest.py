"""
Pytest configuration and fixtures for pdfscout tests.

Sample PDFs are generated with PyMuPDF into a temporary directory, so
the suite needs no checked-in binaries.
"""

from __future__ import annotations

from pathlib import Path

import pymupdf
import pytest

# Page texts of the report fixture. Page 3 is intentionally blank.
REPORT_PAGES = [
    "Annual Report\nIntroduction to the fiscal year.",
    "The budget was approved in March.\nBudget review follows.",
    "",
    "Forecast: revenue grows.\nThe BUDGET forecast is stable.",
    "Appendix with budget tables.",
]

REPORT_TOC = [
    [1, "Introduction", 1],
    [2, "Scope", 1],
    [1, "Budget", 2],
    [2, "Approval", 2],
    [3, "Details", 2],
    [1, "Appendix", 5],
]


def make_pdf(
    path: Path,
    pages: list[str],
    *,
    toc: list[list] | None = None,
    metadata: dict[str, str] | None = None,
    **save_options,
) -> Path:
    """Write a PDF with one page per entry of `pages`."""
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    if toc:
        doc.set_toc(toc)
    if metadata:
        doc.set_metadata(metadata)
    doc.save(str(path), **save_options)
    doc.close()
    return path


@pytest.fixture
def report_pdf(tmp_path) -> Path:
    """5-page report with a 3-level outline and one blank page."""
    return make_pdf(
        tmp_path / "report.pdf",
        REPORT_PAGES,
        toc=REPORT_TOC,
        metadata={"title": "Quarterly Report", "author": "Finance Team"},
    )


@pytest.fixture
def plain_pdf(tmp_path) -> Path:
    """2-page document without bookmarks."""
    return make_pdf(tmp_path / "plain.pdf", ["First page text.", "Second page text."])


@pytest.fixture
def encrypted_pdf(tmp_path) -> Path:
    """Document that needs a user password."""
    return make_pdf(
        tmp_path / "locked.pdf",
        ["Secret contents."],
        encryption=pymupdf.PDF_ENCRYPT_AES_256,
        user_pw="secret",
        owner_pw="owner-secret",
    )


@pytest.fixture
def not_a_pdf(tmp_path) -> Path:
    """A file with a .pdf name that is not a PDF."""
    path = tmp_path / "fake.pdf"
    path.write_bytes(b"\x00\x01 definitely not a pdf \x02\x03")
    return path


@pytest.fixture
def query_config(tmp_path):
    """QueryConfig whose home directory lives in tmp_path."""
    from pdfscout import QueryConfig

    return QueryConfig(home_dir=tmp_path / "pdf-home")
