"""
Unit tests for pdfscout data models.
"""

import json

import pytest

from pdfscout.models import (
    DocumentMetadata,
    MatchSnippet,
    OutlineNode,
    OutlineResult,
    PageSearchResult,
    PageText,
    SearchEnvelope,
    SearchStrategy,
    StopReason,
    TextExtraction,
    TextMatch,
)


def make_envelope(**overrides) -> SearchEnvelope:
    values = dict(
        matches=(
            PageSearchResult(page=2, match_count=2, snippets=(MatchSnippet("a budget", 2, 8),)),
            PageSearchResult(page=4, match_count=1),
        ),
        errors=("Page 3: No text extracted",),
        pages_scanned=4,
        completed=True,
        stopped_reason=StopReason.COMPLETED,
        search_strategy=SearchStrategy.EXTRACT_ALL,
        search_pattern="budget",
        is_regex=False,
        context_chars=150,
        timeout_ms=10_000,
        total_pages_in_range=4,
    )
    values.update(overrides)
    return SearchEnvelope(**values)


class TestSearchModels:
    """Test search result values."""

    def test_text_match_length(self):
        """len() of a match is its span."""
        assert len(TextMatch(start=3, end=9, text="budget")) == 6

    def test_snippet_matched_text(self):
        """matched_text slices the snippet."""
        snippet = MatchSnippet(text="the budget was", match_start=4, match_end=10)
        assert snippet.matched_text == "budget"

    def test_envelope_totals(self):
        """Totals derive from the per-page results."""
        envelope = make_envelope()
        assert envelope.total_matches == 3
        assert envelope.pages_with_matches == 2

    def test_envelope_is_frozen(self):
        """Envelopes cannot be modified after construction."""
        envelope = make_envelope()
        with pytest.raises(AttributeError):
            envelope.pages_scanned = 10

    def test_envelope_serializes_to_json(self):
        """to_dict output is JSON-serializable with enum values as strings."""
        data = make_envelope(
            stopped_reason=StopReason.MAX_PAGES, search_strategy=SearchStrategy.PAGE_BY_PAGE
        ).to_dict()
        decoded = json.loads(json.dumps(data))
        assert decoded["summary"]["stopped_reason"] == "max_pages"
        assert decoded["summary"]["search_strategy"] == "page_by_page"
        assert decoded["summary"]["errors"] == 1
        assert decoded["matches"][1]["snippets"] == []


class TestOutlineModels:
    """Test outline values."""

    def test_node_to_dict_nested(self):
        """Children serialize recursively."""
        node = OutlineNode(
            "Chapter", level=0, page=3, children=[OutlineNode("Section", level=1)]
        )
        data = node.to_dict()
        assert data["page"] == 3
        assert data["children"] == [
            {"title": "Section", "level": 1, "bold": False, "italic": False}
        ]

    def test_result_defaults(self):
        """A result without bookmarks has an empty zero summary."""
        data = OutlineResult(has_outline=False).to_dict()
        assert data["outline_items"] == []
        assert data["summary"] == {
            "total_items": 0,
            "max_depth": 0,
            "items_with_pages": 0,
            "items_with_urls": 0,
        }


class TestDocumentModels:
    """Test metadata and text values."""

    def test_file_size_mb(self):
        """Sizes are reported in megabytes with two decimals."""
        meta = DocumentMetadata(file_path="x.pdf", pages=1, file_size_bytes=1_572_864)
        assert meta.file_size_mb == 1.5
        assert meta.to_dict()["file_size_mb"] == 1.5

    def test_text_extraction_joins_pages(self):
        """text joins non-empty pages with blank lines."""
        extraction = TextExtraction(
            file_path="x.pdf",
            total_pages=3,
            strategy="native",
            pages=[PageText(1, "one"), PageText(2, ""), PageText(3, "three")],
        )
        assert extraction.text == "one\n\nthree"
        data = extraction.to_dict()
        assert data["extracted_pages"] == [1, 2, 3]
        assert data["pages"][2]["char_count"] == 5
