"""
Unit tests for outline normalization.

Raw outlines are built by hand, so these tests need no PDF.
"""

import pytest

from pdfscout.config import OutlineConfig
from pdfscout.models import RawOutlineItem
from pdfscout.normalizers.outline import (
    OutlineNormalizer,
    flatten_outline,
    normalize_outline,
    serialize_destination,
)


def three_level_tree() -> list[RawOutlineItem]:
    """Chapter → Section → Subsection, twice."""
    return [
        RawOutlineItem(
            f"Chapter {c}",
            dest={"page": c - 1},
            children=[
                RawOutlineItem(
                    f"Section {c}.1",
                    dest={"page": c},
                    children=[RawOutlineItem(f"Subsection {c}.1.1", dest={"page": c + 1})],
                )
            ],
        )
        for c in (1, 2)
    ]


def page_from_dest(dest):
    return dest["page"] + 1


class TestEmptyOutline:
    """Test documents without bookmarks."""

    @pytest.mark.parametrize("raw", [None, []])
    def test_no_outline(self, raw):
        """No bookmarks gives has_outline=False and a zero summary."""
        result = normalize_outline(raw)
        assert result.has_outline is False
        assert result.items == []
        summary = result.summary
        assert (summary.total_items, summary.max_depth) == (0, 0)
        assert (summary.items_with_pages, summary.items_with_urls) == (0, 0)


class TestLevelsAndDepth:
    """Test level assignment and truncation."""

    def test_levels_start_at_zero(self):
        """Top-level nodes are level 0, children level 1, and so on."""
        result = normalize_outline(three_level_tree())
        chapter = result.items[0]
        assert chapter.level == 0
        assert chapter.children[0].level == 1
        assert chapter.children[0].children[0].level == 2
        assert result.summary.max_depth == 3
        assert result.summary.total_items == 6

    def test_max_depth_one_keeps_top_level_only(self):
        """max_depth=1 drops everything below the top level."""
        result = normalize_outline(three_level_tree(), max_depth=1)
        assert [n.title for n in result.items] == ["Chapter 1", "Chapter 2"]
        assert all(n.children == [] for n in result.items)
        assert result.summary.total_items == 2
        assert result.summary.max_depth == 1

    def test_max_depth_two_drops_grandchildren(self):
        """Grandchildren are absent and excluded from the summary."""
        result = normalize_outline(three_level_tree(), max_depth=2)
        section = result.items[0].children[0]
        assert section.title == "Section 1.1"
        assert section.children == []
        assert result.summary.total_items == 4
        assert result.summary.max_depth == 2

    def test_leaf_children_is_none(self):
        """Bookmarks without children keep children=None."""
        result = normalize_outline([RawOutlineItem("Only")])
        assert result.items[0].children is None
        assert "children" not in result.items[0].to_dict()

    def test_depth_ceiling_applies_without_max_depth(self):
        """Recursion stops at the ceiling even with no max_depth."""
        root = RawOutlineItem("level 0")
        node = root
        for level in range(1, 80):
            child = RawOutlineItem(f"level {level}")
            node.children.append(child)
            node = child

        result = OutlineNormalizer(depth_ceiling=50).normalize([root])
        assert result.summary.max_depth == 50
        assert result.summary.total_items == 50

    def test_self_containing_item_is_skipped(self):
        """A bookmark inside its own subtree does not loop forever."""
        loop = RawOutlineItem("Loop")
        loop.children.append(loop)

        result = normalize_outline([loop])
        assert result.summary.total_items == 1
        assert result.items[0].children == []


class TestFlatten:
    """Test flattening."""

    def test_flatten_preorder_keeps_levels(self):
        """3 parents with 2 children each flatten to 9 items in pre-order."""
        raw = [
            RawOutlineItem(f"P{p}", children=[RawOutlineItem(f"P{p}.C{c}") for c in (1, 2)])
            for p in (1, 2, 3)
        ]
        result = normalize_outline(raw, flatten=True)

        assert [n.title for n in result.items] == [
            "P1", "P1.C1", "P1.C2",
            "P2", "P2.C1", "P2.C2",
            "P3", "P3.C1", "P3.C2",
        ]  # fmt: skip
        assert [n.level for n in result.items] == [0, 1, 1] * 3
        assert all(n.children is None for n in result.items)
        assert result.summary.total_items == 9
        assert result.summary.max_depth == 2

    def test_flatten_after_truncation(self):
        """Truncation happens before flattening."""
        result = normalize_outline(three_level_tree(), max_depth=2, flatten=True)
        assert len(result.items) == 4
        assert max(n.level for n in result.items) == 1

    def test_flatten_outline_does_not_mutate(self):
        """Flattening leaves the tree intact."""
        tree = normalize_outline(three_level_tree()).items
        flat = flatten_outline(tree)
        assert len(flat) == 6
        assert tree[0].children is not None


class TestDestinations:
    """Test destination handling."""

    def test_pages_resolve(self):
        """Resolved destinations become 1-based pages."""
        result = normalize_outline(three_level_tree(), resolve_destination=page_from_dest)
        chapter = result.items[0]
        assert chapter.page == 1
        assert chapter.destination == serialize_destination({"page": 0})
        assert result.summary.items_with_pages == 6

    def test_without_resolver_pages_are_absent(self):
        """Without a resolver nodes keep only the serialized destination."""
        result = normalize_outline(three_level_tree())
        assert result.items[0].page is None
        assert result.items[0].destination is not None
        assert result.summary.items_with_pages == 0

    def test_include_destinations_false(self):
        """Destinations are dropped entirely when not requested."""
        result = normalize_outline(
            three_level_tree(), include_destinations=False, resolve_destination=page_from_dest
        )
        node = result.items[0]
        assert node.page is None
        assert node.destination is None
        assert "page" not in node.to_dict()

    def test_resolver_failure_is_tolerated(self):
        """A failing resolver leaves the page unset without aborting."""

        def broken(dest):
            raise KeyError("no such destination")

        result = normalize_outline(three_level_tree(), resolve_destination=broken)
        assert result.summary.total_items == 6
        assert result.items[0].page is None

    def test_unresolvable_destination(self):
        """A resolver returning None leaves the page unset."""
        result = normalize_outline(three_level_tree(), resolve_destination=lambda dest: None)
        assert result.summary.items_with_pages == 0

    def test_serialize_destination_is_stable(self):
        """Dictionary key order does not change the serialization."""
        assert serialize_destination({"b": 1, "a": 2}) == serialize_destination({"a": 2, "b": 1})


class TestStyleAndLinks:
    """Test style and URL fields."""

    def test_style_fields(self):
        """bold, italic and color carry over."""
        raw = [RawOutlineItem("Styled", bold=True, italic=True, color=(1.0, 0.0, 0.0))]
        node = normalize_outline(raw).items[0]
        assert node.bold and node.italic
        assert node.color == (1.0, 0.0, 0.0)
        assert node.to_dict()["color"] == [1.0, 0.0, 0.0]

    def test_bad_color_is_dropped(self):
        """Colors that are not RGB triples are ignored."""
        node = normalize_outline([RawOutlineItem("Odd", color=(0.5,))]).items[0]
        assert node.color is None

    def test_urls_are_counted(self):
        """Link bookmarks count toward items_with_urls."""
        raw = [RawOutlineItem("Site", url="https://example.org"), RawOutlineItem("Plain")]
        result = normalize_outline(raw)
        assert result.items[0].url == "https://example.org"
        assert result.summary.items_with_urls == 1

    def test_to_dict_minimal(self):
        """Absent optional fields are omitted."""
        data = normalize_outline([RawOutlineItem("Plain")]).items[0].to_dict()
        assert data == {"title": "Plain", "level": 0, "bold": False, "italic": False}


class TestNormalizerConfig:
    """Test the class interface."""

    def test_file_path_is_echoed(self):
        """file_path appears in the result."""
        result = OutlineNormalizer().normalize(
            three_level_tree(), OutlineConfig(), file_path="/tmp/report.pdf"
        )
        assert result.to_dict()["file_path"] == "/tmp/report.pdf"
        assert result.to_dict()["has_outline"] is True
