#!/usr/bin/env python3
"""
Basic pdfscout Usage Example

This example demonstrates the core workflow:
1. Inspect a document before reading it
2. Pull text from selected pages only
3. Search with literal and regex patterns, stopping early
4. Walk the bookmark tree
"""

import sys

import pdfscout
from pdfscout import OutlineConfig, SearchConfig


def main(path: str):
    # ─────────────────────────────────────────────────────────────────────────
    # 1. Metadata
    # ─────────────────────────────────────────────────────────────────────────

    meta = pdfscout.get_metadata(path)
    print(f"{meta.title or path}: {meta.pages} pages, {meta.file_size_mb} MB")

    # ─────────────────────────────────────────────────────────────────────────
    # 2. Selective Text
    # ─────────────────────────────────────────────────────────────────────────

    # First two pages plus the last page
    extraction = pdfscout.extract_text(path, f"1:2,{meta.pages}")
    for page in extraction.pages:
        print(f"  Page {page.page}: {page.char_count:,} characters")
    for warning in extraction.warnings:
        print(f"  Warning: {warning}")

    # ─────────────────────────────────────────────────────────────────────────
    # 3. Search
    # ─────────────────────────────────────────────────────────────────────────

    # Literal text is case-insensitive
    envelope = pdfscout.search(path, "introduction")
    print(f"'introduction': {envelope.total_matches} matches on {envelope.pages_with_matches} pages")

    # Regex with flags; stop once five matches are found
    envelope = pdfscout.search(
        path,
        r"/\b(19|20)\d{2}\b/g",
        search_config=SearchConfig(max_results=5, context_chars=40),
    )
    print(f"Years: stopped ({envelope.stopped_reason.value}) after {envelope.pages_scanned} pages")
    for result in envelope.matches:
        for snippet in result.snippets:
            print(f"  p.{result.page}: ...{snippet.text}...")

    # ─────────────────────────────────────────────────────────────────────────
    # 4. Outline
    # ─────────────────────────────────────────────────────────────────────────

    outline = pdfscout.get_outline(path, OutlineConfig(max_depth=2, flatten=True))
    if not outline.has_outline:
        print("No bookmarks")
        return
    for node in outline.items:
        indent = "  " * node.level
        print(f"{indent}{node.title} (p.{node.page if node.page else '?'})")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit("usage: basic_usage.py FILE.pdf")
    main(sys.argv[1])
