"""
Outline (bookmark tree) normalization.

Turns the backend's raw bookmark tree into OutlineNode values:

- levels start at 0 for top-level bookmarks and grow by one per nesting
- children below `max_depth` are dropped silently (truncation, not an error)
- recursion never goes past OUTLINE_DEPTH_CEILING, requested or not
- a bookmark that appears inside its own subtree is skipped
- destinations resolve to page numbers on a best-effort basis; a node
  whose destination cannot be resolved simply has no page

Flattening lists the tree in pre-order, keeps each node's original
level and drops `children`. Summary counts always describe the final
collection, after truncation and flattening.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from pdfscout.config import OUTLINE_DEPTH_CEILING, OutlineConfig
from pdfscout.models import OutlineNode, OutlineResult, OutlineSummary, RawOutlineItem

logger = logging.getLogger(__name__)

# Maps a raw destination descriptor to a 1-based page number
DestinationResolver = Callable[[Any], int | None]


def serialize_destination(dest: Any) -> str:
    """Stable JSON text for a raw destination descriptor."""
    return json.dumps(dest, default=str, sort_keys=isinstance(dest, dict))


def flatten_outline(nodes: Sequence[OutlineNode]) -> list[OutlineNode]:
    """
    List a node forest in pre-order without `children`.

    Levels are preserved, so the flat list still shows the nesting.
    """
    flat: list[OutlineNode] = []
    for node in nodes:
        flat.append(replace(node, children=None))
        if node.children:
            flat.extend(flatten_outline(node.children))
    return flat


def summarize_outline(nodes: Sequence[OutlineNode]) -> OutlineSummary:
    """Count nodes, depth, page targets and links over a node forest."""
    total = 0
    max_depth = 0
    with_pages = 0
    with_urls = 0

    stack = list(nodes)
    while stack:
        node = stack.pop()
        total += 1
        max_depth = max(max_depth, node.level + 1)
        if node.page is not None:
            with_pages += 1
        if node.url:
            with_urls += 1
        if node.children:
            stack.extend(node.children)

    return OutlineSummary(
        total_items=total,
        max_depth=max_depth,
        items_with_pages=with_pages,
        items_with_urls=with_urls,
    )


class OutlineNormalizer:
    """
    Normalizes raw bookmark trees.

    Usage:
        normalizer = OutlineNormalizer(resolve_destination=backend.resolve_destination)
        result = normalizer.normalize(backend.get_raw_outline(), OutlineConfig(max_depth=2))
    """

    def __init__(
        self,
        resolve_destination: DestinationResolver | None = None,
        *,
        depth_ceiling: int = OUTLINE_DEPTH_CEILING,
    ):
        """Initialize the normalizer.

        Args:
            resolve_destination: Turns a raw destination into a page number.
                Without one, nodes keep their serialized destination only.
            depth_ceiling: Hard recursion limit applied to every call.
        """
        self.resolve_destination = resolve_destination
        self.depth_ceiling = depth_ceiling

    def normalize(
        self,
        raw_outline: Sequence[RawOutlineItem] | None,
        config: OutlineConfig | None = None,
        *,
        file_path: str | None = None,
    ) -> OutlineResult:
        """
        Normalize a raw outline.

        Args:
            raw_outline: Top-level bookmarks, or None if the document has none
            config: Destination, depth and flattening options
            file_path: Echoed into the result

        Returns:
            OutlineResult; has_outline is False (with a zero summary) when
            there are no bookmarks
        """
        config = config or OutlineConfig()

        if not raw_outline:
            logger.info("Document has no outline/bookmarks")
            return OutlineResult(has_outline=False, file_path=file_path)

        logger.info("Found %d top-level outline items", len(raw_outline))

        limit = self.depth_ceiling
        if config.max_depth is not None:
            limit = min(limit, config.max_depth)

        items = self._process(raw_outline, 0, limit, config.include_destinations, frozenset())
        if config.flatten:
            items = flatten_outline(items)

        summary = summarize_outline(items)
        logger.info(
            "Processed outline: %d items, max depth %d", summary.total_items, summary.max_depth
        )
        return OutlineResult(has_outline=True, items=items, summary=summary, file_path=file_path)

    def _process(
        self,
        items: Sequence[RawOutlineItem],
        level: int,
        limit: int,
        include_destinations: bool,
        ancestors: frozenset[int],
    ) -> list[OutlineNode]:
        """Depth-first conversion of one sibling list."""
        if level >= limit:
            return []

        nodes = []
        for item in items:
            if id(item) in ancestors:
                logger.warning("Skipping outline item %r: it contains itself", item.title)
                continue
            try:
                nodes.append(self._convert(item, level, limit, include_destinations, ancestors))
            except Exception as e:
                logger.warning("Failed to process outline item %r: %s", item.title, e)
        return nodes

    def _convert(
        self,
        item: RawOutlineItem,
        level: int,
        limit: int,
        include_destinations: bool,
        ancestors: frozenset[int],
    ) -> OutlineNode:
        node = OutlineNode(
            title=item.title or "",
            level=level,
            bold=bool(item.bold),
            italic=bool(item.italic),
        )

        if item.color is not None and len(item.color) == 3:
            node.color = tuple(item.color)
        if item.url:
            node.url = item.url

        if include_destinations and item.dest is not None:
            node.page = self._resolve(item)
            node.destination = serialize_destination(item.dest)

        if item.children:
            node.children = self._process(
                item.children, level + 1, limit, include_destinations, ancestors | {id(item)}
            )
        return node

    def _resolve(self, item: RawOutlineItem) -> int | None:
        """Best-effort destination lookup; failures leave the page unset."""
        if self.resolve_destination is None:
            return None
        try:
            return self.resolve_destination(item.dest)
        except Exception as e:
            logger.warning("Failed to resolve destination of %r: %s", item.title, e)
            return None


def normalize_outline(
    raw_outline: Sequence[RawOutlineItem] | None,
    *,
    include_destinations: bool = True,
    max_depth: int | None = None,
    flatten: bool = False,
    resolve_destination: DestinationResolver | None = None,
) -> OutlineResult:
    """
    Normalize a raw outline with keyword options.

    Example:
        >>> raw = [RawOutlineItem("Intro", children=[RawOutlineItem("Scope")])]
        >>> normalize_outline(raw, flatten=True).summary.total_items
        2
    """
    config = OutlineConfig(
        include_destinations=include_destinations, max_depth=max_depth, flatten=flatten
    )
    return OutlineNormalizer(resolve_destination).normalize(raw_outline, config)
