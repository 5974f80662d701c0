"""
MCP server exposing pdfscout to agents.

Tools:
- get_pdf_metadata: page count, document properties, file information
- get_pdf_text: text of selected pages
- get_pdf_images: selected pages rendered as images
- search_pdf: literal or /regex/flags search with context snippets
- get_pdf_outline: bookmark tree, optionally depth-limited or flattened

Every tool takes either `absolute_path` or `relative_path` (resolved
under ~/pdf-agent, or $PDFSCOUT_HOME). Failures come back as a
structured error document naming the operation and its parameters.

Usage:
    Add to the MCP client config, then restart the client:
    {
      "mcpServers": {
        "pdf-agent": {"command": "pdfscout-mcp"}
      }
    }

stdout carries protocol frames only; logs go to stderr.
"""

from __future__ import annotations

import base64
import logging
import os
import sys
from functools import lru_cache
from typing import Any

from mcp.server.fastmcp import FastMCP, Image

from pdfscout import service
from pdfscout.config import ImageConfig, OutlineConfig, QueryConfig, SearchConfig, TextConfig
from pdfscout.readers import route_mupdf_messages

logger = logging.getLogger(__name__)

mcp = FastMCP("pdf-agent")

PAGE_RANGE_HELP = (
    "Page range: '5' (page 5), '5:10' (pages 5-10), '7:' (page 7 to end), "
    "':5' (start to page 5), or comma-separated combinations like '1,3:5,7,10:'. "
    "Default '1:' (all pages)."
)


@lru_cache(maxsize=1)
def get_config() -> QueryConfig:
    """Server-wide configuration, read once from the environment."""
    return QueryConfig.from_env()


def _path_params(
    absolute_path: str | None, relative_path: str | None, use_pdf_home: bool
) -> dict[str, Any]:
    return {
        "absolute_path": absolute_path,
        "relative_path": relative_path,
        "use_pdf_home": use_pdf_home,
    }


def _resolve(absolute_path: str | None, relative_path: str | None, use_pdf_home: bool):
    return service.resolve_document_path(
        absolute_path, relative_path, use_home=use_pdf_home, config=get_config()
    )


def _failure(operation: str, parameters: dict[str, Any], error: Exception) -> dict[str, Any]:
    logger.error("%s failed: %s", operation, error)
    return service.describe_error(operation, parameters, error)


@mcp.tool(
    description=(
        "Extract metadata and basic information from a PDF file, including page count, "
        "file size, creation dates, and document properties."
    )
)
def get_pdf_metadata(
    absolute_path: str | None = None,
    relative_path: str | None = None,
    use_pdf_home: bool = True,
) -> dict[str, Any]:
    params = _path_params(absolute_path, relative_path, use_pdf_home)
    try:
        path = _resolve(absolute_path, relative_path, use_pdf_home)
        return service.get_metadata(path, get_config()).to_dict()
    except Exception as e:
        return _failure("get_pdf_metadata", params, e)


@mcp.tool(
    description=(
        "Extract text from specific pages or page ranges of a PDF file. "
        + PAGE_RANGE_HELP
        + " Works best with PDFs containing native text; scanned PDFs may yield limited results."
    )
)
def get_pdf_text(
    absolute_path: str | None = None,
    relative_path: str | None = None,
    use_pdf_home: bool = True,
    page_range: str = service.DEFAULT_PAGE_RANGE,
    extraction_strategy: str = "hybrid",
    preserve_formatting: bool = True,
    line_breaks: bool = True,
) -> dict[str, Any]:
    params = {
        **_path_params(absolute_path, relative_path, use_pdf_home),
        "page_range": page_range,
        "extraction_strategy": extraction_strategy,
        "preserve_formatting": preserve_formatting,
        "line_breaks": line_breaks,
    }
    try:
        text_config = TextConfig(
            strategy=extraction_strategy,
            preserve_formatting=preserve_formatting,
            line_breaks=line_breaks,
        )
        path = _resolve(absolute_path, relative_path, use_pdf_home)
        return service.extract_text(path, page_range, text_config, get_config()).to_dict()
    except Exception as e:
        return _failure("get_pdf_text", params, e)


@mcp.tool(
    description=(
        "Render specific pages of a PDF as images for visual analysis of charts, diagrams, "
        "tables, equations or layout. " + PAGE_RANGE_HELP
    )
)
def get_pdf_images(
    absolute_path: str | None = None,
    relative_path: str | None = None,
    use_pdf_home: bool = True,
    page_range: str = service.DEFAULT_PAGE_RANGE,
    format: str = "jpeg",
    quality: int = 85,
    max_width: int | None = None,
    max_height: int | None = None,
):
    # Left unannotated: image blocks have no structured output schema
    params = {
        **_path_params(absolute_path, relative_path, use_pdf_home),
        "page_range": page_range,
        "format": format,
        "quality": quality,
        "max_width": max_width,
        "max_height": max_height,
    }
    try:
        image_config = ImageConfig(
            format=format, quality=quality, max_width=max_width, max_height=max_height
        )
        path = _resolve(absolute_path, relative_path, use_pdf_home)
        result = service.render_pages(path, page_range, image_config, get_config())
    except Exception as e:
        return [_failure("get_pdf_images", params, e)]

    content: list[Any] = [
        {
            "file_path": result.file_path,
            "total_pages": result.total_pages,
            "pages": [
                {"page": img.page, "width": img.width, "height": img.height}
                for img in result.images
            ],
            "errors": result.errors,
        }
    ]
    for img in result.images:
        content.append(Image(data=base64.b64decode(img.data), format=image_config.format))
    return content


@mcp.tool(
    description=(
        "Search for text patterns (including regex) within a PDF file and return matching "
        "pages with context snippets. Use /pattern/flags for regex (e.g. '/budget|forecast/gi') "
        "or plain text for a case-insensitive literal search. Set max_results or "
        "max_pages_scanned to stop early. " + PAGE_RANGE_HELP
    )
)
def search_pdf(
    search_pattern: str,
    absolute_path: str | None = None,
    relative_path: str | None = None,
    use_pdf_home: bool = True,
    page_range: str = service.DEFAULT_PAGE_RANGE,
    max_results: int | None = None,
    max_pages_scanned: int | None = None,
    context_chars: int = 150,
    search_timeout: int = 10_000,
) -> dict[str, Any]:
    params = {
        **_path_params(absolute_path, relative_path, use_pdf_home),
        "page_range": page_range,
        "search_pattern": search_pattern,
        "max_results": max_results,
        "max_pages_scanned": max_pages_scanned,
        "context_chars": context_chars,
        "search_timeout": search_timeout,
    }
    try:
        search_config = SearchConfig(
            context_chars=context_chars,
            timeout_ms=search_timeout,
            max_results=max_results,
            max_pages_scanned=max_pages_scanned,
        )
        service.validate_pattern(search_pattern)
        path = _resolve(absolute_path, relative_path, use_pdf_home)
        envelope = service.search(path, search_pattern, page_range, search_config, get_config())
    except Exception as e:
        return _failure("search_pdf", params, e)

    return {"file_path": str(path), **envelope.to_dict()}


@mcp.tool(
    description=(
        "Extract the table of contents (outline/bookmarks) of a PDF file as a hierarchical "
        "or flattened list of sections with titles, levels and page references."
    )
)
def get_pdf_outline(
    absolute_path: str | None = None,
    relative_path: str | None = None,
    use_pdf_home: bool = True,
    include_destinations: bool = True,
    max_depth: int | None = None,
    flatten_structure: bool = False,
) -> dict[str, Any]:
    params = {
        **_path_params(absolute_path, relative_path, use_pdf_home),
        "include_destinations": include_destinations,
        "max_depth": max_depth,
        "flatten_structure": flatten_structure,
    }
    try:
        outline_config = OutlineConfig(
            include_destinations=include_destinations,
            max_depth=max_depth,
            flatten=flatten_structure,
        )
        path = _resolve(absolute_path, relative_path, use_pdf_home)
        return service.get_outline(path, outline_config, get_config()).to_dict()
    except Exception as e:
        return _failure("get_pdf_outline", params, e)


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr; stdout belongs to the protocol."""
    level = (level or os.environ.get("PDFSCOUT_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
    route_mupdf_messages()


def main() -> None:
    """Run the server over stdio."""
    configure_logging()
    logger.info("Starting pdf-agent MCP server (home: %s)", get_config().home_dir)
    mcp.run()


if __name__ == "__main__":
    main()
