"""MCP server exposing feedscout extraction tools."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import FetchConfig, PipelineConfig, SourceConfig
from .pipeline import PipelineContext, build_context, fetch_teasers
from .sources import generic_source, get_source

logger = logging.getLogger("feedscout.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="feedscout")


def _source(source: str, base_url: Optional[str]) -> SourceConfig:
    if base_url:
        return generic_source(base_url)
    return get_source(source)


def _context(source: str, base_url: Optional[str] = None) -> PipelineContext:
    return build_context(PipelineConfig(source=_source(source, base_url), fetch=FetchConfig()))


def _extract_json(context: PipelineContext) -> str:
    items = fetch_teasers(context)
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


@mcp.tool()
async def extract_teasers(source: str = "natgeo", base_url: Optional[str] = None) -> str:
    """Scrape a listing page and return its teasers as JSON.

    ``base_url`` selects a generic card-based site instead of a built-in source.
    """
    context = _context(source, base_url)
    # fetchers block; keep them off the server's event loop
    return await asyncio.to_thread(_extract_json, context)


@mcp.tool()
async def fetch_article(url: str, source: str = "natgeo") -> str:
    """Fetch one article and return its cleaned HTML body."""
    context = _context(source)
    body = await asyncio.to_thread(context.enricher.enrich, url)
    return body.html


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
