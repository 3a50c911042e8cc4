"""Tests for the MCP tool functions."""

import asyncio
import json
from unittest.mock import Mock, patch

from feedscout import mcp_server
from feedscout.models import ArticleBody, TeaserItem


@patch("feedscout.mcp_server.fetch_teasers")
@patch("feedscout.mcp_server.build_context")
def test_extract_teasers_returns_json(mock_build_context, mock_fetch_teasers):
    mock_fetch_teasers.return_value = [
        TeaserItem(title="Coral reefs", link="https://www.nationalgeographic.com/article/coral")
    ]

    payload = json.loads(asyncio.run(mcp_server.extract_teasers()))

    assert payload[0]["title"] == "Coral reefs"
    config = mock_build_context.call_args[0][0]
    assert config.source.name == "natgeo"
    mock_fetch_teasers.assert_called_once_with(mock_build_context.return_value)


@patch("feedscout.mcp_server.fetch_teasers", return_value=[])
@patch("feedscout.mcp_server.build_context")
def test_extract_teasers_with_base_url_uses_generic_source(mock_build_context, _mock_fetch_teasers):
    assert asyncio.run(mcp_server.extract_teasers(base_url="https://www.example.org")) == "[]"

    config = mock_build_context.call_args[0][0]
    assert config.source.domain == "example.org"
    assert config.source.state_global is None


@patch("feedscout.mcp_server.build_context")
def test_fetch_article_returns_body_html(mock_build_context):
    context = Mock()
    context.enricher.enrich.return_value = ArticleBody(url="u", html="<p>body</p>")
    mock_build_context.return_value = context

    url = "https://www.nationalgeographic.com/article/coral"
    assert asyncio.run(mcp_server.fetch_article(url)) == "<p>body</p>"
    context.enricher.enrich.assert_called_once_with(url)
