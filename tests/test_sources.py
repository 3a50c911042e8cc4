"""Tests for built-in and file-based site definitions."""

import json
from pathlib import Path

import pytest

from feedscout.config import PipelineConfig
from feedscout.sources import generic_source, get_source, load_source_file, source_from_mapping


class TestBuiltinSources:
    def test_natgeo(self):
        source = get_source("natgeo")
        assert source.domain == "nationalgeographic.com"
        assert source.slug == "natgeo"
        assert source.state_global == "__natgeo__"
        assert "FeaturedContentTile" in source.tile_types
        assert source.listing.anchors == [
            "h2 a",
            "h3 a",
            ".PromoTile__Link",
            ".Card__Content__AnchorLink",
        ]

    def test_unknown_source(self):
        with pytest.raises(ValueError, match="Unknown source 'nope'"):
            get_source("nope")

    def test_generic_defaults(self):
        source = generic_source("https://www.example.org")
        assert source.name == "example.org"
        assert source.listing_url == "https://www.example.org"
        assert source.feed_title == "example.org – Latest"
        assert source.state_global is None


class TestSourceFile:
    """Loading user-supplied definitions from JSON."""

    def test_load_minimal_definition(self, tmp_path: Path):
        path = tmp_path / "site.json"
        path.write_text(
            json.dumps(
                {
                    "name": "Example News",
                    "base_url": "https://news.example.com",
                    "listing": {"containers": [".story"], "headline": [".story a"]},
                    "article": {"body": [".story-body"]},
                }
            ),
            encoding="utf-8",
        )

        source = load_source_file(path)

        assert source.slug == "example-news"
        assert source.listing_url == "https://news.example.com"
        assert source.feed_description == "Latest articles from news.example.com"
        assert source.listing.containers == [".story"]
        assert source.listing.image == ["img"]
        assert source.article.body == [".story-body"]
        assert [p.pattern for p in source.article_paths] == ["/article/"]

    def test_unknown_key_is_rejected(self):
        with pytest.raises(ValueError, match="Unknown listing keys: headlines"):
            source_from_mapping(
                {"name": "x", "base_url": "https://x.example", "listing": {"headlines": []}}
            )

    @pytest.mark.parametrize(
        "extra, message",
        [
            ({"article_path_patterns": 5}, "'article_path_patterns' must be a list of strings"),
            ({"min_title_length": "5"}, "'min_title_length' must be an integer"),
            ({"state_global": ["__x__"]}, "'state_global' must be a string"),
            ({"listing": {"containers": "article"}}, "'containers' must be a list of strings"),
            ({"article": ["body"]}, "'article' must be an object"),
            ({"excluded_link_patterns": ["(unclosed"]}, "Invalid link pattern"),
        ],
    )
    def test_wrongly_typed_values_are_rejected(self, extra, message):
        with pytest.raises(ValueError, match=message):
            source_from_mapping({"name": "x", "base_url": "https://x.example", **extra})

    def test_missing_base_url(self):
        with pytest.raises(ValueError, match="base_url"):
            source_from_mapping({"name": "x"})

    def test_non_object_file(self, tmp_path: Path):
        path = tmp_path / "site.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_source_file(path)


class TestPipelinePaths:
    def test_default_paths_follow_source_slug(self, tmp_path: Path):
        config = PipelineConfig(source=get_source("natgeo"), output_root=tmp_path)
        assert config.seen_path == tmp_path / "natgeo.seen.json"
        assert config.feed_path == tmp_path / "natgeo.xml"

    def test_explicit_paths_win(self, tmp_path: Path):
        config = PipelineConfig(
            source=get_source("natgeo"),
            output_root=tmp_path,
            seen_file=tmp_path / "seen.json",
            feed_file=tmp_path / "feed.xml",
        )
        assert config.seen_path == tmp_path / "seen.json"
        assert config.feed_path == tmp_path / "feed.xml"
