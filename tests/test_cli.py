"""Tests for argument parsing and the CLI entry point."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from feedscout import cli
from feedscout.errors import FetchError
from feedscout.models import TeaserItem
from feedscout.pipeline import RunResult


class TestParseArgs:
    def test_no_arguments_defaults_to_run(self):
        args = cli.parse_args([])
        assert args.source is None
        assert args.source == "natgeo"
        assert args.fetcher == "flaresolverr"
        assert args.delay_ms == 3000
        assert args.enrich is False

    def test_options_without_command_are_run_options(self):
        args = cli.parse_args(["--enrich", "--delay-ms", "500"])
        assert args.command == "run"
        assert args.enrich is True
        assert args.delay_ms == 500

    def test_extract_subcommand(self):
        args = cli.parse_args(["extract", "--fetcher", "direct", "--max-items", "3"])
        assert args.command == "extract"
        assert args.fetcher == "direct"
        assert args.max_items == 3

    def test_source_and_source_file_are_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--source", "natgeo", "--source-file", "site.json"])

    def test_base_url_conflicts_with_source(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--source", "natgeo", "--base-url", "https://www.example.org"])


class TestBuildConfig:
    def test_run_options_are_applied(self, tmp_path: Path):
        args = cli.parse_args(
            [
                "run",
                "--output",
                str(tmp_path),
                "--flaresolverr-url",
                "http://solver:9000",
                "--enrich",
                "--delay-ms",
                "0",
            ]
        )
        config = cli._build_config(args)

        assert config.output_root == tmp_path.resolve()
        assert config.fetch.endpoint == "http://solver:9000"
        assert config.enrich is True
        assert config.request_delay_ms == 0
        assert config.feed_path == tmp_path.resolve() / "natgeo.xml"

    def test_source_defaults_to_natgeo(self):
        args = cli.parse_args(["extract"])
        assert args.source is None
        assert cli._build_config(args).source.name == "natgeo"

    def test_base_url_selects_generic_source(self):
        args = cli.parse_args(
            ["extract", "--base-url", "https://www.example.org", "--listing-url", "https://www.example.org/news"]
        )
        source = cli._build_config(args).source

        assert source.domain == "example.org"
        assert source.listing_url == "https://www.example.org/news"
        assert source.state_global is None


class TestMain:
    """Exit codes of the entry point."""

    @patch("feedscout.cli.run_pipeline")
    @patch("feedscout.cli.build_context")
    def test_successful_run(self, mock_build_context, mock_run_pipeline, tmp_path: Path):
        mock_run_pipeline.return_value = RunResult(feed_path=tmp_path / "natgeo.xml", found=2)

        assert cli.main(["--output", str(tmp_path)]) == 0
        config = mock_build_context.call_args[0][0]
        assert config.output_root == tmp_path.resolve()
        mock_run_pipeline.assert_called_once_with(mock_build_context.return_value)

    @patch("feedscout.cli.run_pipeline")
    @patch("feedscout.cli.build_context")
    def test_failed_run(self, mock_build_context, mock_run_pipeline, tmp_path: Path):
        mock_run_pipeline.return_value = RunResult(
            feed_path=tmp_path / "natgeo.xml", failed=True, error="boom"
        )

        assert cli.main(["--output", str(tmp_path)]) == 1

    def test_bad_source_file(self, tmp_path: Path):
        path = tmp_path / "site.json"
        path.write_text('{"name": "x"}', encoding="utf-8")

        assert cli.main(["--source-file", str(path)]) == 2

    def test_missing_source_file(self, tmp_path: Path):
        assert cli.main(["--source-file", str(tmp_path / "absent.json")]) == 2

    def test_wrongly_typed_source_file(self, tmp_path: Path):
        path = tmp_path / "site.json"
        path.write_text(
            '{"name": "x", "base_url": "https://x.example", "article_path_patterns": 5}',
            encoding="utf-8",
        )

        assert cli.main(["--source-file", str(path)]) == 2

    @patch("feedscout.cli.fetch_teasers")
    @patch("feedscout.cli.build_context")
    def test_extract_prints_json_lines(self, mock_build_context, mock_fetch_teasers, capsys):
        mock_fetch_teasers.return_value = [
            TeaserItem(title="Whales sing", link="https://www.nationalgeographic.com/article/whales"),
            TeaserItem(title="Ice ages", link="https://www.nationalgeographic.com/article/ice"),
        ]

        assert cli.main(["extract"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["title"] for line in lines] == ["Whales sing", "Ice ages"]

    @patch("feedscout.cli.fetch_teasers")
    @patch("feedscout.cli.build_context")
    def test_extract_fetch_failure(self, mock_build_context, mock_fetch_teasers, capsys):
        mock_fetch_teasers.side_effect = FetchError("https://www.nationalgeographic.com", "timeout")

        assert cli.main(["extract"]) == 1
        assert capsys.readouterr().out == ""
