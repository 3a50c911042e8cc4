"""Tests for locating the embedded state blob."""

import pytest

from feedscout.errors import ParseError
from feedscout.models import RawDocument
from feedscout.state import find_state

URL = "https://www.nationalgeographic.com"


def _doc(body):
    return RawDocument.parse(f"<html><body>{body}</body></html>", URL)


class TestFindState:
    def test_window_bracket_assignment(self):
        doc = _doc("""<script>window['__natgeo__'] = {"hub": {"a": 1}};</script>""")
        assert find_state(doc, "__natgeo__", '"hub"') == {"hub": {"a": 1}}

    def test_trailing_code_is_ignored(self):
        doc = _doc("""<script>window.__natgeo__={"hub":[1,2]}; window.other = 5;</script>""")
        assert find_state(doc, "__natgeo__") == {"hub": [1, 2]}

    def test_json_script_tag(self):
        doc = _doc("""<script type="application/json" id="__NEXT_DATA__">{"props": {}}</script>""")
        assert find_state(doc, "__NEXT_DATA__") == {"props": {}}

    def test_absent_state_returns_none(self):
        doc = _doc("<script>var x = 1;</script><p>hello</p>")
        assert find_state(doc, "__natgeo__", '"hub"') is None

    def test_script_without_marker_is_skipped(self):
        doc = _doc("""<script>window['__natgeo__'] = {"page": {}};</script>""")
        assert find_state(doc, "__natgeo__", '"hub"') is None

    def test_mention_without_assignment_is_skipped(self):
        doc = _doc("""<script>console.log("__natgeo__", "hub")</script>""")
        assert find_state(doc, "__natgeo__") is None

    def test_malformed_json_raises_parse_error(self):
        doc = _doc("""<script>window['__natgeo__'] = {"hub": oops};</script>""")
        with pytest.raises(ParseError):
            find_state(doc, "__natgeo__", '"hub"')

    def test_json_script_tag_with_marker_and_other_scripts(self):
        doc = _doc(
            """<script>var tracking = {"page": 1};</script>"""
            """<script type="application/json" id="__NEXT_DATA__">{"props": {"pageProps": {"items": [1]}}}</script>"""
        )
        assert find_state(doc, "__NEXT_DATA__", '"hub"') == {"props": {"pageProps": {"items": [1]}}}

    def test_malformed_json_script_tag_raises_parse_error(self):
        doc = _doc("""<script type="application/json" id="__NEXT_DATA__">{"props": </script>""")
        with pytest.raises(ParseError):
            find_state(doc, "__NEXT_DATA__")
