"""Shared fixtures for feedscout tests."""

import json

import pytest

from feedscout.sources import natgeo_source

BASE = "https://www.nationalgeographic.com"


def state_page(state, extra_body=""):
    """Listing page embedding ``state`` the way the NatGeo home page does."""
    blob = json.dumps(state)
    return (
        "<html><head><title>Nat Geo</title></head><body>"
        f"{extra_body}"
        f"<script>window['__natgeo__']={blob};</script>"
        "</body></html>"
    )


@pytest.fixture
def source():
    return natgeo_source()


@pytest.fixture
def tile():
    def make(title, url, cms_type="FeaturedContentTile", **extra):
        node = {"cmsType": cms_type, "title": title, "ctas": [{"url": url}]}
        node.update(extra)
        return node

    return make
