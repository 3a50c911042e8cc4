"""Exception types raised by the scraping pipeline."""

from __future__ import annotations


class FeedscoutError(Exception):
    """Base class for pipeline errors."""


class FetchError(FeedscoutError):
    """The fetch backend could not return a document body."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(FeedscoutError):
    """Embedded structured state was present but could not be decoded."""


class StoreReadError(FeedscoutError):
    """The seen-set file exists but is unreadable or malformed."""
