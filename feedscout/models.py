"""Data models used throughout the scraping pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from bs4 import BeautifulSoup


@dataclass
class TeaserItem:
    """Listing-page summary of one article.

    ``description`` stays empty until the feed is assembled or the article is
    enriched with its full body.
    """

    title: str
    link: str
    image: str = ""
    author: str = ""
    date: str = ""
    topic: str = ""
    summary: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ArticleBody:
    """Sanitized article markup produced by the enricher."""

    url: str
    html: str
    placeholder: bool = False


@dataclass(frozen=True)
class RawDocument:
    """A fetched page parsed once into a DOM tree."""

    url: str
    html: str
    soup: BeautifulSoup = field(repr=False, compare=False)

    @classmethod
    def parse(cls, html: str, url: str) -> "RawDocument":
        return cls(url=url, html=html, soup=BeautifulSoup(html, "html.parser"))
