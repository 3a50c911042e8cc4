"""Utility helpers for string normalization and link handling."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern
from urllib.parse import urldefrag, urljoin, urlparse

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s+")


def slugify(value: str, fallback: str = "feed") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def clean_text(value: object) -> str:
    """Trim a value and collapse whitespace runs; non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def site_domain(base_url: str) -> str:
    """Return the registrable host of ``base_url`` without a leading www."""
    host = (urlparse(base_url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def is_on_domain(url: str, domain: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host or not domain:
        return False
    return host == domain or host.endswith("." + domain)


def absolutize(url: str, base_url: str) -> str:
    """Resolve relative and protocol-relative references against ``base_url``."""
    url = url.strip()
    if not url or url.startswith(("data:", "javascript:", "mailto:")):
        return ""
    return urljoin(base_url, url)


def normalize_link(
    raw: object,
    base_url: str,
    domain: str,
    exclusions: Iterable[Pattern[str]] = (),
) -> Optional[str]:
    """Return an absolute on-domain article URL, or None when it must be dropped."""
    link = absolutize(clean_text(raw), base_url)
    if not link:
        return None
    link, _fragment = urldefrag(link)
    if urlparse(link).scheme not in ("http", "https"):
        return None
    if not is_on_domain(link, domain):
        return None
    for pattern in exclusions:
        if pattern.search(link):
            return None
    return link
