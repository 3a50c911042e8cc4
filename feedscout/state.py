"""Locate and decode the JSON state blob some sites embed in a script tag."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .errors import ParseError
from .models import RawDocument

logger = logging.getLogger("feedscout.state")

_decoder = json.JSONDecoder()


def _assignment_pattern(name: str) -> re.Pattern[str]:
    quoted = re.escape(name)
    return re.compile(
        rf"""(?:window\s*\[\s*['"]{quoted}['"]\s*\]|window\.{quoted}|\b{quoted})\s*=\s*"""
    )


def find_state(document: RawDocument, name: str, marker: Optional[str] = None) -> Optional[Any]:
    """Return the decoded value assigned to global ``name``, or None if absent.

    A ``<script type="application/json">`` whose id is ``name`` is decoded whole.
    Assignment scripts that mention ``name`` but not ``marker`` are skipped. A
    blob that is found but does not decode raises ParseError.
    """
    pattern = _assignment_pattern(name)
    for script in document.soup.find_all("script"):
        text = script.string or script.get_text()
        if not text:
            continue
        if script.get("id") == name and script.get("type") == "application/json":
            try:
                return json.loads(text)
            except json.JSONDecodeError as exc:
                raise ParseError(f"{name} JSON parse failed: {exc}") from exc
        if name not in text:
            continue
        if marker and marker not in text:
            continue
        match = pattern.search(text)
        if not match:
            continue
        start = match.end()
        try:
            value, _end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            raise ParseError(f"{name} JSON parse failed: {str(exc)[:80]}") from exc
        logger.debug("Decoded %s state from %s", name, document.url)
        return value
    return None
