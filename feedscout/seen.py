"""Persistence of the article links already emitted to the feed."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from .errors import StoreReadError

logger = logging.getLogger("feedscout.seen")


class SeenSet:
    """Insertion-ordered set of emitted links. Entries are never removed."""

    def __init__(self, links: Iterable[str] = ()) -> None:
        self._links: Dict[str, None] = {}
        for link in links:
            self.add(link)

    def add(self, link: str) -> None:
        self._links.setdefault(link, None)

    def contains(self, link: str) -> bool:
        return link in self._links

    def __contains__(self, link: object) -> bool:
        return link in self._links

    def __iter__(self) -> Iterator[str]:
        return iter(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def to_list(self) -> List[str]:
        return list(self._links)


class SeenStore:
    """JSON-array file holding a SeenSet between runs."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> List[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreReadError(f"cannot read {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StoreReadError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StoreReadError(f"{self.path} does not contain a JSON array")
        links = [entry for entry in data if isinstance(entry, str) and entry]
        skipped = len(data) - len(links)
        if skipped:
            logger.warning("Ignoring %d non-string entries in %s", skipped, self.path)
        return links

    def load(self) -> SeenSet:
        """Return the stored links; a missing or corrupt file means no history."""
        if not self.path.exists():
            logger.info("No seen-set at %s; starting fresh", self.path)
            return SeenSet()
        try:
            links = self._read()
        except StoreReadError as exc:
            logger.warning("Could not load seen-set, treating as empty: %s", exc)
            return SeenSet()
        seen = SeenSet(links)
        logger.info("Loaded %d previously seen URLs", len(seen))
        return seen

    def save(self, seen: SeenSet) -> None:
        """Overwrite the stored file with every link in ``seen``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(seen.to_list(), indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug("Saved %d URLs to %s", len(seen), self.path)
