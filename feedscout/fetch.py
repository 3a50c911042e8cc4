"""Backends that download a page and return its HTML."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .config import FetchConfig
from .errors import FetchError

logger = logging.getLogger("feedscout.fetch")


class FlareSolverrFetcher:
    """Fetch pages through a FlareSolverr instance to get past bot challenges."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> str:
        logger.info("Fetching %s via FlareSolverr", url)
        payload = {"cmd": "request.get", "url": url, "maxTimeout": int(self.timeout * 1000)}
        try:
            resp = self.session.post(
                f"{self.endpoint}/v1",
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout + 5,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        except ValueError as exc:
            raise FetchError(url, f"invalid FlareSolverr response: {exc}") from exc

        solution = data.get("solution") if isinstance(data, dict) else None
        if not solution:
            message = data.get("message") if isinstance(data, dict) else None
            raise FetchError(url, message or "FlareSolverr did not return a solution")
        status = solution.get("status")
        if isinstance(status, int) and status >= 400:
            raise FetchError(url, f"upstream responded with HTTP {status}")
        html = solution.get("response")
        if not isinstance(html, str) or not html:
            raise FetchError(url, "FlareSolverr solution has an empty body")
        logger.debug("FlareSolverr returned %d characters for %s", len(html), url)
        return html


class DirectFetcher:
    """Plain HTTP GET for sites that do not need a challenge solver."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    def fetch(self, url: str) -> str:
        logger.info("Fetching %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        return resp.text


class PlaywrightFetcher:
    """Render pages in headless Chromium and return the resulting HTML."""

    def __init__(self, timeout: float = 30.0, wait_after_load: float = 1.0) -> None:
        self.timeout = timeout
        self.wait_after_load = wait_after_load

    def fetch(self, url: str) -> str:
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(headless=True)
                page = browser.new_page()
                page.set_default_navigation_timeout(self.timeout * 1000)
                try:
                    logger.info("Loading %s", url)
                    page.goto(url, wait_until="networkidle")
                    if self.wait_after_load:
                        page.wait_for_timeout(int(self.wait_after_load * 1000))
                    return page.content()
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise FetchError(url, f"timeout: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(url, str(exc)) from exc


def build_fetcher(config: FetchConfig):
    """Instantiate the backend named by ``config.backend``."""
    if config.backend == "playwright":
        return PlaywrightFetcher(config.timeout, config.wait_after_load)
    if config.backend == "direct":
        return DirectFetcher(config.timeout, config.user_agent)
    return FlareSolverrFetcher(config.endpoint, config.timeout)
