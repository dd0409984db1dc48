# a11y_crawler/browser.py
"""
Playwright-backed browser layer.

One Chromium process and one browsing context live for a whole crawl; pages
are opened and closed one at a time by the crawler. When the score-based
engine is enabled, Chromium is launched with a remote-debugging port so
Lighthouse can attach to the same browser.

Config keys consumed:
  - headless: bool
  - user_agent: str | None
  - timeout: float (seconds, per navigation)
  - wait_until: "load" | "domcontentloaded" | "networkidle" | "commit"
  - lighthouse.enabled: bool
  - lighthouse.debug_port: int
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from a11y_crawler.errors import FatalLaunchFailure, NavigationFailure, ScoreAnalysisFailure
from a11y_crawler.url_logic import extract_hyperlinks

log = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(frozen=True)
class DebugConnection:
    """Where a remote-debugging client can reach the running browser."""

    host: str
    port: int
    websocket_url: str = ""
    browser: str = ""


class PlaywrightBrowser:
    """Launches Chromium and exposes the handful of page operations the crawler needs."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    @property
    def debug_port(self) -> Optional[int]:
        lighthouse = self.config.get("lighthouse", {})
        if not lighthouse.get("enabled", False):
            return None
        return int(lighthouse.get("debug_port", 9222))

    async def start(self) -> None:
        """Starts Playwright, launches Chromium and opens the session's context."""
        log.info("Starting headless browser session...")
        args: List[str] = []
        if self.debug_port is not None:
            args.append(f"--remote-debugging-port={self.debug_port}")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.get("headless", True), args=args
            )
            context_options: Dict[str, Any] = {}
            if self.config.get("user_agent"):
                context_options["user_agent"] = self.config["user_agent"]
            self._context = await self._browser.new_context(**context_options)
        except (PlaywrightError, OSError) as e:
            await self.close()
            raise FatalLaunchFailure(f"Could not launch browser: {e}") from e
        log.info("Browser session ready.")

    async def new_page(self) -> Page:
        if self._context is None:
            raise RuntimeError("Browser not started; call start() first.")
        return await self._context.new_page()

    async def navigate(self, page: Page, url: str) -> None:
        """
        Load `url` and wait for the configured quiescence condition.
        Raises NavigationFailure for network errors, timeouts, HTTP errors and
        responses that are not HTML.
        """
        timeout_ms = int(float(self.config.get("timeout", 30.0)) * 1000)
        wait_until = self.config.get("wait_until", "networkidle")
        log.debug("Navigating to %s (wait_until=%s, timeout=%sms)...", url, wait_until, timeout_ms)
        try:
            response = await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightError as e:
            raise NavigationFailure(url, str(e)) from e

        if response is None:
            raise NavigationFailure(url, "no response")

        status = response.status
        if status >= 400:
            raise NavigationFailure(url, f"HTTP error {status}")

        ctype = (response.headers or {}).get("content-type", "").lower()
        if ctype and not ctype.startswith(HTML_CONTENT_TYPES):
            raise NavigationFailure(url, f"non-HTML content ({ctype})")

        if page.url and page.url != url:
            log.info("Navigation redirected: %s -> %s", url, page.url)

    async def extract_hyperlinks(self, page: Page) -> List[str]:
        """Absolute http(s) links from the rendered DOM, in document order."""
        html = await page.content()
        return extract_hyperlinks(html, page.url)

    async def close_page(self, page: Page) -> None:
        try:
            await page.close()
        except PlaywrightError as e:
            log.warning("Failed to close page %s: %s", page.url, e, exc_info=True)

    async def debug_connection(self) -> DebugConnection:
        """
        Ask Chromium's DevTools HTTP endpoint where it is listening.
        Raises ScoreAnalysisFailure when no debug port is configured or reachable.
        """
        port = self.debug_port
        if port is None:
            raise ScoreAnalysisFailure("Remote debugging is not enabled.")
        host = "127.0.0.1"
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"http://{host}:{port}/json/version")
                resp.raise_for_status()
                info = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ScoreAnalysisFailure(
                f"DevTools endpoint on port {port} unavailable: {e}"
            ) from e
        return DebugConnection(
            host=host,
            port=port,
            websocket_url=info.get("webSocketDebuggerUrl", ""),
            browser=info.get("Browser", ""),
        )

    async def close(self) -> None:
        """Closes the context, then the browser, then the driver. Never raises."""
        log.info("Closing browser session...")
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                log.warning("Failed to close browser context: %s", e, exc_info=True)
            self._context = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                log.warning("Failed to close browser: %s", e, exc_info=True)
            self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                log.warning("Failed to stop Playwright: %s", e, exc_info=True)
            self._playwright = None
        log.info("Browser session closed.")
