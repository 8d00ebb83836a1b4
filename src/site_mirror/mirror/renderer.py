"""Headless rendering collaborator built on Playwright."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..core.errors import NavigationError
from .document import PageDocument, SoupDocument

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
ANCHOR_HREFS_SCRIPT = (
    "els => els.map(el => el.href).filter(href => typeof href === 'string')"
)


@dataclass
class RenderedPage:
    """Snapshot of one rendered page plus the handle that produced it."""

    url: str
    final_url: str
    html: str
    anchors: List[str] = field(default_factory=list)
    on_close: Optional[Callable[[], None]] = field(default=None, repr=False)
    _document: Optional[PageDocument] = field(default=None, init=False, repr=False)

    @property
    def document(self) -> PageDocument:
        if self._document is None:
            self._document = SoupDocument(self.html)
        return self._document

    def close(self) -> None:
        callback, self.on_close = self.on_close, None
        if callback is None:
            return
        try:
            callback()
        except PlaywrightError:
            logger.debug("Page handle for %s was already closed", self.url, exc_info=True)


class Renderer(Protocol):
    def __enter__(self) -> "Renderer":
        ...

    def __exit__(self, *exc_info: Any) -> None:
        ...

    def render(self, url: str, timeout_ms: int) -> RenderedPage:
        ...


class PlaywrightRenderer:
    """Loads pages in Chromium and waits until the network is idle."""

    def __init__(self, *, headless: bool = True, wait_until: str = "networkidle") -> None:
        self.headless = headless
        self.wait_until = wait_until
        self._playwright = None
        self._browser = None
        self._context = None

    def __enter__(self) -> "PlaywrightRenderer":
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.headless, args=BROWSER_ARGS
            )
            self._context = self._browser.new_context()
        except Exception:
            self._playwright.stop()
            raise
        return self

    def __exit__(self, *exc_info: Any) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            if self._playwright is not None:
                self._playwright.stop()
            self._browser = None
            self._context = None
            self._playwright = None

    def render(self, url: str, timeout_ms: int) -> RenderedPage:
        if self._context is None:
            raise RuntimeError("PlaywrightRenderer must be used as a context manager")

        page = self._context.new_page()
        try:
            page.goto(url, wait_until=self.wait_until, timeout=timeout_ms)
            html = page.content()
            anchors = page.eval_on_selector_all("a[href]", ANCHOR_HREFS_SCRIPT)
            final_url = page.url
        except PlaywrightTimeoutError as exc:
            page.close()
            raise NavigationError(url, f"timed out after {timeout_ms} ms") from exc
        except PlaywrightError as exc:
            page.close()
            raise NavigationError(url, exc.message) from exc

        return RenderedPage(
            url=url,
            final_url=final_url,
            html=html,
            anchors=list(anchors),
            on_close=page.close,
        )
