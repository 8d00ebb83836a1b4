"""Crawl orchestration: frontier, rendering, rewriting and persistence."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from typing import Callable, Optional

import requests

from ..core.config import MirrorConfig
from ..core.errors import DownloadError, NavigationError, UnrecoverableCrawlError
from ..core.report import CrawlReport
from .downloader import build_session, download
from .paths import url_to_output_path, url_to_resource_path
from .renderer import PlaywrightRenderer, RenderedPage, Renderer
from .rewriter import LinkRewriter
from .state import CrawlSession, CrawlState
from .targeting import TargetFilter

logger = logging.getLogger(__name__)

ASSETS_SUBDIR = "assets"


@dataclass
class MirrorCrawler:
    """Renders same-origin pages one at a time and writes a static mirror."""

    config: MirrorConfig
    renderer_factory: Optional[Callable[[], Renderer]] = None
    http_session: Optional[requests.Session] = None
    session: CrawlSession = field(init=False)

    def __post_init__(self) -> None:
        self._target_filter = TargetFilter(target_hostname=self.config.origin_host)
        self._rewriter = LinkRewriter(
            origin_host=self.config.origin_host,
            collect_resources=self.config.download_external,
        )
        self._owns_http_session = False
        self.session = CrawlSession.seeded(self.config.target_url, self.config.max_pages)

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------
    def run(self) -> CrawlReport:
        self.session = CrawlSession.seeded(self.config.target_url, self.config.max_pages)
        try:
            self._prepare_output()
            with self._open_renderer() as renderer:
                self._crawl(renderer)
        except UnrecoverableCrawlError:
            raise
        except Exception as exc:
            raise UnrecoverableCrawlError(f"Crawl aborted: {exc}") from exc
        finally:
            if self._owns_http_session and self.http_session is not None:
                self.http_session.close()
                self.http_session = None

        return self._build_report()

    def _crawl(self, renderer: Renderer) -> None:
        session = self.session
        session.state = CrawlState.RUNNING

        while session.frontier and session.budget_left:
            url = session.pop()
            if session.is_visited(url):
                continue
            self._process(renderer, url)

        session.outcome = CrawlState.BUDGET_REACHED if not session.budget_left else CrawlState.EXHAUSTED
        session.state = CrawlState.DONE
        logger.info(
            "Crawl finished (%s): %d page(s) rendered, %d remaining",
            session.outcome.value,
            session.pages_rendered,
            session.remaining(),
        )

    def _process(self, renderer: Renderer, url: str) -> None:
        session = self.session
        try:
            page = renderer.render(url, self.config.navigation_timeout)
        except NavigationError as exc:
            logger.warning("Skipping %s: %s", url, exc.reason)
            session.failures[url] = exc.reason
            return

        try:
            session.mark_visited(url, page.final_url)
            self._enqueue_links(page)

            page_path = url_to_output_path(url)
            resources = self._rewriter.rewrite(page.document, page.final_url, page_path=page_path)
            for resource_url in self._target_filter.filter_urls(resources):
                self._fetch_resource(resource_url)

            if not self._persist_page(url, page, page_path):
                return

            session.pages[url] = page_path
            session.pages_rendered += 1
            logger.info("[%d/%d] %s -> %s", session.pages_rendered, session.max_pages, url, page_path)
        finally:
            page.close()

    # ------------------------------------------------------------------
    # Crawling primitives
    # ------------------------------------------------------------------
    def _enqueue_links(self, page: RenderedPage) -> None:
        for href in self._target_filter.filter_urls(page.anchors):
            if self.session.enqueue(href):
                logger.debug("Queued %s", href)

    def _persist_page(self, url: str, page: RenderedPage, page_path: str) -> bool:
        destination = self.config.output_dir / page_path
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(page.document.serialize(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write %s to %s: %s", url, page_path, exc)
            self.session.failures[url] = f"cannot write {page_path}: {exc}"
            return False
        return True

    def _fetch_resource(self, url: str) -> None:
        relative = url_to_resource_path(url)
        if relative is None:
            return
        destination = self.config.output_dir / relative
        if destination.exists():
            logger.debug("Already mirrored %s", url)
            return

        try:
            download(url, destination, session=self._http())
        except DownloadError as exc:
            logger.warning("Could not download %s", exc)
            self.session.failures[url] = str(exc)
            return
        self.session.resources[url] = relative

    # ------------------------------------------------------------------
    # Runtime setup helpers
    # ------------------------------------------------------------------
    def _prepare_output(self) -> None:
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        assets = self.config.assets_dir
        if assets is not None and assets.is_dir():
            target = self.config.output_dir / ASSETS_SUBDIR
            shutil.copytree(assets, target, dirs_exist_ok=True)
            logger.info("Copied static assets from %s", assets)

    def _open_renderer(self) -> Renderer:
        if self.renderer_factory is not None:
            return self.renderer_factory()
        return PlaywrightRenderer(headless=self.config.headless)

    def _http(self) -> requests.Session:
        if self.http_session is None:
            self.http_session = build_session()
            self._owns_http_session = True
        return self.http_session

    def _build_report(self) -> CrawlReport:
        session = self.session
        remaining = session.remaining() if session.outcome is CrawlState.BUDGET_REACHED else 0
        return CrawlReport(
            seed_url=self.config.target_url,
            state=session.outcome.value,
            pages_rendered=session.pages_rendered,
            remaining=remaining,
            pages=dict(session.pages),
            resources=dict(session.resources),
            failures=dict(session.failures),
        )
