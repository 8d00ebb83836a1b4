"""Rewrites a rendered page so every same-origin reference points into the mirror."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional
from urllib.parse import urljoin, urlsplit

from ..core.errors import LinkParseError
from .document import PageDocument
from .paths import LinkKind, url_to_local_link, url_to_output_path

logger = logging.getLogger(__name__)

# Single-line forms only; multi-line or nested constructs are left untouched.
CSS_URL_RE = re.compile(r"url\([ \t]*([\"']?)([^)\"'\n]+)\1[ \t]*\)", re.IGNORECASE)
CSS_IMPORT_RE = re.compile(r"@import[ \t]+([\"'])([^\"'\n]+)\1", re.IGNORECASE)

REWRITE_TARGETS = (
    ("a[href]", "href", LinkKind.ANCHOR),
    ("img[src]", "src", LinkKind.RESOURCE),
    ('link[rel~="stylesheet" i][href]', "href", LinkKind.RESOURCE),
    ("script[src]", "src", LinkKind.RESOURCE),
)
RESOURCE_TARGETS = (
    ('link[rel~="stylesheet" i][href]', "href"),
    ("script[src]", "src"),
    ("img[src]", "src"),
)
FETCHABLE_SCHEMES = frozenset({"http", "https"})


def css_references(css_text: str) -> Iterator[str]:
    """Yield raw ``url()`` and ``@import`` targets in source order."""

    matches = sorted(
        [*CSS_URL_RE.finditer(css_text), *CSS_IMPORT_RE.finditer(css_text)],
        key=lambda match: match.start(),
    )
    for match in matches:
        yield match.group(2).strip()


def rewrite_css_text(css_text: str, map_url: Callable[[str], Optional[str]]) -> str:
    """Substitute every mappable ``url()``/``@import`` target in ``css_text``."""

    def repl_url(match: re.Match) -> str:
        mapped = map_url(match.group(2).strip())
        if mapped is None:
            return match.group(0)
        return f"url('{mapped}')"

    def repl_import(match: re.Match) -> str:
        mapped = map_url(match.group(2).strip())
        if mapped is None:
            return match.group(0)
        return f"@import '{mapped}'"

    rewritten = CSS_URL_RE.sub(repl_url, css_text)
    return CSS_IMPORT_RE.sub(repl_import, rewritten)


@dataclass(slots=True)
class LinkRewriter:
    """Mutates a page's DOM in place and reports the resources it references."""

    origin_host: str
    collect_resources: bool = False

    def rewrite(
        self,
        document: PageDocument,
        page_url: str,
        *,
        page_path: Optional[str] = None,
    ) -> List[str]:
        """Rewrite ``document`` and return the original resource URLs.

        The returned list is empty unless ``collect_resources`` is set. It is
        gathered before any attribute changes and may contain other hosts;
        callers filter it before downloading.
        """

        page_path = page_path or url_to_output_path(page_url)
        base_url = self.effective_base_url(document, page_url)
        resources = self.collect(document, base_url) if self.collect_resources else []

        for selector, attribute, kind in REWRITE_TARGETS:
            for element in document.select(selector):
                value = document.get_attribute(element, attribute)
                mapped = self._map(value, kind, base_url, page_path)
                if mapped is not None and mapped != value:
                    document.set_attribute(element, attribute, mapped)

        def map_css_url(value: str) -> Optional[str]:
            return self._map(value, LinkKind.RESOURCE, base_url, page_path)

        for style in document.select("style"):
            css_text = document.get_text(style)
            rewritten = rewrite_css_text(css_text, map_css_url)
            if rewritten != css_text:
                document.set_text(style, rewritten)

        for element in document.select("[style]"):
            css_text = document.get_attribute(element, "style") or ""
            if "url(" not in css_text.lower():
                continue
            rewritten = rewrite_css_text(css_text, map_css_url)
            if rewritten != css_text:
                document.set_attribute(element, "style", rewritten)

        for base in document.select("base[href]"):
            document.remove(base)

        return resources

    def collect(self, document: PageDocument, base_url: str) -> List[str]:
        """Absolute URLs of stylesheets, scripts, images and CSS references."""

        raw_values: List[str] = []
        for selector, attribute in RESOURCE_TARGETS:
            for element in document.select(selector):
                value = document.get_attribute(element, attribute)
                if value:
                    raw_values.append(value)

        for style in document.select("style"):
            raw_values.extend(css_references(document.get_text(style)))
        for element in document.select("[style]"):
            raw_values.extend(css_references(document.get_attribute(element, "style") or ""))

        collected: dict[str, None] = {}
        for value in raw_values:
            absolute = self._absolute(value, base_url)
            if absolute:
                collected.setdefault(absolute, None)
        return list(collected)

    @staticmethod
    def effective_base_url(document: PageDocument, page_url: str) -> str:
        for base in document.select("base[href]"):
            href = document.get_attribute(base, "href")
            if href:
                try:
                    return urljoin(page_url, href.strip())
                except ValueError:
                    logger.warning("Ignoring malformed <base href=%r> on %s", href, page_url)
        return page_url

    def _map(
        self,
        value: Optional[str],
        kind: LinkKind,
        base_url: str,
        page_path: str,
    ) -> Optional[str]:
        try:
            return url_to_local_link(
                value,
                self.origin_host,
                kind,
                base_url=base_url,
                from_path=page_path,
            )
        except LinkParseError as exc:
            logger.warning("Skipping link on %s: %s", base_url, exc)
            return None

    @staticmethod
    def _absolute(value: str, base_url: str) -> Optional[str]:
        candidate = value.strip()
        if not candidate or candidate.startswith("#"):
            return None
        try:
            absolute = urljoin(base_url, candidate)
            scheme = urlsplit(absolute).scheme.lower()
        except ValueError:
            logger.warning("Skipping resource on %s: malformed URL %r", base_url, candidate)
            return None
        if scheme not in FETCHABLE_SCHEMES:
            return None
        return absolute
