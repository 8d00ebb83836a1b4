from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclass(slots=True)
class TargetFilter:
    """Same-origin rules keyed on the seed URL's hostname."""

    target_hostname: str

    def is_allowed(self, url: str) -> bool:
        try:
            parsed_url = urlsplit(url)
            hostname = (parsed_url.hostname or "").lower()
        except ValueError:
            logger.debug("Ignoring unparseable URL %r", url)
            return False

        if parsed_url.scheme.lower() not in ALLOWED_SCHEMES:
            return False
        return bool(hostname) and hostname == self.target_hostname

    def filter_urls(self, urls: Iterable[str]) -> Iterator[str]:
        for url in urls:
            if self.is_allowed(url):
                yield url
