"""Error types shared by the mirroring stages."""

from __future__ import annotations

from typing import Optional


class MirrorError(RuntimeError):
    """Base class for every error raised by the mirror."""


class ConfigurationError(MirrorError):
    """Raised when the runtime configuration is missing or invalid."""


class NavigationError(MirrorError):
    """Raised when a single page cannot be rendered."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class LinkParseError(MirrorError):
    """Raised when an attribute or CSS value is not a parseable URL."""

    def __init__(self, value: str, reason: str = "malformed URL") -> None:
        super().__init__(f"{reason}: {value!r}")
        self.value = value


class DownloadError(MirrorError):
    """Raised when a resource cannot be fetched."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        detail = reason or (f"HTTP {status_code}" if status_code is not None else "download failed")
        super().__init__(f"{url}: {detail}")
        self.url = url
        self.status_code = status_code


class UnrecoverableCrawlError(MirrorError):
    """Raised when the crawl loop cannot continue."""
