"""Configuration loading from the environment and CLI overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_MAX_PAGES = 100
DEFAULT_NAV_TIMEOUT_MS = 30000
TRUTHY_VALUES = {"1", "true", "yes"}


@dataclass(slots=True)
class MirrorConfig:
    """Holds runtime options for a single mirror run."""

    target_url: str
    output_dir: Path
    report_path: Path
    max_pages: int = DEFAULT_MAX_PAGES
    download_external: bool = False
    assets_dir: Optional[Path] = None
    navigation_timeout: int = DEFAULT_NAV_TIMEOUT_MS
    headless: bool = True

    @property
    def origin_host(self) -> str:
        return (urlparse(self.target_url).hostname or "").lower()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def load_configuration(
    target_url: Optional[str] = None,
    report_name: Optional[str] = None,
    *,
    max_pages: Optional[int] = None,
    download_external: Optional[bool] = None,
    output_dir: Optional[str] = None,
    navigation_timeout: Optional[int] = None,
    headless: Optional[bool] = None,
) -> MirrorConfig:
    """Builds a ``MirrorConfig`` from environment variables and explicit overrides."""

    load_dotenv()  # Loads .env values if present

    seed = target_url or os.getenv("TARGET_URL") or ""
    seed = seed.strip()
    if not seed:
        raise ConfigurationError("TARGET_URL environment variable not set.")

    parsed = urlparse(seed)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ConfigurationError(f"TARGET_URL must be an absolute http(s) URL, got {seed!r}")

    pages = max_pages if max_pages is not None else _env_int("MAX_PAGES", DEFAULT_MAX_PAGES)
    if pages < 1:
        raise ConfigurationError(f"MAX_PAGES must be positive, got {pages}")

    timeout = (
        navigation_timeout
        if navigation_timeout is not None
        else _env_int("NAV_TIMEOUT_MS", DEFAULT_NAV_TIMEOUT_MS)
    )

    assets_value = os.getenv("ASSETS_DIR", "assets")
    report_value = report_name or os.getenv("MIRROR_REPORT", "mirror_report.json")

    return MirrorConfig(
        target_url=seed,
        output_dir=Path(output_dir or os.getenv("OUTPUT_DIR", "dist")).resolve(),
        report_path=Path(report_value).resolve(),
        max_pages=pages,
        download_external=(
            download_external
            if download_external is not None
            else _env_flag("DOWNLOAD_EXTERNAL", False)
        ),
        assets_dir=Path(assets_value).resolve() if assets_value else None,
        navigation_timeout=timeout,
        headless=headless if headless is not None else _env_flag("HEADLESS", True),
    )
