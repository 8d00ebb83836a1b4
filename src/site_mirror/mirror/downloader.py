"""Fetches single resources into the output tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import requests

from ..core.errors import DownloadError

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
DEFAULT_TIMEOUT = 15
DEFAULT_MAX_REDIRECTS = 10
CHUNK_SIZE = 64 * 1024
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 site-mirror",
}


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    return session


def download(
    url: str,
    destination: Path,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
) -> Path:
    """Stream ``url`` into ``destination``, following redirects by hand.

    Raises :class:`DownloadError` for non-success statuses, redirect chains
    longer than ``max_redirects``, transport failures and local paths that
    cannot be written. A partially written destination is removed before the
    error propagates.
    """

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DownloadError(url, reason=f"cannot create {destination.parent}: {exc}") from exc

    http = session or build_session()
    current_url = url

    for _ in range(max_redirects + 1):
        try:
            response = http.get(current_url, stream=True, allow_redirects=False, timeout=timeout)
        except requests.RequestException as exc:
            raise DownloadError(url, reason=str(exc)) from exc

        with response:
            status = response.status_code
            location = response.headers.get("Location")
            if status in REDIRECT_STATUSES and location:
                next_url = urljoin(current_url, location)
                logger.debug("Redirect %s -> %s (%s)", current_url, next_url, status)
                current_url = next_url
                continue

            if not 200 <= status < 300:
                raise DownloadError(url, status_code=status)

            _write_body(url, response, destination)
            logger.debug("Downloaded %s -> %s", url, destination)
            return destination

    raise DownloadError(url, reason=f"more than {max_redirects} redirects")


def _write_body(url: str, response: requests.Response, destination: Path) -> None:
    try:
        with destination.open("wb") as handle:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    handle.write(chunk)
    except (requests.RequestException, OSError) as exc:
        if destination.is_file():
            destination.unlink()
        raise DownloadError(url, reason=str(exc)) from exc
