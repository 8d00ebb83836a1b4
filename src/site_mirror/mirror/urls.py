"""Canonical keys for frontier deduplication."""

from __future__ import annotations


def normalize_url(url: str) -> str:
    """Return the dedup key for ``url``.

    Drops the fragment and any trailing ``/``. The result is only ever used
    for visited-set comparisons; requests are always issued with the raw URL.
    """

    without_fragment = url.split("#", 1)[0]
    return without_fragment.rstrip("/")
