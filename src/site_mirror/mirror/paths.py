"""Mapping of site URLs to files in the output tree and to in-page references."""

from __future__ import annotations

import posixpath
from enum import Enum
from typing import Optional
from urllib.parse import quote, unquote, urljoin, urlsplit

from ..core.errors import LinkParseError

REWRITABLE_SCHEMES = frozenset({"http", "https"})
# Characters left untouched when re-encoding a local reference.
REFERENCE_SAFE_CHARS = "/!$&'()*+,;=:@~"


class LinkKind(str, Enum):
    """How a reference is consumed: navigated to, or loaded as a resource."""

    ANCHOR = "anchor"
    RESOURCE = "resource"


def _clean_path(path: str) -> str:
    """Drop ``.``/``..`` segments so a URL can never escape the output root."""

    segments = [segment for segment in path.split("/") if segment not in {".", ".."}]
    cleaned = "/".join(segments)
    if path.endswith("/") and not cleaned.endswith("/"):
        cleaned += "/"
    return cleaned


def url_to_output_path(url: str) -> str:
    """Return the page file (POSIX, relative to the output root) for ``url``.

    ``/`` becomes ``index.html``; extensionless routes become
    ``<route>/index.html`` so their children keep resolving relatively.
    """

    path = _clean_path(unquote(urlsplit(url).path))
    if path.strip("/") == "":
        return "index.html"

    path = path.lstrip("/")
    _, extension = posixpath.splitext(posixpath.basename(path))
    if path.endswith("/"):
        return f"{path}index.html"
    if not extension:
        return f"{path}/index.html"
    return path


def url_to_resource_path(url: str) -> Optional[str]:
    """Return where a downloaded resource is stored, or ``None`` for the root."""

    path = _clean_path(unquote(urlsplit(url).path)).lstrip("/")
    if not path:
        return None
    if path.endswith("/"):
        return f"{path}index.html"
    return path


def _relative_reference(target: str, from_path: str) -> str:
    start = posixpath.dirname(from_path) or "."
    reference = posixpath.relpath(target.rstrip("/") or ".", start)

    if reference == ".":
        reference = "./"
    elif reference == "..":
        reference = "../"
    elif not reference.startswith("../"):
        reference = f"./{reference}"

    if target.endswith("/") and not reference.endswith("/"):
        reference += "/"
    return quote(reference, safe=REFERENCE_SAFE_CHARS)


def url_to_local_link(
    value: Optional[str],
    origin_host: str,
    kind: LinkKind,
    *,
    base_url: Optional[str] = None,
    from_path: str = "index.html",
) -> Optional[str]:
    """Translate an attribute/CSS URL into a reference inside the mirror.

    Returns ``None`` when the value must be left as-is: empty values, pure
    fragments, non-http schemes (``javascript:``, ``mailto:``, ``tel:``,
    ``data:``) and other hosts. Query string and fragment are carried over
    verbatim. Raises :class:`LinkParseError` for values that cannot be parsed.
    """

    candidate = (value or "").strip()
    if not candidate or candidate.startswith("#"):
        return None

    try:
        absolute = urljoin(base_url, candidate) if base_url else candidate
        parts = urlsplit(absolute)
        hostname = (parts.hostname or "").lower()
    except ValueError as exc:
        raise LinkParseError(candidate) from exc

    if parts.scheme.lower() not in REWRITABLE_SCHEMES:
        return None
    if not hostname or hostname != origin_host.lower():
        return None

    if kind is LinkKind.ANCHOR:
        target = url_to_output_path(absolute)
    else:
        target = _clean_path(unquote(parts.path)).lstrip("/")

    reference = _relative_reference(target, from_path)
    if parts.query:
        reference += f"?{parts.query}"
    if parts.fragment:
        reference += f"#{parts.fragment}"
    return reference
