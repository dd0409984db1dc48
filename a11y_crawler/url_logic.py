# a11y_crawler/url_logic.py
from __future__ import annotations

import logging
import os
from typing import List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

# Paths ending in one of these are never navigated to.
EXTENSION_DENYLIST = {
    # images
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".bmp",
    ".ico",
    ".svg",
    ".avif",
    ".tif",
    ".tiff",
    # video/audio
    ".mp4",
    ".m4v",
    ".mov",
    ".avi",
    ".webm",
    ".ogg",
    ".ogv",
    ".mp3",
    ".wav",
    ".flac",
    ".aac",
    # documents
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".odt",
    ".ods",
    ".odp",
    ".rtf",
    ".epub",
    # archives/binaries
    ".zip",
    ".tar",
    ".gz",
    ".tgz",
    ".bz2",
    ".xz",
    ".7z",
    ".rar",
    ".exe",
    ".msi",
    ".dmg",
    ".iso",
    ".apk",
    ".deb",
    ".rpm",
    ".bin",
    # fonts
    ".woff",
    ".woff2",
    ".ttf",
    ".otf",
    ".eot",
    # structured data / feeds
    ".json",
    ".xml",
    ".csv",
    ".rss",
    ".atom",
    ".txt",
    # styles/scripts
    ".css",
    ".js",
    ".mjs",
    ".map",
}

ALLOWED_SCHEMES = {"http", "https"}

DEFAULT_PORTS = {"http": 80, "https": 443}


def _path_ext(u: str) -> str:
    p = urlparse(u)
    # query/fragment are not part of the path
    _, ext = os.path.splitext(p.path.lower())
    return ext


def _scheme(u: str) -> str:
    try:
        return urlparse(u).scheme.lower()
    except ValueError:
        return ""


def is_fetchable_url(u: str) -> bool:
    """Return True iff URL uses a scheme we can actually navigate to (http/https)."""
    return _scheme(u) in ALLOWED_SCHEMES


def normalize_url(url: str) -> str:
    """
    Canonical form used as page identity: lowercase scheme/host, empty path
    becomes "/", fragment dropped. Path and query are otherwise kept as-is, so
    `/a` and `/a/` stay distinct pages.
    Robust to malformed URLs (returns the input, minus any fragment, on failure).
    """
    try:
        p = urlparse(url)
        _ = p.port  # raises ValueError for a non-numeric or out of range port
        path = p.path
        if p.netloc and not path:
            path = "/"
        return p._replace(
            scheme=(p.scheme or "").lower(),
            netloc=(p.netloc or "").lower(),
            path=path,
            fragment="",
        ).geturl()
    except ValueError:
        log.debug("Could not parse URL %r; using it as an opaque key.", url)
        return url.split("#", 1)[0]


def origin_of(url: str) -> str:
    """
    Return "scheme://host[:port]" for `url`, or "" if it has no usable origin.
    Default ports are elided so https://a.com and https://a.com:443 compare equal.
    """
    try:
        p = urlparse(url)
        scheme = (p.scheme or "").lower()
        host = (p.hostname or "").lower()
        port = p.port
    except ValueError:
        return ""
    if not scheme or not host:
        return ""
    if port is None or port == DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_in_scope(url: str, base_origin: str) -> bool:
    """True iff `url` shares scheme, host and port with `base_origin`."""
    origin = origin_of(url)
    if not origin:
        return False
    return origin == origin_of(base_origin)


def is_document_like(url: str) -> bool:
    """
    Heuristic: path extension NOT in the denylist.
    Allows extensionless paths and 'clean URLs'. Unparseable URLs count as documents.
    """
    try:
        ext = _path_ext(url)
    except ValueError:
        return True
    return not (ext and ext in EXTENSION_DENYLIST)


# ---------- Link extraction ----------


def extract_hyperlinks(html: str, page_url: str) -> List[str]:
    """
    Return the absolute http(s) targets of every <a href> on the page,
    in document order. Relative hrefs are resolved against the document's
    <base href> when it has one, otherwise against `page_url`.
    Duplicates are kept; the crawler's visited set deals with them.
    """
    soup = BeautifulSoup(html, "html.parser")
    base_url = page_url
    base = soup.find("base", href=True)
    if base is not None and isinstance(base.get("href"), str):
        try:
            base_url = urljoin(page_url, base["href"].strip())
        except ValueError:
            log.debug("Ignoring unresolvable <base href> %r on %s", base["href"], page_url)

    out: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href")
        if not href or not isinstance(href, str):
            continue
        try:
            resolved = urljoin(base_url, href.strip())
        except ValueError:
            log.debug("Skipping unresolvable href %r on %s", href, page_url)
            continue
        if not is_fetchable_url(resolved):
            continue
        out.append(resolved)
    return out
