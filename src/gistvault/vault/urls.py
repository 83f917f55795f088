# Vault - URL Normalization
#
# Site passwords are tagged by the pieces of their login URL. URLs are
# normalized first so "Example.com", "http://www.example.com/" and
# "example.com:80" all produce the same tags.

import re
from dataclasses import dataclass
from typing import Dict
from urllib.parse import parse_qsl, urlencode, urlsplit

DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443, "ftp": 21, "ws": 80, "wss": 443}

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)
_TRACKING_PARAM_RE = re.compile(r"^utm_\w+", re.IGNORECASE)


@dataclass
class UrlComponents:
    """Browser-style URL parts, used as password tags."""
    hostname: str
    pathname: str
    protocol: str
    port: str
    search: str
    href: str


def _split(url: str):
    url = url.strip()
    if url.startswith("//"):
        url = "http:" + url
    elif not _SCHEME_RE.match(url):
        url = "http://" + url

    parts = urlsplit(url)
    hostname = parts.hostname or ""
    if not hostname:
        raise ValueError(f"URL has no hostname: {url!r}")

    if hostname.startswith("www.") and "." in hostname[4:]:
        hostname = hostname[4:]

    scheme = parts.scheme.lower()
    port = parts.port  # ValueError on a non-numeric port
    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        port = None

    path = re.sub(r"/{2,}", "/", parts.path).rstrip("/")

    params = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if not _TRACKING_PARAM_RE.match(name)
    ]
    params.sort(key=lambda item: item[0])
    query = urlencode(params)

    return scheme, hostname, port, path, query


def _netloc(hostname: str, port) -> str:
    host = f"[{hostname}]" if ":" in hostname else hostname
    return f"{host}:{port}" if port is not None else host


def normalize_url(url: str) -> str:
    """
    Normalize a URL.

    Adds a missing http:// scheme, lower-cases scheme and host, strips
    "www.", credentials, default ports, utm_* parameters, the fragment
    and any trailing slash, and sorts the query string.

    Raises:
        ValueError: The URL has no hostname or an invalid port
    """
    scheme, hostname, port, path, query = _split(url)
    normalized = f"{scheme}://{_netloc(hostname, port)}"
    if query:
        normalized += f"{path or '/'}?{query}"
    else:
        normalized += path
    return normalized


def url_components(url: str) -> UrlComponents:
    """Normalize ``url`` and return its browser-style parts."""
    scheme, hostname, port, path, query = _split(url)
    pathname = path or "/"
    search = f"?{query}" if query else ""
    return UrlComponents(
        hostname=hostname,
        pathname=pathname,
        protocol=f"{scheme}:",
        port=str(port) if port is not None else "",
        search=search,
        href=f"{scheme}://{_netloc(hostname, port)}{pathname}{search}",
    )
