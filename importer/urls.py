"""
MarkPort v1 - URL Helpers

URL validation and the base-URL key used for duplicate detection.
"""

from urllib.parse import urlsplit

HTTP_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}


def is_valid_http_url(url) -> bool:
    """Return True for an absolute http(s) URL with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return parts.scheme.lower() in HTTP_SCHEMES and bool(parts.hostname)


def base_url(url) -> str | None:
    """
    Reduce a URL to scheme + host + path, dropping query and fragment.

    Scheme and host are lower-cased and an empty path becomes "/", so
    "HTTPS://Example.com?utm_source=x" and "https://example.com/" compare
    equal. Returns None when the URL is not a valid http(s) URL.
    """
    if not is_valid_http_url(url):
        return None
    parts = urlsplit(url.strip())
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    scheme = parts.scheme.lower()
    if parts.port is not None and parts.port != DEFAULT_PORTS[scheme]:
        host = f"{host}:{parts.port}"
    path = parts.path or "/"
    return f"{scheme}://{host}{path}"
