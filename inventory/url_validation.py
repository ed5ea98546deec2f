"""URL validation and record URL construction.

Base URLs come from user configuration and record ids come from the remote
store, so both are checked before they end up in a request.
"""

import re

from urllib.parse import quote, urlparse

__all__ = [
    "validate_base_url",
    "build_collection_url",
    "build_record_url",
    "sanitize_url",
    "URLValidationError",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


# Dangerous URL schemes to reject
DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}


def sanitize_url(url: str) -> str:
    """Sanitize a URL by stripping whitespace and control characters.

    Args:
        url: Raw URL string

    Returns:
        Sanitized URL string
    """
    if not url:
        return ""

    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    url = url.replace("%00", "")

    return url


def validate_base_url(url: str) -> str:
    """Validate the API base URL.

    Args:
        url: Base URL such as ``http://192.168.0.110:3000``

    Returns:
        Validated URL without a trailing slash

    Raises:
        URLValidationError: If URL is empty, not http(s), or has no host
    """
    if not url:
        raise URLValidationError("URL is empty")

    url = sanitize_url(url)

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLValidationError(f"Failed to parse URL: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(f"Invalid URL scheme: {scheme or '(none)'}")
    if not parsed.netloc:
        raise URLValidationError("URL has no host")
    if parsed.query or parsed.fragment:
        raise URLValidationError("Base URL must not carry a query or fragment")

    return url.rstrip("/")


def build_collection_url(base_url: str, path: str) -> str:
    """Join a validated base URL and a collection path like ``/produtos``."""
    return f"{base_url.rstrip('/')}/{path.strip('/')}"


def build_record_url(base_url: str, path: str, record_id: str) -> str:
    """Build the URL of a single record.

    The id is percent-quoted into exactly one path segment.

    Raises:
        URLValidationError: If the id is empty or a relative path segment
    """
    record_id = sanitize_url(str(record_id))
    if not record_id or record_id in (".", ".."):
        raise URLValidationError(f"Invalid record id: {record_id!r}")
    return f"{build_collection_url(base_url, path)}/{quote(record_id, safe='')}"
