"""HTTP client for the remote inventory API.

Wraps ``/produtos`` (multipart writes) and ``/general-notices`` (JSON
writes). Every failure is raised as an ApiError subclass; nothing is
retried.
"""

import time
from typing import Any, Dict, List, Optional, Tuple

import requests  # type: ignore[import-untyped]

from inventory.config import (
    BASE_URL,
    HEADERS,
    NOTICES_PATH,
    PRODUCTS_PATH,
    REQUEST_TIMEOUT,
)
from inventory.image_utils import ImagePart
from inventory.logging_config import get_logger, log_api_call
from inventory.models import NoticeDraft, NoticeRecord, ProductRecord
from inventory.url_validation import (
    build_collection_url,
    build_record_url,
    validate_base_url,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "TransportError",
    "ServerError",
    "ResponseFormatError",
    "create_session",
]

logger = get_logger("client")


class ApiError(Exception):
    """Base class for failures talking to the remote API."""
    pass


class TransportError(ApiError):
    """No response: connection refused, DNS failure, timeout."""
    pass


class ServerError(ApiError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(ApiError):
    """The API answered 2xx but the body is not the expected JSON shape."""
    pass


def create_session() -> requests.Session:
    """Create a requests Session with default headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    session.headers.setdefault("Accept-Encoding", "gzip, deflate")
    return session


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


class ApiClient:
    """Thin client over the products and notices endpoints."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = validate_base_url(base_url)
        self.session = session or create_session()
        self.timeout = timeout

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Issue a single request and translate failures into ApiError."""
        started = time.monotonic()
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            log_api_call(method, url, elapsed_ms=_elapsed_ms(started), error=f"timeout: {e}")
            raise TransportError(f"Timeout on {method} {url}: {e}") from e
        except requests.exceptions.ConnectionError as e:
            log_api_call(method, url, elapsed_ms=_elapsed_ms(started), error=f"connection: {e}")
            raise TransportError(
                f"Failed to reach {url}: {e}\n"
                f"Please check your network connection and the API address."
            ) from e
        except requests.exceptions.RequestException as e:
            log_api_call(method, url, elapsed_ms=_elapsed_ms(started), error=str(e))
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            log_api_call(
                method, url, resp.status_code, _elapsed_ms(started), error=resp.text[:500],
            )
            raise ServerError(
                f"HTTP Error {resp.status_code}: {resp.reason} ({method} {url})",
                status_code=resp.status_code,
            )

        log_api_call(method, url, resp.status_code, _elapsed_ms(started))
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ResponseFormatError(f"Response is not JSON: {resp.text[:200]!r}") from e

    @staticmethod
    def _optional_json(resp: requests.Response) -> Optional[Dict[str, Any]]:
        """Parse a write response body, tolerating an empty or non-JSON body."""
        if not resp.content:
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"Write response from {resp.url} is not JSON")
            return None
        return data if isinstance(data, dict) else None

    def _list(self, path: str) -> List[Dict[str, Any]]:
        resp = self._request("GET", build_collection_url(self.base_url, path))
        data = self._json(resp)
        if not isinstance(data, list):
            raise ResponseFormatError(f"Expected a JSON array from {path}, got {type(data).__name__}")
        return data

    # Products

    def list_products(self) -> List[ProductRecord]:
        """GET /produtos - the full collection, in store order."""
        records = []
        for item in self._list(PRODUCTS_PATH):
            try:
                records.append(ProductRecord.from_api(item))
            except (AttributeError, TypeError, ValueError) as e:
                raise ResponseFormatError(f"Malformed product in response: {e}") from e
        return records

    def _write_product(
        self,
        method: str,
        url: str,
        fields: Dict[str, str],
        image: Optional[ImagePart],
    ) -> Optional[ProductRecord]:
        # Text fields go in as filename-less parts so the body is always
        # multipart/form-data, with or without an image
        parts: List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]] = [
            (key, (None, value, None)) for key, value in fields.items()
        ]
        if image is not None:
            parts.append(("image", image.as_requests_file()))
        resp = self._request(method, url, files=parts)
        data = self._optional_json(resp)
        if data is None:
            return None
        try:
            return ProductRecord.from_api(data)
        except ValueError as e:
            logger.warning(f"Ignoring unparseable write response from {url}: {e}")
            return None

    def create_product(
        self,
        fields: Dict[str, str],
        image: Optional[ImagePart] = None,
    ) -> Optional[ProductRecord]:
        """POST /produtos as multipart/form-data.

        Returns:
            The created record if the API echoes it back, else None
        """
        url = build_collection_url(self.base_url, PRODUCTS_PATH)
        return self._write_product("POST", url, fields, image)

    def update_product(
        self,
        product_id: str,
        fields: Dict[str, str],
        image: Optional[ImagePart] = None,
    ) -> Optional[ProductRecord]:
        """PUT /produtos/{id} - full overwrite, same payload shape as create."""
        url = build_record_url(self.base_url, PRODUCTS_PATH, product_id)
        return self._write_product("PUT", url, fields, image)

    def delete_product(self, product_id: str) -> None:
        """DELETE /produtos/{id}."""
        self._request("DELETE", build_record_url(self.base_url, PRODUCTS_PATH, product_id))

    # General notices

    def list_notices(self) -> List[NoticeRecord]:
        """GET /general-notices."""
        records = []
        for item in self._list(NOTICES_PATH):
            try:
                records.append(NoticeRecord.from_api(item))
            except (AttributeError, TypeError, ValueError) as e:
                raise ResponseFormatError(f"Malformed notice in response: {e}") from e
        return records

    def _write_notice(self, method: str, url: str, draft: NoticeDraft) -> Optional[NoticeRecord]:
        resp = self._request(method, url, json=draft.to_json())
        data = self._optional_json(resp)
        if data is None:
            return None
        try:
            return NoticeRecord.from_api(data)
        except ValueError:
            return None

    def create_notice(self, draft: NoticeDraft) -> Optional[NoticeRecord]:
        url = build_collection_url(self.base_url, NOTICES_PATH)
        return self._write_notice("POST", url, draft)

    def update_notice(self, notice_id: str, draft: NoticeDraft) -> Optional[NoticeRecord]:
        url = build_record_url(self.base_url, NOTICES_PATH, notice_id)
        return self._write_notice("PUT", url, draft)

    def delete_notice(self, notice_id: str) -> None:
        self._request("DELETE", build_record_url(self.base_url, NOTICES_PATH, notice_id))
