"""Shared test fixtures: an in-memory stand-in for the remote API."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import pytest
import requests

from inventory.client import ApiClient
from inventory.repository import NoticeRepository, ProductRepository

API_URL = "http://fake-api.local:3000"


def make_response(status_code: int = 200, body: Any = None, url: str = "") -> requests.Response:
    """Build a real requests.Response carrying a JSON (or raw) body."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Error"
    resp.url = url
    if body is None:
        resp._content = b""
    elif isinstance(body, (bytes, str)):
        resp._content = body.encode() if isinstance(body, str) else body
    else:
        resp._content = json.dumps(body).encode()
        resp.headers["Content-Type"] = "application/json"
    resp.encoding = "utf-8"
    return resp


def _coerce_quantity(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except ValueError:
        return None


class FakeApi:
    """Session replacement that implements /produtos and /general-notices.

    Updates are strict full overwrites: any field missing from a PUT is
    cleared, so a client that forgets to resend a field gets caught.
    """

    def __init__(self) -> None:
        self.products: List[Dict[str, Any]] = []
        self.notices: List[Dict[str, Any]] = []
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.headers: Dict[str, str] = {}
        self._next_id = 1
        self._clock = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        self._failures: List[Tuple[str, str, Any]] = []
        self.on_request: Optional[Callable[[str, str], None]] = None

    # Test helpers

    def new_id(self) -> str:
        record_id = f"id{self._next_id}"
        self._next_id += 1
        return record_id

    def tick(self) -> str:
        self._clock += timedelta(minutes=1)
        return self._clock.isoformat().replace("+00:00", "Z")

    def add_product(self, **fields: Any) -> Dict[str, Any]:
        record = {
            "_id": fields.pop("_id", None) or self.new_id(),
            "name": "",
            "description": "",
            "quantity": None,
            "imageUrl": None,
            "dateAdded": fields.pop("dateAdded", None) or self.tick(),
        }
        record.update(fields)
        self.products.append(record)
        return record

    def add_notice(self, notice: str) -> Dict[str, Any]:
        record = {"_id": self.new_id(), "notice": notice}
        self.notices.append(record)
        return record

    def fail(self, method: str, path_prefix: str, outcome: Any) -> None:
        """Make the next matching request fail with a status code or exception."""
        self._failures.append((method, path_prefix, outcome))

    def calls_for(self, method: str) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [call for call in self.calls if call[0] == method]

    # Session interface

    def request(self, method: str, url: str, timeout: float = None, **kwargs: Any) -> requests.Response:
        self.calls.append((method, url, kwargs))
        if self.on_request is not None:
            self.on_request(method, url)

        path = urlparse(url).path
        for i, (f_method, prefix, outcome) in enumerate(self._failures):
            if f_method == method and path.startswith(prefix):
                del self._failures[i]
                if isinstance(outcome, int):
                    return make_response(outcome, {"error": "boom"}, url)
                raise outcome

        segments = [unquote(s) for s in path.strip("/").split("/")]
        collection = segments[0]
        record_id = segments[1] if len(segments) > 1 else None

        if collection == "produtos":
            return self._products(method, record_id, kwargs, url)
        if collection == "general-notices":
            return self._notices(method, record_id, kwargs, url)
        return make_response(404, {"error": "not found"}, url)

    def _find(self, store: List[Dict[str, Any]], record_id: str) -> Optional[Dict[str, Any]]:
        for record in store:
            if record["_id"] == record_id:
                return record
        return None

    @staticmethod
    def _parse_multipart(kwargs: Dict[str, Any]) -> Tuple[Dict[str, str], Dict[str, Tuple]]:
        fields: Dict[str, str] = {}
        files: Dict[str, Tuple] = {}
        for name, part in kwargs.get("files") or []:
            filename, content = part[0], part[1]
            if filename is None:
                fields[name] = content
            else:
                files[name] = part
        return fields, files

    def _products(self, method: str, record_id: Optional[str], kwargs: Dict[str, Any], url: str):
        if method == "GET" and record_id is None:
            return make_response(200, self.products, url)

        if method == "POST" and record_id is None:
            fields, files = self._parse_multipart(kwargs)
            record = self.add_product(
                name=fields.get("name", ""),
                description=fields.get("description", ""),
                quantity=_coerce_quantity(fields.get("quantity")),
                imageUrl=f"{API_URL}/uploads/{files['image'][0]}" if "image" in files else None,
            )
            return make_response(201, record, url)

        record = self._find(self.products, record_id) if record_id else None
        if record is None:
            return make_response(404, {"error": "not found"}, url)

        if method == "PUT":
            fields, files = self._parse_multipart(kwargs)
            record["name"] = fields.get("name", "")
            record["description"] = fields.get("description", "")
            record["quantity"] = _coerce_quantity(fields.get("quantity"))
            if "image" in files:
                record["imageUrl"] = f"{API_URL}/uploads/{files['image'][0]}"
            else:
                record["imageUrl"] = fields.get("imageUrl")
            return make_response(200, record, url)

        if method == "DELETE":
            self.products.remove(record)
            return make_response(200, {"message": "deleted"}, url)

        return make_response(405, {"error": "method not allowed"}, url)

    def _notices(self, method: str, record_id: Optional[str], kwargs: Dict[str, Any], url: str):
        if method == "GET" and record_id is None:
            return make_response(200, self.notices, url)
        if method == "POST" and record_id is None:
            record = self.add_notice(kwargs["json"]["notice"])
            return make_response(201, record, url)

        record = self._find(self.notices, record_id) if record_id else None
        if record is None:
            return make_response(404, {"error": "not found"}, url)
        if method == "PUT":
            record["notice"] = kwargs["json"]["notice"]
            return make_response(200, record, url)
        if method == "DELETE":
            self.notices.remove(record)
            return make_response(204, None, url)
        return make_response(405, {"error": "method not allowed"}, url)


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def client(fake_api):
    return ApiClient(API_URL, session=fake_api)


@pytest.fixture
def product_repo(client):
    return ProductRepository(client)


@pytest.fixture
def notice_repo(client):
    return NoticeRepository(client)


@pytest.fixture
def png_file(tmp_path):
    """A tiny real PNG on disk."""
    from PIL import Image

    path = tmp_path / "foto.png"
    Image.new("RGB", (4, 4), (200, 10, 10)).save(path, format="PNG")
    return path
