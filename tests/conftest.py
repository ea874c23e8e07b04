"""Shared fixtures: an in-memory Product-Images drive served through a fake
requests session, a fake client-secret credential, and image helpers."""

import io
import itertools
import json
import re
import time
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import pytest
import requests
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError
from PIL import Image

from brandgraphics.shared.config import Settings
from brandgraphics.shared.graph_client import GraphClient

DRIVE_ID = "drive-1"
GRAPH = "https://graph.microsoft.com/v1.0"


def make_image(size=(400, 300), color=(0, 128, 255), fmt="PNG", mode="RGB") -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_response(status: int, json_body: Any = None, content: bytes = b"", url: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = content
    return resp


class FakeCredential:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls = 0

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return AccessToken("test-token", int(time.time()) + 3600)


def rejected_credential() -> FakeCredential:
    return FakeCredential(ClientAuthenticationError(message="AADSTS7000215: Invalid client secret provided."))


class FakeDrive:
    """Minimal Graph driveItem API over an in-memory folder tree."""

    _CHILDREN_RE = re.compile(r"^/drives/([^/]+)/items/([^/:]+)/children$")
    _ROOT_CHILDREN_RE = re.compile(r"^/drives/([^/]+)/root/children$")
    _CONTENT_RE = re.compile(r"^/drives/([^/]+)/items/([^/:]+)/content$")
    _UPLOAD_RE = re.compile(r"^/drives/([^/]+)/items/([^/:]+):/(.+):/content$")

    def __init__(self):
        self.items: Dict[str, Dict[str, Any]] = {"root": {"id": "root", "name": "root", "folder": {}, "parent": None}}
        self.calls: List[tuple] = []
        self.uploads: List[Dict[str, Any]] = []
        self.page_size: Optional[int] = None
        # path fragment -> list of statuses returned before serving normally
        self.failures: Dict[str, List[int]] = {}
        self._ids = itertools.count(1)

    # -- tree building -------------------------------------------------
    def add_folder(self, parent_id: str, name: str, item_id: Optional[str] = None) -> str:
        item_id = item_id or f"folder-{next(self._ids)}"
        self.items[item_id] = {"id": item_id, "name": name, "folder": {"childCount": 0}, "parent": parent_id}
        return item_id

    def add_file(self, parent_id: str, name: str, content: bytes = b"", mime_type: str = "image/png") -> str:
        item_id = f"file-{next(self._ids)}"
        self.items[item_id] = {
            "id": item_id,
            "name": name,
            "file": {"mimeType": mime_type},
            "size": len(content),
            "webUrl": f"https://contoso.sharepoint.com/{name}",
            "parent": parent_id,
            "content": content,
        }
        return item_id

    def children(self, parent_id: str) -> List[Dict[str, Any]]:
        return [
            {k: v for k, v in item.items() if k not in ("parent", "content")}
            for item in self.items.values()
            if item.get("parent") == parent_id
        ]

    # -- requests.Session surface --------------------------------------
    def request(self, method: str, url: str, headers=None, timeout=None, params=None, data=None, **kwargs):
        assert headers and headers.get("Authorization") == "Bearer test-token"
        path = url[len(GRAPH):] if url.startswith(GRAPH) else url
        self.calls.append((method, path, params))

        for fragment, statuses in self.failures.items():
            if fragment in path and statuses:
                return make_response(statuses.pop(0), {"error": {"code": "simulated"}}, url=url)

        if method == "GET":
            m = self._ROOT_CHILDREN_RE.match(path) or self._CHILDREN_RE.match(path)
            if m:
                parent = m.group(2) if m.re is self._CHILDREN_RE else "root"
                if parent not in self.items:
                    return make_response(404, {"error": {"code": "itemNotFound"}}, url=url)
                return make_response(200, self._page(parent, path), url=url)
            m = self._CONTENT_RE.match(path)
            if m:
                item = self.items.get(m.group(2))
                if item is None:
                    return make_response(404, {"error": {"code": "itemNotFound"}}, url=url)
                return make_response(200, content=item.get("content", b""), url=url)
            if path.startswith("/page/"):
                parent, offset = path[len("/page/"):].split("/")
                return make_response(200, self._page(parent, path, int(offset)), url=url)

        if method == "PUT":
            m = self._UPLOAD_RE.match(path)
            if m:
                name = unquote(m.group(3))
                item_id = self.add_file(m.group(2), name, data or b"", headers.get("Content-Type", ""))
                self.uploads.append({"folderId": m.group(2), "name": name, "content": data})
                return make_response(201, {"id": item_id, "name": name, "webUrl": f"https://contoso.sharepoint.com/{name}"}, url=url)

        return make_response(400, {"error": {"code": "unsupported"}}, url=url)

    def _page(self, parent: str, path: str, offset: int = 0) -> Dict[str, Any]:
        kids = self.children(parent)
        if not self.page_size:
            return {"value": kids}
        body: Dict[str, Any] = {"value": kids[offset:offset + self.page_size]}
        if offset + self.page_size < len(kids):
            body["@odata.nextLink"] = f"{GRAPH}/page/{parent}/{offset + self.page_size}"
        return body


@pytest.fixture
def settings() -> Settings:
    return Settings(
        tenant_id="tenant",
        client_id="client",
        client_secret="secret-value",
        drive_id=DRIVE_ID,
        brand_roots={"SSC": "ssc-root", "MT": "mt-root", "DWELL": None},
        batch_delay_ms=0,
    )


@pytest.fixture
def drive() -> FakeDrive:
    """SSC brand with logos, two products that have photos and one that has none."""
    d = FakeDrive()
    root = d.add_folder("root", "Southern Shutter Company", item_id="ssc-root")
    logos = d.add_folder(root, "Logos", item_id="ssc-logos")
    d.add_file(logos, "notes.txt", b"not a logo", "text/plain")
    d.add_file(logos, "ssc-logo.PNG", make_image((300, 120), (255, 0, 0)))
    d.add_folder(root, "Generated Posts", item_id="ssc-posts")
    exterior = d.add_folder(root, "Exterior Products", item_id="ssc-exterior")
    d.add_folder(root, "Interior Products", item_id="ssc-interior")

    shutters = d.add_folder(exterior, "Plantation Shutters", item_id="p-shutters")
    lifestyle = d.add_folder(shutters, "Lifestyle Images", item_id="p-shutters-lifestyle")
    d.add_file(lifestyle, "porch.jpg", make_image((1600, 1200), (10, 200, 10), fmt="JPEG"), "image/jpeg")
    catalog = d.add_folder(shutters, "Catalog Images", item_id="p-shutters-catalog")
    d.add_file(catalog, "spec-sheet.pdf", b"%PDF-1.4", "application/pdf")
    d.add_file(catalog, "white.png", make_image((800, 800), (250, 250, 250)))

    batten = d.add_folder(exterior, "Board and Batten", item_id="p-batten")
    batten_catalog = d.add_folder(batten, "catalog images", item_id="p-batten-catalog")
    d.add_file(batten_catalog, "batten.webp", make_image((900, 1600), (120, 60, 30), fmt="WEBP"), "image/webp")

    d.add_folder(exterior, "Empty Product", item_id="p-empty")
    return d


@pytest.fixture
def credential() -> FakeCredential:
    return FakeCredential()


@pytest.fixture
def client(settings, credential, drive) -> GraphClient:
    return GraphClient(settings, credential=credential, session=drive)


@pytest.fixture
def client_factory(credential, drive):
    return lambda s: GraphClient(s, credential=credential, session=drive)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Retries back off through time.sleep; keep tests fast."""
    monkeypatch.setattr(time, "sleep", lambda seconds: None)
