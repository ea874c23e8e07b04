# Microsoft Graph client for the Product-Images document library

import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import backoff
import requests
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import ClientSecretCredential

from brandgraphics.shared.config import Settings
from brandgraphics.shared.logging_utils import info as log_info, warning as log_warning
from brandgraphics.specs.common.errors import UpstreamAuthError, UpstreamError


class RetryableGraphError(Exception):
    """Indicates a Graph operation that should be retried"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _log_backoff(details: Dict[str, Any]) -> None:
    log_warning(
        None,
        "graph:retry",
        tries=details.get("tries"),
        waitSeconds=round(details.get("wait") or 0, 2),
        error=str(details.get("exception")),
    )


class GraphClient:
    # Retry policy for throttling (429) and transient 5xx responses
    MAX_RETRIES = 3
    MAX_RETRY_TIME = 10.0
    # Refresh the token this many seconds before it expires
    TOKEN_SKEW_SECONDS = 60

    def __init__(
        self,
        settings: Settings,
        credential: Optional[Any] = None,
        session: Optional[requests.Session] = None,
    ):
        """Create a client bound to the configured drive.

        Args:
            settings: App configuration (credentials, drive id, endpoints)
            credential: Anything with get_token(scope) -> AccessToken; defaults to
                a ClientSecretCredential built from the settings
            session: requests session used for every Graph call
        """
        self.settings = settings
        self.drive_id = settings.drive_id
        self._credential = credential or ClientSecretCredential(
            settings.tenant_id,
            settings.client_id,
            settings.client_secret,
        )
        self._session = session or requests.Session()
        self._token: Optional[AccessToken] = None

    def access_token(self) -> str:
        """Client-credentials token for Graph, cached until shortly before expiry.

        Raises:
            UpstreamAuthError: If the token exchange is rejected
        """
        if self._token is None or self._token.expires_on - self.TOKEN_SKEW_SECONDS <= time.time():
            try:
                self._token = self._credential.get_token(self.settings.graph_scope)
            except ClientAuthenticationError as exc:
                status = getattr(exc, "status_code", None)
                raise UpstreamAuthError(
                    status if status in (401, 403) else 401,
                    details={"stage": "token", "error": str(exc)[:300]},
                ) from exc
            log_info(None, "graph:token_acquired")
        return self._token.token

    @backoff.on_exception(
        backoff.expo,
        RetryableGraphError,
        max_tries=MAX_RETRIES,
        max_time=MAX_RETRY_TIME,
        on_backoff=_log_backoff,
    )
    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        headers = {"Authorization": f"Bearer {self.access_token()}"}
        headers.update(kwargs.pop("headers", None) or {})
        try:
            resp = self._session.request(
                method,
                url,
                headers=headers,
                timeout=self.settings.graph_timeout_seconds,
                **kwargs,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableGraphError(f"{method} {url} failed: {exc}") from exc

        status = resp.status_code
        if status in (401, 403):
            raise UpstreamAuthError(status, details={"url": url})
        if status == 429 or status >= 500:
            raise RetryableGraphError(f"{method} {url} failed with status code {status}", status_code=status)
        if status >= 400:
            raise UpstreamError(
                f"Request failed with status code {status}",
                status_code=status,
                details={"url": url, "body": resp.text[:500]},
            )
        return resp

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = path if path.startswith("https://") else f"{self.settings.graph_base_url}{path}"
        try:
            return self._send(method, url, **kwargs)
        except RetryableGraphError as exc:
            raise UpstreamError(str(exc), status_code=exc.status_code, details={"url": url}) from exc

    def list_children(
        self,
        parent_id: str,
        *,
        select: Optional[str] = None,
        top: Optional[int] = None,
        drive_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """List driveItems under a folder; parent_id "root" lists the drive root."""
        drive = drive_id or self.drive_id
        if parent_id == "root":
            path = f"/drives/{drive}/root/children"
        else:
            path = f"/drives/{drive}/items/{parent_id}/children"
        params: Dict[str, Any] = {}
        if select:
            params["$select"] = select
        if top:
            params["$top"] = top

        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = path
        while next_url:
            data = self._request("GET", next_url, params=params or None).json()
            items.extend(data.get("value") or [])
            next_url = data.get("@odata.nextLink")
            # nextLink already carries the query string
            params = {}
            if top and len(items) >= top:
                break
        return items

    def download_content(self, item_id: str, *, drive_id: Optional[str] = None) -> bytes:
        drive = drive_id or self.drive_id
        resp = self._request("GET", f"/drives/{drive}/items/{item_id}/content")
        return resp.content

    def upload_to_folder(
        self,
        folder_id: str,
        file_name: str,
        content: bytes,
        *,
        content_type: str = "image/png",
    ) -> Dict[str, Any]:
        """Create or replace a file inside a folder; returns the driveItem."""
        path = f"/drives/{self.drive_id}/items/{folder_id}:/{quote(file_name, safe='')}:/content"
        resp = self._request("PUT", path, data=content, headers={"Content-Type": content_type})
        item = resp.json()
        log_info(None, "graph:uploaded", folderId=folder_id, fileName=file_name, itemId=item.get("id"))
        return item
