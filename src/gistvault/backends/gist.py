# Backends - GitHub Gist Backend
#
# Concrete RemoteBackend for GitHub gists. Each vault lives in one
# private gist; every file in it is a JSON document.
#
# Supports:
#   - HTTP basic auth (account username + password or personal token)
#   - Pagination of the gist listing (per_page=100)
#   - Injected TransportHooks around every request
#
# Failures are raised as BackendError / BackendAuthError. There is no
# retry or backoff here; callers decide whether to try again.

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import (
    BackendAuthError,
    BackendError,
    RemoteBackend,
    RemoteCollection,
    RemoteFile,
)
from .hooks import TransportHooks

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
GIST_DESCRIPTION = "gistvault secret files"
PAGE_SIZE = 100
REQUEST_TIMEOUT_SEC = 30.0


class GistBackend(RemoteBackend):
    """GitHub gist storage backend.

    Usage::

        async with GistBackend("octocat", token) as backend:
            gists = await backend.list_collections()

    Args:
        username: GitHub account name.
        password: Account password or personal access token (gist scope).
        api_url: Override the API base URL (GitHub Enterprise).
        timeout: Per-request timeout in seconds.
        hooks: Optional TransportHooks wrapped around each request.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        username: str,
        password: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = REQUEST_TIMEOUT_SEC,
        hooks: Optional[TransportHooks] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_url = api_url.rstrip("/")
        self._hooks = hooks or TransportHooks()
        self._client = httpx.AsyncClient(
            base_url=self._api_url,
            auth=httpx.BasicAuth(username, password),
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": "gistvault/0.1",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """Send one request, map failures to BackendError.

        Unauthenticated requests drop the client's basic auth, so the
        account token only ever goes to the API host.
        """
        extra: Dict[str, Any] = {} if authenticated else {"auth": None}
        status_code: Optional[int] = None
        await self._hooks.on_request(method, url)
        try:
            resp = await self._client.request(
                method, url, json=json_body, params=params, **extra
            )
            status_code = resp.status_code
        except httpx.HTTPError as exc:
            logger.warning("Gist request %s %s failed: %s", method, url, exc)
            raise BackendError(f"{method} {url} failed: {exc}") from exc
        finally:
            await self._hooks.on_response(method, url, status_code)

        if resp.status_code in (401, 403):
            raise BackendAuthError(
                f"GitHub rejected the credentials ({resp.status_code})",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            raise BackendError(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp

    async def _json(self, method: str, url: str, **kwargs) -> Any:
        resp = await self._send(method, url, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise BackendError(
                f"{method} {url} returned a non-JSON body",
                status_code=resp.status_code,
            ) from exc

    @staticmethod
    def _parse_gist(data: Dict[str, Any]) -> RemoteCollection:
        """Convert a gist API object into a RemoteCollection."""
        if not isinstance(data, dict) or "id" not in data:
            raise BackendError("Unexpected gist payload")

        files: Dict[str, RemoteFile] = {}
        for name, meta in (data.get("files") or {}).items():
            meta = meta or {}
            # Listings omit content; single-gist reads inline it unless truncated
            content = None
            if "content" in meta and not meta.get("truncated"):
                content = meta["content"]
            files[name] = RemoteFile(
                filename=meta.get("filename", name),
                raw_url=meta.get("raw_url", ""),
                content=content,
            )

        return RemoteCollection(
            id=str(data["id"]),
            files=files,
            description=data.get("description") or "",
        )

    @staticmethod
    def _file_payload(files: Dict[str, str]) -> Dict[str, Dict[str, str]]:
        return {name: {"content": content} for name, content in files.items()}

    # ------------------------------------------------------------------
    # RemoteBackend interface
    # ------------------------------------------------------------------

    async def list_collections(self) -> List[RemoteCollection]:
        """List every gist of the authenticated user, following pagination."""
        collections: List[RemoteCollection] = []
        page = 1

        while True:
            data = await self._json(
                "GET", "/gists", params={"per_page": PAGE_SIZE, "page": page}
            )
            if not isinstance(data, list):
                raise BackendError("Gist listing is not a JSON array")

            collections.extend(self._parse_gist(item) for item in data)

            if len(data) < PAGE_SIZE:
                break
            page += 1

        logger.debug("Listed %d gists over %d page(s)", len(collections), page)
        return collections

    async def get_collection(self, collection_id: str) -> RemoteCollection:
        data = await self._json("GET", f"/gists/{collection_id}")
        return self._parse_gist(data)

    async def fetch_file_content(self, file: RemoteFile) -> str:
        if not file.raw_url:
            raise BackendError(f"File {file.filename} has no raw URL")
        # Raw files live on another host; never send credentials there
        resp = await self._send("GET", file.raw_url, authenticated=False)
        return resp.text

    async def create_collection(self, files: Dict[str, str]) -> RemoteCollection:
        body = {
            "description": GIST_DESCRIPTION,
            "public": False,
            "files": self._file_payload(files),
        }
        data = await self._json("POST", "/gists", json_body=body)
        collection = self._parse_gist(data)
        logger.info("Created gist %s with %d file(s)", collection.id, len(files))
        return collection

    async def update_collection(
        self, collection_id: str, files: Dict[str, str]
    ) -> RemoteCollection:
        body = {"files": self._file_payload(files)}
        data = await self._json("PATCH", f"/gists/{collection_id}", json_body=body)
        return self._parse_gist(data)

    async def delete_collection(self, collection_id: str) -> bool:
        try:
            resp = await self._send("DELETE", f"/gists/{collection_id}")
        except BackendAuthError:
            raise
        except BackendError as exc:
            if exc.status_code == 404:
                return False
            raise
        return resp.status_code == 204
