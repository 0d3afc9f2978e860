"""Appwrite Databases REST client implementing the document store interface.

Endpoints used:
    GET  /databases/{db}/collections/{collection}/documents?queries[]=...
    GET  /databases/{db}/collections/{collection}/documents/{id}
    POST /databases/{db}/collections/{collection}/documents

Queries use the JSON query syntax of Appwrite 1.5+. Appwrite system
attributes ($id, $createdAt, ...) are stripped from returned documents and
`$id` is exposed as `id`, matching SQLiteStore.
"""

import asyncio
import json
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from errors import DocumentNotFoundError, StoreError

logger = logging.getLogger(__name__)


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context that verifies against the certifi bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def _query(method: str, attribute: str | None = None, values: list[Any] | None = None) -> str:
    """Encode one Appwrite query."""
    query: dict[str, Any] = {"method": method}
    if attribute is not None:
        query["attribute"] = attribute
    if values is not None:
        query["values"] = values
    return json.dumps(query)


def _normalize(document: dict[str, Any]) -> dict[str, Any]:
    """Drop Appwrite system attributes and expose `$id` as `id`."""
    data = {k: v for k, v in document.items() if not k.startswith("$")}
    data["id"] = document.get("$id", "")
    return data


class AppwriteStore:
    """Async Appwrite Databases client.

    Example:
        >>> store = AppwriteStore(endpoint, project_id, api_key, database_id)
        >>> article = await store.get_by_id("dataset_plan", "a1")
        >>> await store.aclose()
    """

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        api_key: str,
        database_id: str,
        timeout: float = 30.0,
    ):
        """Initialize the client. No connection is made until the first request.

        Args:
            endpoint: Appwrite API endpoint (e.g. https://cloud.appwrite.io/v1)
            project_id: Appwrite project ID
            api_key: Server API key with documents read/write scopes
            database_id: Database holding both collections
            timeout: Total timeout per request in seconds
        """
        self.endpoint = endpoint.rstrip("/")
        self.database_id = database_id
        self._headers = {
            "Content-Type": "application/json",
            "X-Appwrite-Project": project_id,
            "X-Appwrite-Key": api_key,
        }
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    def _documents_url(self, collection: str, document_id: str | None = None) -> str:
        url = f"{self.endpoint}/databases/{self.database_id}/collections/{collection}/documents"
        if document_id is not None:
            url += f"/{document_id}"
        return url

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._headers,
                timeout=self._timeout,
                connector=aiohttp.TCPConnector(ssl=create_ssl_context()),
            )
        return self._session

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: list[tuple[str, str]] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        """Send one request and return (status, decoded body).

        Raises:
            StoreError: On transport failure, timeout, or an error status other than 404
        """
        session = await self._get_session()
        try:
            async with session.request(method, url, params=params, json=payload) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as e:
            raise StoreError(f"Appwrite request timed out: {method} {url}") from e
        except aiohttp.ClientError as e:
            raise StoreError(f"Appwrite request failed: {type(e).__name__}: {e}") from e

        if status == 404:
            return status, None
        if status >= 300:
            raise StoreError(f"Appwrite error {status}: {text}")
        try:
            return status, json.loads(text) if text else {}
        except ValueError as e:
            raise StoreError(f"Appwrite returned invalid JSON ({status})") from e

    async def find_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: int = 1,
    ) -> list[dict[str, Any]]:
        """List documents whose field equals value."""
        params = [
            ("queries[]", _query("equal", field, [value])),
            ("queries[]", _query("limit", values=[limit])),
        ]
        status, body = await self._request("GET", self._documents_url(collection), params=params)
        if body is None:
            raise StoreError(f"Appwrite collection '{collection}' not found")
        return [_normalize(doc) for doc in body.get("documents", [])]

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any]:
        """Get a document by its identifier.

        Raises:
            DocumentNotFoundError: On HTTP 404
        """
        status, body = await self._request("GET", self._documents_url(collection, document_id))
        if body is None:
            raise DocumentNotFoundError(collection, document_id)
        return _normalize(body)

    async def create(
        self,
        collection: str,
        fields: dict[str, Any],
        document_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a document, letting Appwrite assign the id unless one is given."""
        payload = {
            "documentId": document_id or "unique()",
            "data": {k: v for k, v in fields.items() if k != "id"},
        }
        status, body = await self._request("POST", self._documents_url(collection), payload=payload)
        if body is None:
            raise StoreError(f"Appwrite collection '{collection}' not found")
        logger.debug("Document created | collection=%s id=%s", collection, body.get("$id"))
        return _normalize(body)

    async def aclose(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
