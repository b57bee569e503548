"""HTTP client for the hotel backend REST API"""
import logging
from typing import Any, Optional

import httpx

from domain.enums import StorageKey
from domain.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A backend call that failed.

    ``status_code`` is None for transport failures (connection refused,
    timeout). ``message`` is the body's ``error`` field when the backend
    sent one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def backend_error(self) -> Optional[str]:
        """The backend's own error string, if the response carried one"""
        if isinstance(self.payload, dict):
            error = self.payload.get("error")
            if isinstance(error, str) and error:
                return error
        return None


def error_message(exc: Exception, fallback: str) -> str:
    """Single display string for a failed call"""
    if isinstance(exc, ApiError) and exc.backend_error:
        return exc.backend_error
    return fallback


class ApiClient:
    """Async REST client that attaches the stored bearer token"""

    def __init__(
        self,
        base_url: str,
        storage: KeyValueStorage,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.storage = storage
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"}
        )

    def _auth_headers(self) -> dict:
        token = self.storage.get(StorageKey.TOKEN.value)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None
    ) -> Any:
        """Send a request and return the decoded body (None when empty)"""
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._auth_headers()
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise ApiError(str(e) or "Network error") from e

        payload = self._decode(response)
        if response.is_error:
            logger.error("%s %s returned %s", method, path, response.status_code)
            message = None
            if isinstance(payload, dict):
                message = payload.get("error")
            raise ApiError(
                message or f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                payload=payload
            )
        return payload

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
