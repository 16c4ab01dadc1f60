"""
REST HTTP client for the charge backend.
"""

from typing import Any, Optional

import httpx

from kyc_deposit.errors import ChargeServiceError

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_S = 15.0


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "kyc-deposit/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_token(self, token: str) -> None:
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _unwrap(json_data: Any) -> Any:
        """Unwrap the standard response envelope: { "status": "success", "data": <actual_data> }"""
        if isinstance(json_data, dict) and "status" in json_data and "data" in json_data:
            return json_data["data"]
        return json_data

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            raise ChargeServiceError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                code="http_error",
                details={"status_code": resp.status_code},
            )
        try:
            return self._unwrap(resp.json())
        except ValueError:
            raise ChargeServiceError(f"Invalid JSON response: {resp.text[:200]}", code="bad_response")

    async def get(self, path: str) -> Any:
        try:
            resp = await self._client.get(path, headers=self._headers())
        except httpx.HTTPError as e:
            raise ChargeServiceError(f"GET {path} failed: {e}", code="connection_error")
        return self._handle(resp)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        try:
            resp = await self._client.post(path, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            raise ChargeServiceError(f"POST {path} failed: {e}", code="connection_error")
        return self._handle(resp)

    async def close(self) -> None:
        await self._client.aclose()
