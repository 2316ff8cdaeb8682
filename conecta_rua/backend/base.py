"""
Shared HTTP plumbing for the Supabase collaborators.

Every client talks to one Supabase project over its REST gateway:
- GoTrue (auth) under /auth/v1
- Storage under /storage/v1
- PostgREST (rows) under /rest/v1
"""

import logging
from typing import Any, Dict, Optional, Type

import httpx

from conecta_rua.core.exceptions import BackendError

logger = logging.getLogger(__name__)


class BaseClient:
    """
    Thin async wrapper around one Supabase service.

    Usage:
        async with DataClient(url, api_key) as client:
            rows = await client.select("reports")
    """

    error_class: Type[BackendError] = BackendError
    service_path = ""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Supabase project URL
            api_key: Project anon key, sent as the ``apikey`` header
            timeout: HTTP request timeout in seconds
            http_client: Shared client; one is created (and owned) when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def service_url(self) -> str:
        return f"{self.base_url}{self.service_path}"

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {}
        if self.api_key:
            headers["apikey"] = self.api_key
        # Row-level security evaluates the user's JWT; fall back to the anon key
        bearer = access_token or self.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Perform one request against the service.

        Raises:
            error_class: Non-2xx response, timeout or connection failure
        """
        url = f"{self.service_url}{path}"
        request_headers = self._headers(access_token)
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(method, url, headers=request_headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise self.error_class(
                f"Tempo esgotado após {self.timeout}s ao contatar o servidor"
            ) from exc
        except httpx.TransportError as exc:
            raise self.error_class(
                f"Não foi possível conectar ao servidor em '{self.base_url}'"
            ) from exc

        if response.is_error:
            message = extract_error_message(response)
            logger.error(f"{method} {url} failed with {response.status_code}: {message}")
            raise self.error_class(message, status_code=response.status_code)

        return response


def extract_error_message(response: httpx.Response) -> str:
    """
    Pull the human-readable message out of a Supabase error body.

    GoTrue uses ``msg``/``error_description``, PostgREST and Storage use
    ``message``; anything else falls back to the raw text.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    text = response.text.strip()
    return text[:200] if text else f"HTTP {response.status_code}"
