"""
Conecta Rua - Backend Module
Clients for the hosted backend platform (auth, storage, rows).
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from conecta_rua.backend.auth_client import AuthClient, UserSession
from conecta_rua.backend.data_client import DataClient
from conecta_rua.backend.storage_client import StorageClient
from conecta_rua.core.config import Settings, get_settings


@dataclass
class Backend:
    """The three collaborators, sharing one HTTP connection pool."""
    auth: AuthClient
    storage: StorageClient
    data: DataClient
    http_client: httpx.AsyncClient

    async def aclose(self) -> None:
        await self.http_client.aclose()


def create_backend(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Backend:
    """Build the collaborators for the configured Supabase project."""
    settings = settings or get_settings()
    client = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    options = dict(
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        timeout=settings.http_timeout_seconds,
        http_client=client,
    )
    return Backend(
        auth=AuthClient(**options),
        storage=StorageClient(**options),
        data=DataClient(**options),
        http_client=client,
    )


__all__ = [
    "Backend",
    "create_backend",
    "AuthClient",
    "UserSession",
    "DataClient",
    "StorageClient",
]
