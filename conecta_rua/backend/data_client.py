"""
Supabase PostgREST client.

Only the subset the app needs: equality filters, ordering, embedded joins
in ``select`` and single-row inserts. No update/delete.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from conecta_rua.backend.base import BaseClient
from conecta_rua.core.exceptions import DataError

logger = logging.getLogger(__name__)


class DataClient(BaseClient):
    """Client for the relational tables exposed through PostgREST."""

    error_class = DataError
    service_path = "/rest/v1"

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[Tuple[str, bool]] = None,
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query rows from a table.

        Args:
            table: Table name
            columns: PostgREST select expression, joins included
            filters: Column -> value equality filters
            order: (column, ascending)
            access_token: User JWT, anon key when omitted

        Returns:
            List of row dictionaries
        """
        params: Dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            column, ascending = order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"

        logger.debug(f"Selecting from {table}: {params}")
        response = await self._request("GET", f"/{table}", access_token=access_token, params=params)
        rows = response.json()
        logger.info(f"Retrieved {len(rows)} rows from {table}")
        return rows

    async def insert(
        self,
        table: str,
        row: Dict[str, Any],
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Insert one row and return the stored representation.

        Raises:
            DataError: Constraint or policy violation, network failure
        """
        response = await self._request(
            "POST",
            f"/{table}",
            access_token=access_token,
            headers={"Prefer": "return=representation"},
            json=row,
        )
        logger.info(f"Inserted row into {table}")
        return response.json() if response.content else []
