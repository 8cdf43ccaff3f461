"""Supabase PostgREST client built on httpx."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx

from ..config import BackendConfig
from .service import Ordering, RemoteResult, SessionContext

logger = logging.getLogger(__name__)


class SupabaseRestService:
    """DataService implementation speaking to ``<url>/rest/v1``."""

    def __init__(
        self,
        backend: BackendConfig,
        session: Optional[SessionContext] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        session = session or SessionContext(access_token=backend.access_token)
        token = session.access_token or backend.anon_key
        self._client = httpx.AsyncClient(
            base_url=f"{backend.url}/rest/v1",
            headers={
                "apikey": backend.anon_key,
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            timeout=backend.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "SupabaseRestService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query(
        self,
        resource: str,
        filters: Mapping[str, Any],
        ordering: Sequence[Ordering] = (),
        columns: str = "*",
    ) -> RemoteResult:
        params = build_query_params(filters, ordering, columns)
        return await self._send("GET", f"/{resource}", params=params)

    async def call(self, procedure: str, args: Mapping[str, Any]) -> RemoteResult:
        return await self._send("POST", f"/rpc/{procedure}", json=dict(args))

    async def delete(self, resource: str, record_id: str) -> RemoteResult:
        return await self._send(
            "DELETE",
            f"/{resource}",
            params=[("id", f"eq.{record_id}")],
            headers={"Prefer": "return=minimal"},
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> RemoteResult:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return RemoteResult.failure(str(exc) or exc.__class__.__name__)

        if response.is_error:
            detail = error_detail(response)
            logger.warning(
                "%s %s returned %s: %s", method, url, response.status_code, detail
            )
            return RemoteResult.failure(detail)

        if not response.content:
            return RemoteResult.success(None)
        try:
            return RemoteResult.success(response.json())
        except ValueError:
            return RemoteResult.failure(f"invalid JSON from {url}")


def build_query_params(
    filters: Mapping[str, Any],
    ordering: Sequence[Ordering],
    columns: str = "*",
) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = [("select", columns)]
    for column, value in filters.items():
        if value is None:
            params.append((column, "is.null"))
        else:
            params.append((column, f"eq.{value}"))
    if ordering:
        params.append(("order", ",".join(_order_term(item) for item in ordering)))
    return params


def _order_term(item: Ordering) -> str:
    direction = "asc" if item.ascending else "desc"
    nulls = "nullsfirst" if item.nulls_first else "nullslast"
    return f"{item.column}.{direction}.{nulls}"


def error_detail(response: httpx.Response) -> str:
    try:
        body: Dict[str, Any] = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error_description", "error", "hint"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"
