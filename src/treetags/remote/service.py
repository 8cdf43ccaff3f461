"""Remote data service contract and its result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol, Sequence


@dataclass(frozen=True)
class Ordering:
    column: str
    ascending: bool = True
    nulls_first: bool = True


@dataclass(frozen=True)
class RemoteResult:
    """Outcome of one remote operation: a payload or a failure reason."""

    ok: bool
    payload: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, payload: Any = None) -> "RemoteResult":
        return cls(ok=True, payload=payload)

    @classmethod
    def failure(cls, error: str) -> "RemoteResult":
        return cls(ok=False, error=error or "unknown error")


@dataclass(frozen=True)
class SessionContext:
    """Caller identity handed to the transport; never inspected here."""

    access_token: Optional[str] = None


class DataService(Protocol):
    async def query(
        self,
        resource: str,
        filters: Mapping[str, Any],
        ordering: Sequence[Ordering] = (),
        columns: str = "*",
    ) -> RemoteResult:
        ...

    async def call(self, procedure: str, args: Mapping[str, Any]) -> RemoteResult:
        ...

    async def delete(self, resource: str, record_id: str) -> RemoteResult:
        ...

    async def aclose(self) -> None:
        ...


def rows_from(result: RemoteResult) -> List[dict]:
    payload = result.payload
    if payload is None:
        return []
    if isinstance(payload, dict):
        return [payload]
    return list(payload)
