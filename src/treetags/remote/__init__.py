"""Remote data service access."""

from .rest import SupabaseRestService
from .service import DataService, Ordering, RemoteResult, SessionContext, rows_from

__all__ = [
    "DataService",
    "Ordering",
    "RemoteResult",
    "SessionContext",
    "SupabaseRestService",
    "rows_from",
]
