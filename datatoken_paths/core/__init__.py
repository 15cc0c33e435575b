from datatoken_paths.core.adapters.BaseAdapter import BaseAdapter
from datatoken_paths.core.adapters.models import Outcome, TxResult
from datatoken_paths.core.errors import (
    DatatokenPathsError,
    EventNotFoundError,
    PermissionDeniedError,
    TransactionRevertedError,
    UnsortedTokensError,
)

__all__ = [
    "BaseAdapter",
    "DatatokenPathsError",
    "EventNotFoundError",
    "Outcome",
    "PermissionDeniedError",
    "TransactionRevertedError",
    "TxResult",
    "UnsortedTokensError",
]
