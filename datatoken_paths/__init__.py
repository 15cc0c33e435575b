__version__ = "0.1.0"

from datatoken_paths.core import (
    BaseAdapter,
    DatatokenPathsError,
    EventNotFoundError,
    Outcome,
    PermissionDeniedError,
    TransactionRevertedError,
    TxResult,
    UnsortedTokensError,
)

__all__ = [
    "__version__",
    "BaseAdapter",
    "DatatokenPathsError",
    "EventNotFoundError",
    "Outcome",
    "PermissionDeniedError",
    "TransactionRevertedError",
    "TxResult",
    "UnsortedTokensError",
]
