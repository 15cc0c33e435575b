from __future__ import annotations

from typing import Any


class DatatokenPathsError(Exception):
    pass


class PermissionDeniedError(DatatokenPathsError):
    """The sender lacks the role or ownership an operation needs.

    Raised before any transaction is built, so no gas is spent.
    """

    def __init__(
        self,
        capability: str,
        *,
        holder: str | None = None,
        contract: str | None = None,
        message: str | None = None,
    ):
        self.capability = capability
        self.holder = holder
        self.contract = contract
        if message is None:
            message = f"{holder or 'caller'} is missing {capability}"
            if contract:
                message += f" on {contract}"
        super().__init__(message)


class TransactionRevertedError(DatatokenPathsError, RuntimeError):
    def __init__(
        self,
        txn_hash: str | None,
        receipt: dict[str, Any] | None = None,
        message: str | None = None,
        *,
        reason: str | None = None,
    ):
        self.txn_hash = txn_hash
        self.receipt = receipt or {}
        self.reason = reason
        if message is None:
            message = f"Transaction reverted: {txn_hash}"
            if reason:
                message += f" ({reason})"
        super().__init__(message)


class UnsortedTokensError(DatatokenPathsError, ValueError):
    def __init__(self, tokens: list[str]):
        self.tokens = list(tokens)
        super().__init__(
            "Pool tokens must be sorted ascending by address: "
            + ", ".join(self.tokens)
        )


class EventNotFoundError(DatatokenPathsError, LookupError):
    def __init__(self, event_name: str, txn_hash: str | None = None):
        self.event_name = event_name
        self.txn_hash = txn_hash
        super().__init__(
            f"Event {event_name} not found in receipt"
            + (f" of {txn_hash}" if txn_hash else "")
        )
