from __future__ import annotations

from collections.abc import Awaitable, Callable, Coroutine
from functools import wraps
from typing import Any

from loguru import logger

from datatoken_paths.core.adapters.models import Outcome, TxResult
from datatoken_paths.core.errors import (
    EventNotFoundError,
    PermissionDeniedError,
    TransactionRevertedError,
)


async def capture_outcome(awaitable: Awaitable[Any]) -> Outcome:
    """Await an adapter call and fold its result into an :class:`Outcome`.

    Only the three domain failures are folded; anything else (bad input,
    transport errors) still raises.
    """
    try:
        result = await awaitable
    except PermissionDeniedError as exc:
        return Outcome(status="denied", reason=str(exc))
    except TransactionRevertedError as exc:
        return Outcome(
            status="reverted", reason=exc.reason or str(exc), tx_hash=exc.txn_hash
        )
    except EventNotFoundError as exc:
        return Outcome(status="unparseable", reason=str(exc), tx_hash=exc.txn_hash)

    if isinstance(result, TxResult):
        if result.event_missing:
            return Outcome(
                status="unparseable",
                reason=f"{result.event_name} not found in receipt",
                tx_hash=result.tx_hash,
            )
        value = result.value if result.value is not None else result.tx_hash
        return Outcome(status="success", value=value, tx_hash=result.tx_hash)
    return Outcome(status="success", value=result)


def outcome(
    fn: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Outcome]]:
    """Wrap an async adapter method to return an :class:`Outcome` instead of raising."""

    @wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Outcome:
        result = await capture_outcome(fn(*args, **kwargs))
        if not result.ok:
            logger.bind(adapter=fn.__qualname__.split(".")[0]).warning(
                f"{fn.__name__} {result.status}: {result.reason}"
            )
        return result

    return wrapper
