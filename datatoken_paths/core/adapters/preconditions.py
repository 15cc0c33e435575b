"""Declarative authorization checks for adapter write methods.

``@requires(...)`` runs its checks once each, in order, after the call's
arguments are bound and before the wrapped method builds a transaction. The
first failure raises :class:`PermissionDeniedError`, so no gas is spent.

Checks read the chain at call time. A role can still be revoked between the
check and inclusion of the transaction; the contract then reverts and the
call surfaces :class:`TransactionRevertedError` instead.
"""

from __future__ import annotations

import functools
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from eth_utils import to_checksum_address

from datatoken_paths.core.errors import PermissionDeniedError
from datatoken_paths.core.utils.permissions import (
    get_contract_owner,
    get_datatoken_permissions,
    get_nft_owner,
    get_nft_permissions,
    get_remaining_cap,
)
from datatoken_paths.core.utils.units import from_fixed_point, to_fixed_point


def _same_address(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return to_checksum_address(a) == to_checksum_address(b)


class Check(ABC):
    capability: str

    @abstractmethod
    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        """Return ``True`` when the sender satisfies this check."""

    def denied(self, adapter: Any, arguments: Mapping[str, Any]) -> PermissionDeniedError:
        return PermissionDeniedError(
            self.capability,
            holder=getattr(adapter, "wallet_address", None),
            contract=self.contract(adapter, arguments),
        )

    def contract(self, adapter: Any, arguments: Mapping[str, Any]) -> str | None:
        return None

    async def __call__(self, adapter: Any, arguments: Mapping[str, Any]) -> None:
        if not await self.evaluate(adapter, arguments):
            raise self.denied(adapter, arguments)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.capability!r})"


class _ContractArgCheck(Check):
    address_arg: str

    def contract(self, adapter: Any, arguments: Mapping[str, Any]) -> str | None:
        return arguments.get(self.address_arg)


class NftRole(_ContractArgCheck):
    """Sender holds ``role`` on the data NFT.

    With ``self_arg``, the check only passes when the sender is also the
    address named by that argument, which is how a holder renounces its own
    role without being a manager.
    """

    def __init__(
        self,
        role: str,
        *,
        address_arg: str = "nft_address",
        self_arg: str | None = None,
    ):
        self.role = role
        self.address_arg = address_arg
        self.self_arg = self_arg
        self.capability = role if self_arg is None else f"{role} (self)"

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        sender = adapter._require_wallet()
        if self.self_arg is not None and not _same_address(
            sender, arguments.get(self.self_arg)
        ):
            return False
        permissions = await get_nft_permissions(
            adapter.chain_id, arguments[self.address_arg], sender
        )
        return permissions.has(self.role)


class DatatokenRole(_ContractArgCheck):
    def __init__(self, role: str, *, address_arg: str = "datatoken_address"):
        self.role = role
        self.address_arg = address_arg
        self.capability = role

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        sender = adapter._require_wallet()
        permissions = await get_datatoken_permissions(
            adapter.chain_id, arguments[self.address_arg], sender
        )
        return permissions.has(self.role)


class NftOwner(_ContractArgCheck):
    capability = "nft owner"

    def __init__(self, *, address_arg: str = "nft_address"):
        self.address_arg = address_arg

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        sender = adapter._require_wallet()
        owner = await get_nft_owner(adapter.chain_id, arguments[self.address_arg])
        return _same_address(owner, sender)


class FactoryOwner(Check):
    capability = "factory owner"

    def contract(self, adapter: Any, arguments: Mapping[str, Any]) -> str | None:
        return adapter.factory_address

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        sender = adapter._require_wallet()
        owner = await get_contract_owner(
            adapter.chain_id, adapter.factory_address, adapter.factory_abi
        )
        return _same_address(owner, sender)


class CapAvailable(_ContractArgCheck):
    """The display amount in ``amount_arg`` fits under ``cap - totalSupply``."""

    capability = "remaining cap"

    def __init__(
        self, amount_arg: str = "amount", *, address_arg: str = "datatoken_address"
    ):
        self.amount_arg = amount_arg
        self.address_arg = address_arg

    async def _remaining(self, adapter: Any, arguments: Mapping[str, Any]) -> int:
        return await get_remaining_cap(adapter.chain_id, arguments[self.address_arg])

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        amount = to_fixed_point(arguments[self.amount_arg])
        return amount <= await self._remaining(adapter, arguments)

    async def __call__(self, adapter: Any, arguments: Mapping[str, Any]) -> None:
        amount = to_fixed_point(arguments[self.amount_arg])
        remaining = await self._remaining(adapter, arguments)
        if amount > remaining:
            raise PermissionDeniedError(
                self.capability,
                holder=getattr(adapter, "wallet_address", None),
                contract=self.contract(adapter, arguments),
                message=(
                    f"Mint amount {arguments[self.amount_arg]} exceeds cap "
                    f"available {from_fixed_point(remaining)}"
                ),
            )


class AnyOf(Check):
    """Passes when at least one of ``checks`` passes; evaluated left to right."""

    def __init__(self, *checks: Check):
        if not checks:
            raise ValueError("AnyOf needs at least one check")
        self.checks = checks
        self.capability = " or ".join(c.capability for c in checks)

    def contract(self, adapter: Any, arguments: Mapping[str, Any]) -> str | None:
        return self.checks[0].contract(adapter, arguments)

    async def evaluate(self, adapter: Any, arguments: Mapping[str, Any]) -> bool:
        for check in self.checks:
            if await check.evaluate(adapter, arguments):
                return True
        return False

    def __repr__(self) -> str:
        return f"AnyOf{self.checks!r}"


def requires(*checks: Check) -> Callable:
    def decorator(fn: Callable) -> Callable:
        signature = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(self, *args, **kwargs)
            bound.apply_defaults()
            arguments = dict(bound.arguments)
            for check in checks:
                await check(self, arguments)
            return await fn(self, *args, **kwargs)

        wrapper.__preconditions__ = tuple(checks)  # type: ignore[attr-defined]
        return wrapper

    return decorator
