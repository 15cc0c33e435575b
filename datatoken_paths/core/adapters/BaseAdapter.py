from __future__ import annotations

from abc import ABC
from typing import Any

from eth_utils import is_address, to_checksum_address
from loguru import logger

from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.utils.transaction import (
    GasEstimate,
    GasPolicy,
    SignCallback,
    encode_call,
    estimate_gas,
    first_event_value,
    send_transaction,
)
from datatoken_paths.core.utils.web3 import web3_from_chain_id


class BaseAdapter(ABC):
    """Shared plumbing for the contract wrappers.

    Every write goes through :meth:`_transact`: encode the call, estimate
    gas, submit, and for creation calls read the first field of ``event``
    out of the receipt.
    """

    adapter_type: str | None = None

    def __init__(
        self,
        name: str,
        chain_id: int,
        config: dict[str, Any] | None = None,
        *,
        sign_callback: SignCallback | None = None,
        wallet_address: str | None = None,
        gas_policy: GasPolicy | None = None,
        gas_price: int | None = None,
    ):
        self.name = name
        self.chain_id = int(chain_id)
        self.config = config or {}
        self.sign_callback = sign_callback
        self.wallet_address: str | None = (
            to_checksum_address(wallet_address) if wallet_address else None
        )
        self.gas_policy = gas_policy
        self.gas_price = gas_price
        self.logger = logger.bind(adapter=self.__class__.__name__)

    def _require_wallet(self) -> str:
        if not self.wallet_address:
            raise ValueError("wallet address not configured")
        return self.wallet_address

    async def _call(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        *args: Any,
        block_identifier: str | int = "latest",
    ) -> Any:
        async with web3_from_chain_id(self.chain_id) as web3:
            contract = web3.eth.contract(address=to_checksum_address(target), abi=abi)
            fn = getattr(contract.functions, fn_name)
            return await fn(*args).call(block_identifier=block_identifier)

    async def _encode(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        value: int = 0,
    ) -> dict[str, Any]:
        return await encode_call(
            target=target,
            abi=abi,
            fn_name=fn_name,
            args=args,
            from_address=self._require_wallet(),
            chain_id=self.chain_id,
            value=value,
        )

    async def _transact(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        *,
        event: str | None = None,
        value: int = 0,
    ) -> TxResult:
        tx = await self._encode(target, abi, fn_name, args, value)
        result = await send_transaction(
            tx,
            self.sign_callback,
            gas_price=self.gas_price,
            gas_policy=self.gas_policy,
        )
        if event is None:
            return result

        parsed = first_event_value(abi, result.receipt, event)
        if parsed is None:
            self.logger.warning(
                f"{fn_name} succeeded in {result.tx_hash} but emitted no {event} event"
            )
            return result.model_copy(update={"event_name": event, "event_missing": True})
        if isinstance(parsed, str) and is_address(parsed):
            parsed = to_checksum_address(parsed)
        return result.model_copy(update={"event_name": event, "value": parsed})

    async def estimate_call(
        self,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        *,
        value: int = 0,
    ) -> GasEstimate:
        """Gas for a write without sending it."""
        tx = await self._encode(target, abi, fn_name, args, value)
        return await estimate_gas(tx, policy=self.gas_policy)

    async def close(self) -> None:
        pass
