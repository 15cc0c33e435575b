from __future__ import annotations

import time
from typing import Any

from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3._utils.events import event_abi_to_log_topic, get_event_data

from datatoken_paths.core.adapters.BaseAdapter import BaseAdapter
from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.adapters.preconditions import (
    CapAvailable,
    DatatokenRole,
    requires,
)
from datatoken_paths.core.config import get_network_config
from datatoken_paths.core.constants.base import ADAPTER_DATATOKEN, ZERO_ADDRESS
from datatoken_paths.core.constants.erc20_template_abi import ERC20_TEMPLATE_ABI
from datatoken_paths.core.utils.permissions import (
    PermissionSet,
    get_datatoken_permissions,
)
from datatoken_paths.core.utils.transaction import SignCallback
from datatoken_paths.core.utils.units import from_fixed_point, to_fixed_point
from datatoken_paths.core.utils.web3 import web3_from_chain_id

ORDER_STARTED_EVENT_ABI = next(
    item
    for item in ERC20_TEMPLATE_ABI
    if item.get("type") == "event" and item.get("name") == "OrderStarted"
)
ORDER_STARTED_TOPIC = HexBytes(event_abi_to_log_topic(ORDER_STARTED_EVENT_ABI))


def _address_topic(address: str) -> str:
    return "0x" + "0" * 24 + to_checksum_address(address)[2:].lower()


def _hex_hash(value: Any) -> str:
    text = HexBytes(value).hex()
    return text if text.startswith("0x") else f"0x{text}"


class DatatokenAdapter(BaseAdapter):
    """Wrapper for datatoken (ERC20 template) contracts.

    Amounts in and out are display strings in 18-decimal units, except
    ``transfer_wei`` which takes the raw integer.
    """

    adapter_type = ADAPTER_DATATOKEN

    def __init__(
        self,
        chain_id: int,
        config: dict[str, Any] | None = None,
        *,
        sign_callback: SignCallback | None = None,
        wallet_address: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            "datatoken_adapter",
            chain_id,
            config,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
            **kwargs,
        )

    async def _dt_transact(
        self, datatoken_address: str, fn_name: str, args: list[Any]
    ) -> TxResult:
        return await self._transact(datatoken_address, ERC20_TEMPLATE_ABI, fn_name, args)

    async def _dt_call(self, datatoken_address: str, fn_name: str, *args: Any) -> Any:
        return await self._call(datatoken_address, ERC20_TEMPLATE_ABI, fn_name, *args)

    async def approve(
        self, datatoken_address: str, spender: str, amount: str
    ) -> TxResult:
        return await self._dt_transact(
            datatoken_address,
            "approve",
            [to_checksum_address(spender), to_fixed_point(amount)],
        )

    @requires(DatatokenRole("minter"), CapAvailable("amount"))
    async def mint(
        self, datatoken_address: str, amount: str, to_address: str | None = None
    ) -> TxResult:
        """Mint ``amount`` to ``to_address`` (default: the sender).

        Refused before submission when the sender is not a minter or when
        ``amount`` exceeds ``cap - totalSupply``.
        """
        receiver = to_address or self._require_wallet()
        return await self._dt_transact(
            datatoken_address,
            "mint",
            [to_checksum_address(receiver), to_fixed_point(amount)],
        )

    async def add_minter(self, datatoken_address: str, minter: str) -> TxResult:
        return await self._dt_transact(
            datatoken_address, "addMinter", [to_checksum_address(minter)]
        )

    async def remove_minter(self, datatoken_address: str, minter: str) -> TxResult:
        return await self._dt_transact(
            datatoken_address, "removeMinter", [to_checksum_address(minter)]
        )

    async def add_payment_manager(
        self, datatoken_address: str, payment_manager: str
    ) -> TxResult:
        return await self._dt_transact(
            datatoken_address,
            "addPaymentManager",
            [to_checksum_address(payment_manager)],
        )

    async def remove_payment_manager(
        self, datatoken_address: str, payment_manager: str
    ) -> TxResult:
        return await self._dt_transact(
            datatoken_address,
            "removePaymentManager",
            [to_checksum_address(payment_manager)],
        )

    async def set_data(self, datatoken_address: str, value: bytes | str) -> TxResult:
        if isinstance(value, str) and not value.startswith("0x"):
            value = value.encode()
        return await self._dt_transact(
            datatoken_address, "setData", [bytes(HexBytes(value))]
        )

    async def clean_permissions(self, datatoken_address: str) -> TxResult:
        return await self._dt_transact(datatoken_address, "cleanPermissions", [])

    async def set_fee_collector(
        self, datatoken_address: str, fee_collector: str
    ) -> TxResult:
        return await self._dt_transact(
            datatoken_address, "setFeeCollector", [to_checksum_address(fee_collector)]
        )

    async def transfer(
        self, datatoken_address: str, to_address: str, amount: str
    ) -> TxResult:
        return await self.transfer_wei(
            datatoken_address, to_address, to_fixed_point(amount)
        )

    async def transfer_wei(
        self, datatoken_address: str, to_address: str, amount: int
    ) -> TxResult:
        if isinstance(amount, bool) or int(amount) < 0:
            raise ValueError(f"Invalid raw amount: {amount!r}")
        return await self._dt_transact(
            datatoken_address,
            "transfer",
            [to_checksum_address(to_address), int(amount)],
        )

    async def transfer_from(
        self, datatoken_address: str, from_address: str, amount: str
    ) -> TxResult:
        """Pull ``amount`` from ``from_address`` to the sender; needs a prior approve."""
        return await self._dt_transact(
            datatoken_address,
            "transferFrom",
            [
                to_checksum_address(from_address),
                self._require_wallet(),
                to_fixed_point(amount),
            ],
        )

    async def start_order(
        self,
        datatoken_address: str,
        consumer: str,
        amount: str,
        service_id: int,
        mp_fee_address: str | None = None,
    ) -> TxResult:
        return await self._dt_transact(
            datatoken_address,
            "startOrder",
            [
                to_checksum_address(consumer),
                to_fixed_point(amount),
                int(service_id),
                to_checksum_address(mp_fee_address or ZERO_ADDRESS),
            ],
        )

    async def propose_minter(self, datatoken_address: str, new_minter: str) -> TxResult:
        return await self._dt_transact(
            datatoken_address, "proposeMinter", [to_checksum_address(new_minter)]
        )

    async def approve_minter(self, datatoken_address: str) -> TxResult:
        return await self._dt_transact(datatoken_address, "approveMinter", [])

    async def balance(self, datatoken_address: str, owner: str | None = None) -> str:
        owner = owner or self._require_wallet()
        raw = await self._dt_call(
            datatoken_address, "balanceOf", to_checksum_address(owner)
        )
        return from_fixed_point(raw)

    async def allowance(self, datatoken_address: str, owner: str, spender: str) -> str:
        raw = await self._dt_call(
            datatoken_address,
            "allowance",
            to_checksum_address(owner),
            to_checksum_address(spender),
        )
        return from_fixed_point(raw)

    async def get_cap(self, datatoken_address: str) -> str:
        return from_fixed_point(await self._dt_call(datatoken_address, "cap"))

    async def get_total_supply(self, datatoken_address: str) -> str:
        return from_fixed_point(await self._dt_call(datatoken_address, "totalSupply"))

    async def get_name(self, datatoken_address: str) -> str:
        return await self._dt_call(datatoken_address, "name")

    async def get_symbol(self, datatoken_address: str) -> str:
        return await self._dt_call(datatoken_address, "symbol")

    async def get_decimals(self, datatoken_address: str) -> int:
        return int(await self._dt_call(datatoken_address, "decimals"))

    async def get_fee_collector(self, datatoken_address: str) -> str:
        return to_checksum_address(
            await self._dt_call(datatoken_address, "getFeeCollector")
        )

    async def get_permissions(self, datatoken_address: str, holder: str) -> PermissionSet:
        return await get_datatoken_permissions(self.chain_id, datatoken_address, holder)

    def _start_block(self) -> int:
        configured = self.config.get("start_block")
        if configured is not None:
            return int(configured)
        return get_network_config(self.chain_id).start_block

    async def get_previous_valid_order(
        self,
        datatoken_address: str,
        amount: str,
        service_id: int,
        timeout: int = 0,
        consumer: str | None = None,
    ) -> str | None:
        """Hash of an earlier ``startOrder`` the consumer can still use, if any.

        Matches on consumer, amount and service id. With ``timeout > 0`` only
        the last ``timeout`` blocks are scanned and the order's block must be
        younger than ``timeout`` seconds.
        """
        consumer = to_checksum_address(consumer or self._require_wallet())
        wanted = to_fixed_point(amount)
        start_block = self._start_block()

        async with web3_from_chain_id(self.chain_id) as web3:
            from_block = start_block
            if timeout > 0:
                latest = await web3.eth.block_number
                from_block = max(start_block, latest - int(timeout))
            logs = await web3.eth.get_logs(
                {
                    "address": to_checksum_address(datatoken_address),
                    "fromBlock": from_block,
                    "toBlock": "latest",
                    "topics": [ORDER_STARTED_TOPIC, _address_topic(consumer)],
                }
            )
            for log in logs:
                args = get_event_data(web3.codec, ORDER_STARTED_EVENT_ABI, log)["args"]
                if int(args["amount"]) != wanted:
                    continue
                if int(args["serviceId"]) != int(service_id):
                    continue
                if to_checksum_address(args["consumer"]) != consumer:
                    continue
                if timeout == 0:
                    return _hex_hash(log["transactionHash"])
                block = await web3.eth.get_block(log["blockHash"])
                if time.time() < int(block["timestamp"]) + int(timeout):
                    return _hex_hash(log["transactionHash"])

        self.logger.debug(
            f"No valid order on {datatoken_address} for {consumer} service {service_id}"
        )
        return None
