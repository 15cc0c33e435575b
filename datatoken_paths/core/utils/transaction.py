import asyncio
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from eth_abi.abi import default_codec
from eth_account import Account
from hexbytes import HexBytes
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from web3 import AsyncWeb3
from web3._utils.events import event_abi_to_log_topic, get_event_data
from web3.exceptions import ContractLogicError, Web3RPCError

from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.config import get_gas_config
from datatoken_paths.core.constants.base import (
    DEFAULT_CONFIRMATIONS,
    DEFAULT_RECEIPT_POLL_INTERVAL,
    DEFAULT_TRANSACTION_TIMEOUT,
    GAS_BUFFER_MULTIPLIER,
    GAS_HEADROOM_UNITS,
    GAS_LIMIT_DEFAULT,
    MAX_BASE_FEE_GROWTH_MULTIPLIER,
    SUGGESTED_GAS_PRICE_MULTIPLIER,
    SUGGESTED_PRIORITY_FEE_MULTIPLIER,
)
from datatoken_paths.core.constants.chains import PRE_EIP_1559_CHAIN_IDS
from datatoken_paths.core.errors import TransactionRevertedError
from datatoken_paths.core.utils.web3 import (
    get_transaction_chain_id,
    web3_from_chain_id,
    web3s_from_chain_id,
)

SignCallback = Callable[[dict[str, Any]], Awaitable[bytes]]


class GasPolicy(BaseModel):
    """How a gas limit is derived from an estimate.

    ``limit = ceil(estimate * multiplier) + headroom``. When estimation fails
    ``default_limit + headroom`` is used instead.
    """

    model_config = ConfigDict(frozen=True)

    default_limit: int = Field(default=GAS_LIMIT_DEFAULT, gt=0)
    headroom: int = Field(default=GAS_HEADROOM_UNITS, ge=0)
    multiplier: float = Field(default=GAS_BUFFER_MULTIPLIER, ge=1.0)

    def apply(self, estimate: int) -> int:
        return int(math.ceil(estimate * self.multiplier)) + self.headroom

    def fallback(self) -> int:
        return self.default_limit + self.headroom

    @classmethod
    def from_config(cls) -> "GasPolicy":
        overrides = {
            k: v
            for k, v in get_gas_config().items()
            if k in cls.model_fields and v is not None
        }
        return cls(**overrides)


class GasEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: int
    estimated: bool
    raw: int | None = None


def _get_transaction_from_address(transaction: dict) -> str:
    if "from" not in transaction:
        raise ValueError("Transaction does not contain from address")
    return AsyncWeb3.to_checksum_address(transaction["from"])


def _normalize_hash(txn_hash: Any) -> str:
    if isinstance(txn_hash, (bytes, bytearray)):
        txn_hash = HexBytes(txn_hash).hex()
    txn_hash = str(txn_hash)
    if not txn_hash.startswith("0x"):
        txn_hash = f"0x{txn_hash}"
    return txn_hash


def _error_reason(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


async def estimate_gas(
    transaction: dict, *, policy: GasPolicy | None = None
) -> GasEstimate:
    """Estimate against every RPC for the chain and keep the highest value.

    Never raises for estimation failures: reverts during simulation, node errors
    and transport errors are logged and replaced by the policy's default limit.
    """
    policy = policy or GasPolicy.from_config()
    call = {k: v for k, v in transaction.items() if k != "gas"}

    async def _estimate_gas(web3: AsyncWeb3) -> int | None:
        try:
            return await web3.eth.estimate_gas(call, block_identifier="latest")
        except Exception as e:
            logger.warning(
                f"Failed to estimate gas using {web3.provider.endpoint_uri}. Error: {e}"
            )
            return None

    chain_id = get_transaction_chain_id(transaction)
    try:
        async with web3s_from_chain_id(chain_id) as web3s:
            estimates = await asyncio.gather(*[_estimate_gas(web3) for web3 in web3s])
    except ValueError as exc:
        # no RPC configured for the chain
        logger.warning(f"Gas estimation unavailable for chain {chain_id}: {exc}")
        estimates = []

    successful = [int(e) for e in estimates if e]
    if not successful:
        limit = policy.fallback()
        logger.warning(
            f"Gas estimation failed on all RPCs; using default gas limit {limit}"
        )
        return GasEstimate(limit=limit, estimated=False, raw=None)

    raw = max(successful)
    return GasEstimate(limit=policy.apply(raw), estimated=True, raw=raw)


async def gas_limit_transaction(
    transaction: dict, *, policy: GasPolicy | None = None
) -> dict:
    transaction = transaction.copy()
    estimate = await estimate_gas(transaction, policy=policy)
    transaction["gas"] = estimate.limit
    return transaction


async def nonce_transaction(transaction: dict):
    transaction = transaction.copy()

    from_address = _get_transaction_from_address(transaction)

    async def _get_nonce(web3: AsyncWeb3, from_address: str) -> int:
        return await web3.eth.get_transaction_count(
            from_address, block_identifier="pending"
        )

    async with web3s_from_chain_id(get_transaction_chain_id(transaction)) as web3s:
        nonces = await asyncio.gather(
            *[_get_nonce(web3, from_address) for web3 in web3s]
        )

        nonce = max(nonces)
        transaction["nonce"] = nonce

    return transaction


async def gas_price_transaction(transaction: dict, gas_price: int | None = None):
    transaction = transaction.copy()

    if gas_price is not None:
        # Caller-supplied price is used verbatim.
        transaction.pop("maxFeePerGas", None)
        transaction.pop("maxPriorityFeePerGas", None)
        transaction["gasPrice"] = int(gas_price)
        return transaction

    async def _get_gas_price(web3: AsyncWeb3) -> int:
        return await web3.eth.gas_price

    async def _get_base_fee(web3: AsyncWeb3) -> int:
        latest_block = await web3.eth.get_block("latest")
        return latest_block.baseFeePerGas

    async def _get_priority_fee(web3: AsyncWeb3) -> int:
        lookback_blocks = 10
        percentile = 80
        fee_history = await web3.eth.fee_history(
            lookback_blocks, "latest", [percentile]
        )
        historical_priority_fees = [i[0] for i in fee_history.reward]
        return sum(historical_priority_fees) // len(historical_priority_fees)

    chain_id = get_transaction_chain_id(transaction)
    async with web3s_from_chain_id(chain_id) as web3s:
        if chain_id in PRE_EIP_1559_CHAIN_IDS:
            gas_prices = await asyncio.gather(*[_get_gas_price(web3) for web3 in web3s])
            gas_price = max(gas_prices)

            transaction["gasPrice"] = int(gas_price * SUGGESTED_GAS_PRICE_MULTIPLIER)
        else:
            base_fees = await asyncio.gather(*[_get_base_fee(web3) for web3 in web3s])
            priority_fees = await asyncio.gather(
                *[_get_priority_fee(web3) for web3 in web3s]
            )

            base_fee = max(base_fees)
            priority_fee = max(priority_fees)

            transaction["maxFeePerGas"] = int(
                base_fee * MAX_BASE_FEE_GROWTH_MULTIPLIER
                + priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
            )
            transaction["maxPriorityFeePerGas"] = int(
                priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
            )

    return transaction


async def broadcast_transaction(chain_id, signed_transaction: bytes) -> str:
    async with web3_from_chain_id(chain_id) as web3:
        try:
            tx_hash = await web3.eth.send_raw_transaction(signed_transaction)
        except (ContractLogicError, Web3RPCError) as exc:
            reason = _error_reason(exc)
            raise TransactionRevertedError(
                None,
                message=f"Transaction rejected by node: {reason}",
                reason=reason,
            ) from exc
        return _normalize_hash(tx_hash)


async def wait_for_transaction_receipt(
    chain_id: int,
    txn_hash: str,
    poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL,
    timeout: int = DEFAULT_TRANSACTION_TIMEOUT,
    confirmations: int = DEFAULT_CONFIRMATIONS,
) -> dict:
    txn_hash = _normalize_hash(txn_hash)

    async def _wait_for_receipt(web3: AsyncWeb3, tx_hash: str) -> dict:
        return await web3.eth.wait_for_transaction_receipt(
            tx_hash, poll_latency=poll_interval, timeout=timeout
        )

    async def _get_block_number(web3: AsyncWeb3) -> int:
        return await web3.eth.block_number

    async with web3s_from_chain_id(chain_id) as web3s:
        tasks = [
            asyncio.create_task(_wait_for_receipt(web3, txn_hash)) for web3 in web3s
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        receipt = done.pop().result()

        if receipt.get("status") == 0:
            raise TransactionRevertedError(txn_hash, receipt)

        target_block = receipt["blockNumber"] + confirmations - 1
        while (
            max(await asyncio.gather(*[_get_block_number(w) for w in web3s]))
            < target_block
        ):
            await asyncio.sleep(poll_interval)
        return receipt


async def get_revert_reason(
    transaction: dict[str, Any], receipt: dict[str, Any] | None = None
) -> str | None:
    """Replay a failed transaction as ``eth_call`` at its block to recover the reason."""
    call = {
        k: transaction[k] for k in ("from", "to", "data", "value") if k in transaction
    }
    block = (receipt or {}).get("blockNumber", "latest")
    try:
        async with web3_from_chain_id(get_transaction_chain_id(transaction)) as web3:
            await web3.eth.call(call, block_identifier=block)
    except ContractLogicError as exc:
        return _error_reason(exc)
    except Exception as exc:
        logger.debug(f"Could not replay transaction for revert reason: {exc}")
    return None


async def _raise_revert_error(
    txn_hash: str,
    receipt: dict[str, Any],
    transaction: dict[str, Any],
    cause: Exception | None = None,
) -> None:
    gas_used = int(receipt.get("gasUsed") or 0)
    gas_limit = int(transaction.get("gas") or 0)

    reason = await get_revert_reason(transaction, receipt)
    oogs = bool(gas_used and gas_limit and gas_used >= gas_limit)
    if reason is None and oogs:
        reason = "out of gas"
    suffix = (
        f" gasUsed={gas_used} gasLimit={gas_limit}" if gas_used or gas_limit else ""
    )
    error = TransactionRevertedError(
        txn_hash,
        receipt,
        message=f"Transaction reverted (status=0): {txn_hash}{suffix}"
        + (f" reason={reason}" if reason else ""),
        reason=reason,
    )
    logger.error(str(error))
    if cause:
        raise error from cause
    raise error


async def send_transaction(
    transaction: dict,
    sign_callback: SignCallback,
    *,
    gas_price: int | None = None,
    gas_policy: GasPolicy | None = None,
    wait_for_receipt: bool = True,
) -> TxResult:
    """Estimate, price, sign, broadcast and (optionally) await the receipt.

    Raises ``TransactionRevertedError`` when the node rejects the transaction or
    the receipt reports ``status == 0``. Estimation failures never raise.
    """
    if sign_callback is None:
        raise ValueError("sign_callback must be provided to send transaction")

    logger.info(f"Broadcasting transaction {transaction}...")
    chain_id = get_transaction_chain_id(transaction)
    transaction = transaction.copy()
    estimate = await estimate_gas(transaction, policy=gas_policy)
    transaction["gas"] = estimate.limit
    transaction = await nonce_transaction(transaction)
    transaction = await gas_price_transaction(transaction, gas_price)
    signed_transaction = await sign_callback(transaction)
    txn_hash = await broadcast_transaction(chain_id, signed_transaction)
    logger.info(f"Transaction broadcasted: {txn_hash}")

    receipt = None
    if wait_for_receipt:
        try:
            receipt = await wait_for_transaction_receipt(chain_id, txn_hash)
        except TransactionRevertedError as exc:
            await _raise_revert_error(txn_hash, exc.receipt, transaction, cause=exc)

        if receipt is not None and int(receipt.get("status", 1)) == 0:
            await _raise_revert_error(txn_hash, receipt, transaction)

    return TxResult(
        tx_hash=txn_hash,
        chain_id=chain_id,
        receipt=receipt,
        gas_limit=estimate.limit,
        gas_estimated=estimate.estimated,
    )


async def sign_and_send_transaction(
    transaction: dict, private_key: str, **kwargs: Any
) -> TxResult:
    sign_callback = local_sign_callback(private_key)
    return await send_transaction(transaction, sign_callback, **kwargs)


def local_sign_callback(private_key: str) -> SignCallback:
    account = Account.from_key(private_key)

    async def sign_callback(tx: dict) -> bytes:
        signed = account.sign_transaction(tx)
        return signed.raw_transaction

    return sign_callback


async def encode_call(
    *,
    target: str,
    abi: list[dict[str, Any]],
    fn_name: str,
    args: list[Any],
    from_address: str,
    chain_id: int,
    value: int = 0,
) -> dict[str, Any]:
    async with web3_from_chain_id(chain_id) as web3:
        try:
            contract = web3.eth.contract(
                address=web3.to_checksum_address(target),
                abi=abi,
            )
            data = contract.encode_abi(fn_name, args)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Failed to encode {fn_name}: {exc}") from exc

        return {
            "chainId": int(chain_id),
            "from": AsyncWeb3.to_checksum_address(from_address),
            "to": AsyncWeb3.to_checksum_address(target),
            "data": data,
            "value": int(value),
        }


def _find_event_abi(abi: list[dict[str, Any]], event_name: str) -> dict[str, Any]:
    for item in abi:
        if item.get("type") == "event" and item.get("name") == event_name:
            return item
    raise ValueError(f"Event {event_name} not found in ABI")


def decode_event_args(
    abi: list[dict[str, Any]], receipt: dict[str, Any] | None, event_name: str
) -> list[Mapping[str, Any]]:
    """Decoded ``args`` of every ``event_name`` log in ``receipt``, in log order."""
    event_abi = _find_event_abi(abi, event_name)
    topic0 = HexBytes(event_abi_to_log_topic(event_abi))

    decoded: list[Mapping[str, Any]] = []
    for log in (receipt or {}).get("logs") or []:
        topics = log.get("topics") or []
        if not topics or HexBytes(topics[0]) != topic0:
            continue
        try:
            evt = get_event_data(default_codec, event_abi, log)
        except Exception as exc:
            logger.warning(f"Skipping undecodable {event_name} log: {exc}")
            continue
        decoded.append(evt["args"])
    return decoded


def first_event_value(
    abi: list[dict[str, Any]],
    receipt: dict[str, Any] | None,
    event_name: str,
    arg: str | None = None,
) -> Any:
    """First field (or ``arg``) of the first ``event_name`` log, ``None`` when absent."""
    events = decode_event_args(abi, receipt, event_name)
    if not events:
        return None
    args = events[0]
    if arg is not None:
        return args.get(arg)
    first_input = _find_event_abi(abi, event_name)["inputs"][0]["name"]
    return args.get(first_input)
