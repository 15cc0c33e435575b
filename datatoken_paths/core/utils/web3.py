import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from datatoken_paths.core.config import get_rpc_urls
from datatoken_paths.core.constants.chains import POA_MIDDLEWARE_CHAIN_IDS
from datatoken_paths.core.utils.throttle import get_rate_limiter

# Backoff policy:
# - Only provider rate limiting (HTTP 429 / known RPC codes / known messages) is retried
# - Client errors and on-chain execution errors propagate untouched
_RATE_LIMIT_HTTP_STATUS = 429
_RATE_LIMIT_RPC_ERROR_CODES = {429, -32005, -33200, -33300, -33400}
_RATE_LIMIT_MESSAGE_MARKERS = (
    "too many requests",
    "rate limit",
    "request rate exceeded",
    "limit exceeded",
    "compute units per second",
    "concurrent requests",
)
_RATE_LIMIT_MAX_RETRIES = 3
_DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS = 1.0
_MAX_RATE_LIMIT_COOLDOWN_SECONDS = 30.0
_RPC_RATE_LIMIT_COOLDOWN_UNTIL: dict[tuple[int, str], float] = {}


def _decode_rpc_response_with_id(
    provider: AsyncHTTPProvider, raw_response: bytes, request_id: Any
) -> dict[str, Any]:
    response = provider.decode_rpc_response(raw_response)
    if isinstance(response, dict) and "id" not in response:
        response["id"] = request_id
    return response


def _extract_http_status(exc: Exception) -> int | None:
    status = getattr(exc, "status", None)
    if isinstance(status, int):
        return status
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    if response is not None:
        code = getattr(response, "status_code", None)
        if isinstance(code, int):
            return code
    return None


def _extract_retry_after_seconds_from_exception(exc: Exception) -> float | None:
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None) if response is not None else None
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        parsed = float(value)
        return parsed if parsed > 0 else None
    except (TypeError, ValueError):
        return None


def _rpc_error_text(error: dict[str, Any]) -> str:
    msg = str(error.get("message") or "").lower()
    details = str(error.get("details") or "").lower()
    return f"{msg} {details}".strip()


def _is_rate_limited_rpc_error(error: dict[str, Any]) -> bool:
    code = error.get("code")
    if isinstance(code, int) and code in _RATE_LIMIT_RPC_ERROR_CODES:
        return True
    text = _rpc_error_text(error)
    return any(marker in text for marker in _RATE_LIMIT_MESSAGE_MARKERS)


def _is_rate_limited_exception(exc: Exception) -> bool:
    return _extract_http_status(exc) == _RATE_LIMIT_HTTP_STATUS


def _extract_cooldown_seconds_from_rpc_error(error: dict[str, Any]) -> float | None:
    data = error.get("data")
    if not isinstance(data, dict):
        return None
    for key in ("backoff_seconds", "retry_after", "retry_after_seconds"):
        raw = data.get(key)
        try:
            parsed = float(raw)
            if parsed > 0:
                return parsed
        except (TypeError, ValueError):
            continue
    return None


def _cooldown_remaining(chain_id: int, endpoint_uri: str) -> float:
    key = (chain_id, endpoint_uri)
    until = _RPC_RATE_LIMIT_COOLDOWN_UNTIL.get(key, 0.0)
    remaining = until - time.monotonic()
    if remaining <= 0:
        _RPC_RATE_LIMIT_COOLDOWN_UNTIL.pop(key, None)
        return 0.0
    return remaining


def _mark_rate_limit_cooldown(
    chain_id: int, endpoint_uri: str, cooldown_seconds: float
) -> float:
    cooldown = min(max(0.0, float(cooldown_seconds)), _MAX_RATE_LIMIT_COOLDOWN_SECONDS)
    _RPC_RATE_LIMIT_COOLDOWN_UNTIL[(chain_id, endpoint_uri)] = (
        time.monotonic() + cooldown
    )
    return cooldown


def _clear_rate_limit_cooldowns() -> None:
    _RPC_RATE_LIMIT_COOLDOWN_UNTIL.clear()


class _ThrottledRpcProvider(AsyncHTTPProvider):
    """Paces requests through the shared limiter and backs off on HTTP 429."""

    def __init__(
        self,
        rpc: str,
        chain_id: int,
        request_kwargs: dict | None = None,
        max_retries: int = _RATE_LIMIT_MAX_RETRIES,
    ):
        super().__init__(rpc, request_kwargs=request_kwargs)
        self.chain_id = chain_id
        self.max_retries = max_retries

    async def _wait_for_cooldown(self) -> None:
        remaining = _cooldown_remaining(self.chain_id, self.endpoint_uri)
        if remaining > 0:
            logger.debug(
                f"RPC {self.endpoint_uri} cooling down {remaining:.2f}s for chain {self.chain_id}"
            )
            await asyncio.sleep(remaining)

    async def _send(self, method: str, request_data: bytes, request_id: Any):
        await self._wait_for_cooldown()
        await get_rate_limiter().acquire()
        raw_response = await self._make_request(method, request_data)
        return _decode_rpc_response_with_id(self, raw_response, request_id)

    async def make_request(self, method, params):  # type: ignore[override]
        req = self.form_request(method, params)
        request_data = self.encode_rpc_dict(req)
        request_id = req.get("id")

        attempt = 0
        while True:
            try:
                response = await self._send(method, request_data, request_id)
            except Exception as exc:
                if not _is_rate_limited_exception(exc) or attempt >= self.max_retries:
                    raise
                cooldown = _mark_rate_limit_cooldown(
                    self.chain_id,
                    self.endpoint_uri,
                    _extract_retry_after_seconds_from_exception(exc)
                    or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS * (2**attempt),
                )
                logger.warning(
                    f"RPC rate-limited for chain {self.chain_id} method={method}; retrying in {cooldown:.2f}s. Error: {exc}"
                )
            else:
                error = response.get("error")
                if (
                    not isinstance(error, dict)
                    or not _is_rate_limited_rpc_error(error)
                    or attempt >= self.max_retries
                ):
                    return response
                cooldown = _mark_rate_limit_cooldown(
                    self.chain_id,
                    self.endpoint_uri,
                    _extract_cooldown_seconds_from_rpc_error(error)
                    or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS * (2**attempt),
                )
                logger.warning(
                    f"RPC returned rate-limit JSON-RPC error for chain {self.chain_id} method={method}; retrying in {cooldown:.2f}s. Error: {error}"
                )
            attempt += 1


def _get_rpcs_for_chain_id(chain_id: int) -> list:
    mapping = get_rpc_urls()
    rpcs = mapping.get(str(chain_id))
    if rpcs is None:
        rpcs = mapping.get(chain_id)  # allow int keys
    if rpcs is None:
        raise ValueError(f"No RPCs configured for chain ID {chain_id}")
    if isinstance(rpcs, str):
        return [rpcs]
    return rpcs


def _get_web3(rpc: str, chain_id: int) -> AsyncWeb3:
    provider = _ThrottledRpcProvider(
        rpc,
        chain_id,
        request_kwargs={"headers": AsyncHTTPProvider.get_request_headers()},
    )
    web3 = AsyncWeb3(provider)
    if chain_id in POA_MIDDLEWARE_CHAIN_IDS:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return web3


def get_transaction_chain_id(transaction: dict) -> int:
    if "chainId" not in transaction:
        raise ValueError("Transaction does not contain chainId")
    return int(transaction["chainId"])


def get_web3s_from_chain_id(chain_id: int) -> list[AsyncWeb3]:
    rpcs = _get_rpcs_for_chain_id(chain_id)
    return [_get_web3(rpc, chain_id) for rpc in rpcs]


@asynccontextmanager
async def web3s_from_chain_id(chain_id: int):
    web3s = get_web3s_from_chain_id(chain_id)
    try:
        yield web3s
    finally:
        for web3 in web3s:
            await web3.provider.disconnect()


@asynccontextmanager
async def web3_from_chain_id(chain_id: int):
    web3s = get_web3s_from_chain_id(chain_id)
    try:
        yield web3s[0]
    finally:
        for web3 in web3s:
            await web3.provider.disconnect()
