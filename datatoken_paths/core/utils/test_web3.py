import copy
from unittest.mock import AsyncMock, patch

import pytest
from web3.middleware import ExtraDataToPOAMiddleware

import datatoken_paths.core.config as config
from datatoken_paths.core.constants.chains import CHAIN_ID_ETHEREUM, CHAIN_ID_POLYGON
from datatoken_paths.core.utils.throttle import set_rate_limiter
from datatoken_paths.core.utils.web3 import (
    _clear_rate_limit_cooldowns,
    _get_rpcs_for_chain_id,
    _get_web3,
    _ThrottledRpcProvider,
    get_transaction_chain_id,
)

RPC = "https://rpc.invalid"


class _RateLimitedError(Exception):
    def __init__(self):
        super().__init__("Too Many Requests")
        self.status = 429


@pytest.fixture(autouse=True)
def clear_cooldowns():
    _clear_rate_limit_cooldowns()
    yield
    _clear_rate_limit_cooldowns()


@pytest.fixture
def restore_global_config() -> None:
    original = copy.deepcopy(config.CONFIG)
    yield
    config.set_config(original)
    set_rate_limiter(None)


def _provider() -> _ThrottledRpcProvider:
    provider = _ThrottledRpcProvider(RPC, chain_id=CHAIN_ID_ETHEREUM)
    provider._wait_for_cooldown = AsyncMock()
    return provider


@pytest.mark.asyncio
async def test_retries_after_http_429():
    provider = _provider()
    provider._make_request = AsyncMock(
        side_effect=[
            _RateLimitedError(),
            b'{"jsonrpc":"2.0","id":1,"result":"0x1"}',
        ]
    )

    resp = await provider.make_request("eth_blockNumber", [])

    assert resp["result"] == "0x1"
    assert provider._make_request.await_count == 2


@pytest.mark.asyncio
async def test_retries_on_rpc_rate_limit_error_code():
    provider = _provider()
    provider._make_request = AsyncMock(
        side_effect=[
            b'{"jsonrpc":"2.0","id":1,"error":{"code":-32005,"message":"Limit exceeded","data":{"backoff_seconds":2}}}',
            b'{"jsonrpc":"2.0","id":1,"result":"0x2"}',
        ]
    )

    resp = await provider.make_request("eth_blockNumber", [])

    assert resp["result"] == "0x2"
    assert provider._make_request.await_count == 2


@pytest.mark.asyncio
async def test_does_not_retry_execution_errors():
    provider = _provider()
    provider._make_request = AsyncMock(
        return_value=(
            b'{"jsonrpc":"2.0","id":1,"error":{"code":3,"message":"execution reverted"}}'
        )
    )

    resp = await provider.make_request("eth_call", [])

    assert resp["error"]["code"] == 3
    assert provider._make_request.await_count == 1


@pytest.mark.asyncio
async def test_gives_up_after_max_retries():
    provider = _provider()
    provider.max_retries = 2
    provider._make_request = AsyncMock(side_effect=_RateLimitedError())

    with pytest.raises(_RateLimitedError):
        await provider.make_request("eth_blockNumber", [])

    assert provider._make_request.await_count == 3


@pytest.mark.asyncio
async def test_every_request_passes_through_rate_limiter():
    limiter = AsyncMock()
    provider = _provider()
    provider._make_request = AsyncMock(
        return_value=b'{"jsonrpc":"2.0","id":1,"result":"0x1"}'
    )

    with patch(
        "datatoken_paths.core.utils.web3.get_rate_limiter", return_value=limiter
    ):
        await provider.make_request("eth_blockNumber", [])
        await provider.make_request("eth_chainId", [])

    assert limiter.acquire.await_count == 2


def test_rpcs_from_config(restore_global_config):
    config.set_config({"rpc_urls": {"1": RPC, "137": [RPC, "https://b.invalid"]}})

    assert _get_rpcs_for_chain_id(1) == [RPC]
    assert _get_rpcs_for_chain_id(137) == [RPC, "https://b.invalid"]
    with pytest.raises(ValueError, match="No RPCs configured"):
        _get_rpcs_for_chain_id(56)


def test_poa_middleware_only_on_poa_chains():
    poa = _get_web3(RPC, CHAIN_ID_POLYGON)
    plain = _get_web3(RPC, CHAIN_ID_ETHEREUM)

    assert ExtraDataToPOAMiddleware in list(poa.middleware_onion)
    assert ExtraDataToPOAMiddleware not in list(plain.middleware_onion)
    assert isinstance(plain.provider, _ThrottledRpcProvider)


def test_transaction_chain_id():
    assert get_transaction_chain_id({"chainId": "137"}) == 137
    with pytest.raises(ValueError, match="Transaction does not contain chainId"):
        get_transaction_chain_id({})
