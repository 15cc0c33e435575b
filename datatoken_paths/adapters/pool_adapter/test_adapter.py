from unittest.mock import AsyncMock, patch

import pytest
from eth_abi import encode

from datatoken_paths.adapters.pool_adapter.adapter import PoolAdapter
from datatoken_paths.core.adapters.decorators import capture_outcome
from datatoken_paths.core.adapters.models import PoolCreateProgressStep
from datatoken_paths.core.constants.pool_abi import FACTORY_ROUTER_ABI, VAULT_ABI
from datatoken_paths.core.errors import (
    EventNotFoundError,
    TransactionRevertedError,
    UnsortedTokensError,
)
from datatoken_paths.core.utils.userdata import (
    CommunityFeeExit,
    ExactSharesInExit,
    ExactTokensInJoin,
    ExactTokensOutExit,
    InitJoin,
    MarketFeeExit,
    SingleTokenJoin,
    decode_exit_user_data,
    decode_join_user_data,
)
from datatoken_paths.testing.chain import address_topic, event_log

CHAIN_ID = 8996
USER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
COLLECTOR = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
ROUTER = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
VAULT = "0xBA12222222228d8Ba445958a75a0704d566BF2C8"
POOL = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"
TOKEN_A = "0x1111111111111111111111111111111111111111"
TOKEN_B = "0x2222222222222222222222222222222222222222"
POOL_ID = bytes.fromhex("ab" * 32)
ONE = 10**18


async def _sign(_tx):
    return b"\x00"


def _adapter() -> PoolAdapter:
    return PoolAdapter(
        CHAIN_ID,
        router_address=ROUTER,
        vault_address=VAULT,
        sign_callback=_sign,
        wallet_address=USER,
    )


def _new_pool_log(pool=POOL):
    return event_log(
        FACTORY_ROUTER_ABI,
        "NewPool",
        [],
        encode(["address", "bool"], [pool, True]),
        address=ROUTER,
    )


class _PoolReads:
    """Answers the view calls a pool operation makes."""

    def __init__(self, allowances=None, tokens=(TOKEN_A, TOKEN_B)):
        self.allowances = allowances or {}
        self.tokens = list(tokens)
        self.calls = []

    async def __call__(self, target, abi, fn_name, *args, **kwargs):
        self.calls.append((target, fn_name, args))
        if fn_name == "getPoolId":
            return POOL_ID
        if fn_name == "getPoolTokens":
            assert args == (POOL_ID,)
            return (self.tokens, [0] * len(self.tokens), 12)
        if fn_name == "allowance":
            return self.allowances.get(target, 0)
        if fn_name == "balanceOf":
            return 1_500_000_000_000_000_000
        raise AssertionError(f"unexpected view {fn_name}")


@pytest.fixture
def reads():
    fake = _PoolReads()
    with patch.object(
        PoolAdapter, "_call", new_callable=AsyncMock, side_effect=fake.__call__
    ):
        yield fake


def test_adapter_type():
    assert _adapter().adapter_type == "POOL"


def test_addresses_from_network_table():
    config = {"addresses": {"development": {"Router": ROUTER.lower()}}}
    with patch.dict("datatoken_paths.core.config.CONFIG", config, clear=True):
        adapter = PoolAdapter(CHAIN_ID)
        assert adapter.router_address == ROUTER
        assert adapter.vault_address == VAULT


@pytest.mark.asyncio
async def test_deploy_pool_converts_weights_and_fees(tx_recorder):
    tx_recorder.queue_logs(_new_pool_log())

    result = await _adapter().deploy_pool(
        name="Pool",
        symbol="PL",
        tokens=[TOKEN_A, TOKEN_B],
        weights=["0.5", "0.5"],
        swap_fee_percentage="0.001",
        swap_market_fee="0.002",
    )

    assert result.value == POOL
    call = tx_recorder.calls[0]
    assert call.target == ROUTER
    assert call.fn_name == "deployPool"
    assert call.args == [
        "Pool",
        "PL",
        [TOKEN_A, TOKEN_B],
        [ONE // 2, ONE // 2],
        ONE // 1000,
        ONE // 500,
        USER,
    ]


@pytest.mark.asyncio
async def test_deploy_pool_rejects_unsorted_tokens(tx_recorder):
    with pytest.raises(UnsortedTokensError):
        await _adapter().deploy_pool(
            name="Pool",
            symbol="PL",
            tokens=[TOKEN_B, TOKEN_A],
            weights=["0.5", "0.5"],
            swap_fee_percentage="0.001",
            swap_market_fee="0",
        )

    assert tx_recorder.calls == []


@pytest.mark.asyncio
async def test_deploy_pool_rejects_weight_mismatch(tx_recorder):
    with pytest.raises(ValueError, match="weights has 1 entries for 2 tokens"):
        await _adapter().deploy_pool(
            name="Pool",
            symbol="PL",
            tokens=[TOKEN_A, TOKEN_B],
            weights=["1"],
            swap_fee_percentage="0",
            swap_market_fee="0",
        )

    assert tx_recorder.calls == []


@pytest.mark.asyncio
async def test_create_pool_with_fork(tx_recorder):
    tx_recorder.queue_logs(
        event_log(
            FACTORY_ROUTER_ABI, "NewPoolFork", [], encode(["address"], [POOL])
        )
    )

    result = await _adapter().create_pool_with_fork(USER)

    assert result.value == POOL
    assert tx_recorder.calls[0].args == [USER]


@pytest.mark.asyncio
async def test_deploy_and_join_approves_only_short_allowances(reads, tx_recorder):
    reads.allowances = {TOKEN_A: 100 * ONE, TOKEN_B: 0}
    tx_recorder.queue_logs(_new_pool_log())
    steps = []

    deployment = await _adapter().deploy_and_join(
        name="Pool",
        symbol="PL",
        tokens=[TOKEN_A, TOKEN_B],
        weights=["0.5", "0.5"],
        amounts_in=["10", "2.5"],
        swap_fee_percentage="0.001",
        swap_market_fee="0",
        on_progress=steps.append,
    )

    assert steps == [
        PoolCreateProgressStep.CREATING_POOL,
        PoolCreateProgressStep.APPROVING_TOKENS,
        PoolCreateProgressStep.ADD_INITIAL_LIQUIDITY,
    ]
    assert tx_recorder.fn_names == ["deployPool", "approve", "joinPool"]
    assert deployment.pool_address == POOL
    assert len(deployment.approvals) == 1

    approve = tx_recorder.calls[1]
    assert approve.target == TOKEN_B
    assert approve.args == [VAULT, 2_500_000_000_000_000_000]

    join = tx_recorder.calls[2]
    pool_id, sender, recipient, request = join.args
    assets, max_amounts_in, user_data, from_internal = request
    assert (pool_id, sender, recipient) == (POOL_ID, USER, USER)
    assert assets == [TOKEN_A, TOKEN_B]
    assert max_amounts_in == [10 * ONE, 2_500_000_000_000_000_000]
    assert from_internal is False
    assert decode_join_user_data(user_data) == InitJoin(amounts_in=max_amounts_in)


@pytest.mark.asyncio
async def test_deploy_and_join_accepts_async_progress(reads, tx_recorder):
    reads.allowances = {TOKEN_A: 0, TOKEN_B: 0}
    tx_recorder.queue_logs(_new_pool_log())
    steps = []

    async def _progress(step):
        steps.append(step)

    await _adapter().deploy_and_join(
        name="Pool",
        symbol="PL",
        tokens=[TOKEN_A, TOKEN_B],
        weights=["0.5", "0.5"],
        amounts_in=["1", "1"],
        swap_fee_percentage="0",
        swap_market_fee="0",
        on_progress=_progress,
    )

    assert steps.count(PoolCreateProgressStep.APPROVING_TOKENS) == 2
    assert tx_recorder.fn_names == ["deployPool", "approve", "approve", "joinPool"]


@pytest.mark.asyncio
async def test_deploy_and_join_validates_lengths_first(reads, tx_recorder):
    with pytest.raises(ValueError, match="2 tokens"):
        await _adapter().deploy_and_join(
            name="Pool",
            symbol="PL",
            tokens=[TOKEN_A, TOKEN_B],
            weights=["0.5", "0.5"],
            amounts_in=["1"],
            swap_fee_percentage="0",
            swap_market_fee="0",
        )

    assert tx_recorder.calls == []
    assert reads.calls == []


@pytest.mark.asyncio
async def test_deploy_and_join_stops_without_pool_event(reads, tx_recorder):
    with pytest.raises(EventNotFoundError, match="NewPool"):
        await _adapter().deploy_and_join(
            name="Pool",
            symbol="PL",
            tokens=[TOKEN_A, TOKEN_B],
            weights=["0.5", "0.5"],
            amounts_in=["1", "1"],
            swap_fee_percentage="0",
            swap_market_fee="0",
        )

    assert tx_recorder.fn_names == ["deployPool"]


@pytest.mark.asyncio
async def test_approve_vault_skips_when_allowance_suffices(reads, tx_recorder):
    reads.allowances = {TOKEN_A: 5 * ONE}
    adapter = _adapter()

    assert await adapter.approve_vault(TOKEN_A, "5") is None
    forced = await adapter.approve_vault(TOKEN_A, "5", force=True)
    short = await adapter.approve_vault(TOKEN_A, "5.000000000000000001")

    assert forced is not None
    assert short is not None
    assert [c.args[1] for c in tx_recorder.calls] == [5 * ONE, 5 * ONE + 1]


@pytest.mark.asyncio
async def test_join_pool_exact_tokens_in(reads, tx_recorder):
    await _adapter().join_pool(POOL, ["1", "2"], "0.5")

    _, _, _, (assets, max_in, user_data, _) = tx_recorder.calls[0].args
    assert max_in == [ONE, 2 * ONE]
    assert decode_join_user_data(user_data) == ExactTokensInJoin(
        amounts_in=[ONE, 2 * ONE], min_shares_out=ONE // 2
    )


@pytest.mark.asyncio
async def test_single_join(reads, tx_recorder):
    await _adapter().single_join(POOL, ["0", "3"], "1", token_index=1)

    _, _, _, (_, max_in, user_data, _) = tx_recorder.calls[0].args
    assert max_in == [0, 3 * ONE]
    assert decode_join_user_data(user_data) == SingleTokenJoin(
        min_shares_out=ONE, token_index=1
    )


@pytest.mark.asyncio
async def test_single_join_rejects_bad_index(reads, tx_recorder):
    with pytest.raises(ValueError, match="token_index 2"):
        await _adapter().single_join(POOL, ["0", "3"], "1", token_index=2)

    assert tx_recorder.calls == []


@pytest.mark.asyncio
async def test_exit_exact_in_and_out(reads, tx_recorder):
    adapter = _adapter()

    await adapter.exit_pool_exact_in(POOL, ["0.1", "0.2"], "3")
    await adapter.exit_pool_exact_out(POOL, ["1", "2"], "4")

    _, _, _, (_, min_out, user_data, to_internal) = tx_recorder.calls[0].args
    assert min_out == [ONE // 10, ONE // 5]
    assert to_internal is False
    assert decode_exit_user_data(user_data) == ExactSharesInExit(shares_in=3 * ONE)

    _, _, _, (_, min_out, user_data, _) = tx_recorder.calls[1].args
    assert min_out == [ONE, 2 * ONE]
    assert decode_exit_user_data(user_data) == ExactTokensOutExit(
        amounts_out=[ONE, 2 * ONE], max_shares_in=4 * ONE
    )


@pytest.mark.asyncio
async def test_exit_exact_out_revert_propagates(reads, tx_recorder):
    tx_recorder.queue_revert("BAL#305")

    with pytest.raises(TransactionRevertedError) as exc_info:
        await _adapter().exit_pool_exact_out(POOL, ["900", "2"], "1")

    assert exc_info.value.reason == "BAL#305"
    assert exc_info.value.receipt["status"] == 0
    assert tx_recorder.fn_names == ["exitPool"]


@pytest.mark.asyncio
async def test_reverted_joins_and_exits_fold_into_outcome(reads, tx_recorder):
    adapter = _adapter()
    tx_recorder.queue_revert("BAL#304")
    tx_recorder.queue_revert("BAL#208")

    exited = await capture_outcome(
        adapter.exit_pool_exact_out(POOL, ["900", "2"], "1")
    )
    joined = await capture_outcome(adapter.join_pool(POOL, ["1", "2"], "50"))

    assert exited.status == "reverted"
    assert exited.reason == "BAL#304"
    assert exited.tx_hash == f"0x{1:064x}"
    assert not exited.ok
    assert joined.status == "reverted"
    assert joined.reason == "BAL#208"


@pytest.mark.asyncio
async def test_exit_length_mismatch_is_rejected(reads, tx_recorder):
    with pytest.raises(ValueError):
        await _adapter().exit_pool_exact_in(POOL, ["0.1"], "3")

    assert tx_recorder.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, payload",
    [
        ("collect_market_fee", MarketFeeExit()),
        ("collect_community_fee", CommunityFeeExit()),
    ],
)
async def test_fee_collection_sends_to_collector(reads, tx_recorder, method, payload):
    await getattr(_adapter(), method)(POOL, COLLECTOR.lower())

    call = tx_recorder.calls[0]
    pool_id, sender, recipient, (assets, min_out, user_data, _) = call.args
    assert call.target == VAULT
    assert call.fn_name == "exitPool"
    assert (sender, recipient) == (USER, COLLECTOR)
    assert min_out == [0, 0]
    assert decode_exit_user_data(user_data) == payload


@pytest.mark.asyncio
async def test_set_market_fee_collector(tx_recorder):
    await _adapter().set_market_fee_collector(POOL, COLLECTOR)

    call = tx_recorder.calls[0]
    assert (call.target, call.fn_name, call.args) == (
        POOL,
        "updateMarketCollector",
        [COLLECTOR],
    )


@pytest.mark.asyncio
async def test_pool_reads(reads):
    adapter = _adapter()

    assert await adapter.get_pool_id(POOL) == "0x" + "ab" * 32
    assert await adapter.get_pool_tokens(POOL) == [TOKEN_A, TOKEN_B]
    assert await adapter.get_lp_balance(POOL) == "1.5"
    assert await adapter.allowance_vault(TOKEN_A) == "0"

    allowance_call = reads.calls[-1]
    assert allowance_call == (TOKEN_A, "allowance", (USER, VAULT))


def test_pool_balance_deltas():
    receipt = {
        "logs": [
            event_log(
                VAULT_ABI,
                "PoolBalanceChanged",
                [POOL_ID, address_topic(USER)],
                encode(
                    ["address[]", "int256[]", "uint256[]"],
                    [[TOKEN_A, TOKEN_B], [ONE, -2 * ONE], [0, 7]],
                ),
                address=VAULT,
            )
        ]
    }

    (delta,) = PoolAdapter.pool_balance_deltas(receipt)

    assert delta.pool_id == "0x" + "ab" * 32
    assert delta.liquidity_provider == USER
    assert delta.tokens == [TOKEN_A, TOKEN_B]
    assert delta.deltas == [ONE, -2 * ONE]
    assert delta.protocol_fee_amounts == [0, 7]
    assert PoolAdapter.pool_balance_deltas({"logs": []}) == []
