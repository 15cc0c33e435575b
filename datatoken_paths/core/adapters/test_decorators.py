import pytest

from datatoken_paths.core.adapters.decorators import capture_outcome, outcome
from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.errors import (
    EventNotFoundError,
    PermissionDeniedError,
    TransactionRevertedError,
)

TOKEN = "0x1111111111111111111111111111111111111111"


async def _returns(value):
    return value


async def _raises(exc):
    raise exc


@pytest.mark.asyncio
async def test_creation_result_is_success_with_value():
    result = await capture_outcome(
        _returns(TxResult(tx_hash="0xabc", value=TOKEN, event_name="TokenCreated"))
    )

    assert result.ok
    assert result.value == TOKEN
    assert result.tx_hash == "0xabc"


@pytest.mark.asyncio
async def test_plain_transaction_success_carries_hash():
    result = await capture_outcome(_returns(TxResult(tx_hash="0xabc")))

    assert result.status == "success"
    assert result.value == "0xabc"


@pytest.mark.asyncio
async def test_view_value_passes_through():
    result = await capture_outcome(_returns("10.5"))

    assert result.status == "success"
    assert result.value == "10.5"
    assert result.tx_hash is None


@pytest.mark.asyncio
async def test_missing_event_is_unparseable_not_failure():
    result = await capture_outcome(
        _returns(
            TxResult(tx_hash="0xabc", event_name="NewPool", event_missing=True)
        )
    )

    assert result.status == "unparseable"
    assert result.tx_hash == "0xabc"
    assert "NewPool" in result.reason


@pytest.mark.asyncio
async def test_four_outcomes_are_distinct():
    denied = await capture_outcome(_raises(PermissionDeniedError("manager")))
    reverted = await capture_outcome(
        _raises(TransactionRevertedError("0xdead", reason="not minter"))
    )
    unparseable = await capture_outcome(
        _raises(EventNotFoundError("TokenCreated", "0xbeef"))
    )
    success = await capture_outcome(_returns(1))

    assert [o.status for o in (denied, reverted, unparseable, success)] == [
        "denied",
        "reverted",
        "unparseable",
        "success",
    ]
    assert reverted.reason == "not minter"
    assert reverted.tx_hash == "0xdead"
    assert unparseable.tx_hash == "0xbeef"


@pytest.mark.asyncio
async def test_other_errors_still_raise():
    with pytest.raises(ValueError):
        await capture_outcome(_raises(ValueError("bad amount")))


@pytest.mark.asyncio
async def test_outcome_decorator_wraps_method():
    class _Adapter:
        @outcome
        async def add_manager(self, who):
            raise PermissionDeniedError("nft owner", holder=who)

    result = await _Adapter().add_manager(TOKEN)

    assert result.status == "denied"
    assert TOKEN in result.reason
