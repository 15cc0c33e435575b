from unittest.mock import AsyncMock, patch

import pytest
from eth_abi import encode

from datatoken_paths.adapters.nft_factory_adapter.adapter import NftFactoryAdapter
from datatoken_paths.core.constants.factory_abi import ERC721_FACTORY_ABI
from datatoken_paths.core.errors import PermissionDeniedError
from datatoken_paths.testing.chain import address_topic, event_log

CHAIN_ID = 8996
OWNER = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
OTHER = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
FACTORY = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
NEW_NFT = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"
TEMPLATE = "0x1111111111111111111111111111111111111111"


async def _sign(_tx):
    return b"\x00"


def _adapter(wallet=OWNER) -> NftFactoryAdapter:
    return NftFactoryAdapter(
        CHAIN_ID, factory_address=FACTORY, sign_callback=_sign, wallet_address=wallet
    )


def _token_created(name="Data NFT"):
    return event_log(
        ERC721_FACTORY_ABI,
        "TokenCreated",
        [address_topic(NEW_NFT), address_topic(TEMPLATE)],
        encode(["string", "address"], [name, OWNER]),
        address=FACTORY,
    )


def _factory_owner(owner):
    return patch(
        "datatoken_paths.core.adapters.preconditions.get_contract_owner",
        new_callable=AsyncMock,
        return_value=owner,
    )


def test_adapter_type():
    assert _adapter().adapter_type == "NFT_FACTORY"


@pytest.mark.asyncio
async def test_create_nft_returns_nft_address(tx_recorder):
    tx_recorder.queue_logs(_token_created())

    result = await _adapter().create_nft(
        metadata_cache_uri="https://cache.invalid",
        flags="0x01",
        name="Data NFT",
        symbol="DNFT",
    )

    assert result.value == NEW_NFT
    assert result.require_value() == NEW_NFT
    call = tx_recorder.calls[0]
    assert call.target == FACTORY
    assert call.fn_name == "deployERC721Contract"
    assert call.args == ["Data NFT", "DNFT", "https://cache.invalid", b"\x01", 1]


@pytest.mark.asyncio
async def test_create_nft_fills_name_and_cache_uri(tx_recorder):
    tx_recorder.queue_logs(_token_created())
    with patch.dict("datatoken_paths.core.config.CONFIG", {}, clear=True):
        await _adapter().create_nft(name="only a name", template_index=0)

    name, symbol, cache_uri, flags, template_index = tx_recorder.calls[0].args
    assert name.endswith(" Token")
    assert "-" in symbol
    assert cache_uri == "http://127.0.0.1:5000"
    assert flags == b""
    assert template_index == 1


def test_factory_address_from_network_table():
    config = {"addresses": {"development": {"ERC721Factory": FACTORY.lower()}}}
    with patch.dict("datatoken_paths.core.config.CONFIG", config, clear=True):
        adapter = NftFactoryAdapter(CHAIN_ID)
        assert adapter.factory_address == FACTORY


def test_missing_factory_address_raises():
    with patch.dict("datatoken_paths.core.config.CONFIG", {}, clear=True):
        with pytest.raises(KeyError, match="ERC721Factory"):
            NftFactoryAdapter(CHAIN_ID).factory_address


@pytest.mark.asyncio
async def test_template_admin_requires_factory_owner(tx_recorder):
    with _factory_owner(OWNER):
        with pytest.raises(PermissionDeniedError) as exc:
            await _adapter(OTHER).add_token_template(TEMPLATE)

    assert exc.value.capability == "factory owner"
    assert exc.value.contract == FACTORY
    assert tx_recorder.sent == 0


@pytest.mark.asyncio
async def test_template_admin_as_owner(tx_recorder):
    adapter = _adapter()
    with _factory_owner(OWNER.lower()):
        await adapter.add_token_template(TEMPLATE)
        await adapter.disable_token_template(2)
        await adapter.reactivate_token_template(2)

    assert tx_recorder.fn_names == [
        "addTokenTemplate",
        "disableTokenTemplate",
        "reactivateTokenTemplate",
    ]
    assert tx_recorder.calls[1].args == [2]


@pytest.mark.asyncio
async def test_counts_and_template_reads():
    adapter = _adapter()
    with patch.object(
        NftFactoryAdapter,
        "_call",
        new_callable=AsyncMock,
        side_effect=[3, 2, (TEMPLATE, True)],
    ) as mock_call:
        assert await adapter.get_current_nft_count() == 3
        assert await adapter.get_current_template_count() == 2
        template = await adapter.get_token_template(1)

    assert template.template_address == TEMPLATE
    assert template.is_active is True
    assert mock_call.await_args_list[2].args == (
        FACTORY,
        ERC721_FACTORY_ABI,
        "getTokenTemplate",
        1,
    )
