from __future__ import annotations

from typing import Any

from hexbytes import HexBytes

from datatoken_paths.core.adapters.FactoryAdapter import FactoryAdapter
from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.config import get_network_config
from datatoken_paths.core.constants.base import (
    ADAPTER_NFT_FACTORY,
    DEFAULT_NFT_TEMPLATE_INDEX,
)
from datatoken_paths.core.constants.factory_abi import ERC721_FACTORY_ABI
from datatoken_paths.core.utils.names import generate_dt_name
from datatoken_paths.core.utils.transaction import SignCallback


class NftFactoryAdapter(FactoryAdapter):
    adapter_type = ADAPTER_NFT_FACTORY
    address_key = "ERC721Factory"
    factory_abi = ERC721_FACTORY_ABI

    def __init__(
        self,
        chain_id: int,
        config: dict[str, Any] | None = None,
        *,
        factory_address: str | None = None,
        sign_callback: SignCallback | None = None,
        wallet_address: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            "nft_factory_adapter",
            chain_id,
            config,
            factory_address=factory_address,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
            **kwargs,
        )

    async def create_nft(
        self,
        *,
        metadata_cache_uri: str | None = None,
        flags: bytes | str = b"",
        name: str | None = None,
        symbol: str | None = None,
        template_index: int = DEFAULT_NFT_TEMPLATE_INDEX,
    ) -> TxResult:
        """Deploy a data NFT owned by the sender; ``value`` is the NFT address.

        Name and symbol are generated when either is missing. The metadata
        cache URI defaults to the network's.
        """
        if not name or not symbol:
            generated = generate_dt_name()
            name, symbol = generated.name, generated.symbol
        if metadata_cache_uri is None:
            metadata_cache_uri = get_network_config(self.chain_id).metadata_cache_uri
        return await self._factory_transact(
            "deployERC721Contract",
            [
                name,
                symbol,
                metadata_cache_uri,
                bytes(HexBytes(flags)),
                int(template_index) or DEFAULT_NFT_TEMPLATE_INDEX,
            ],
            event="TokenCreated",
        )

    async def get_current_nft_count(self) -> int:
        return await self.get_current_token_count()
