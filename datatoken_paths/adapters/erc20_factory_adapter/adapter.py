from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address

from datatoken_paths.core.adapters.FactoryAdapter import FactoryAdapter
from datatoken_paths.core.adapters.models import TxResult
from datatoken_paths.core.adapters.preconditions import FactoryOwner, requires
from datatoken_paths.core.constants.base import ADAPTER_ERC20_FACTORY
from datatoken_paths.core.constants.factory_abi import ERC20_FACTORY_ABI
from datatoken_paths.core.utils.transaction import SignCallback


class Erc20FactoryAdapter(FactoryAdapter):
    """Datatoken factory. Datatokens themselves are deployed through
    ``NftAdapter.create_datatoken``; this wraps the template registry."""

    adapter_type = ADAPTER_ERC20_FACTORY
    address_key = "ERC20Factory"
    factory_abi = ERC20_FACTORY_ABI

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
            "erc20_factory_adapter",
            chain_id,
            config,
            factory_address=factory_address,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
            **kwargs,
        )

    async def get_nft_factory(self) -> str:
        return to_checksum_address(await self._factory_call("erc721Factory"))

    @requires(FactoryOwner())
    async def set_erc721_factory(self, nft_factory_address: str) -> TxResult:
        return await self._factory_transact(
            "setERC721Factory", [to_checksum_address(nft_factory_address)]
        )
