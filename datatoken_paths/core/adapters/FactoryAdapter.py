from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address

from datatoken_paths.core.adapters.BaseAdapter import BaseAdapter
from datatoken_paths.core.adapters.models import TokenTemplate, TxResult
from datatoken_paths.core.adapters.preconditions import FactoryOwner, requires
from datatoken_paths.core.config import get_network_config


class FactoryAdapter(BaseAdapter):
    """Base for the token factories, which share a template registry.

    ``factory_address`` defaults to the network's address table entry under
    ``address_key`` and is resolved on first use.
    """

    address_key: str
    factory_abi: list[dict[str, Any]]

    def __init__(
        self,
        name: str,
        chain_id: int,
        config: dict[str, Any] | None = None,
        *,
        factory_address: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, chain_id, config, **kwargs)
        self._factory_address = (
            to_checksum_address(factory_address) if factory_address else None
        )

    @property
    def factory_address(self) -> str:
        if self._factory_address is None:
            network = get_network_config(self.chain_id)
            self._factory_address = to_checksum_address(network.address(self.address_key))
        return self._factory_address

    async def _factory_call(self, fn_name: str, *args: Any) -> Any:
        return await self._call(self.factory_address, self.factory_abi, fn_name, *args)

    async def _factory_transact(
        self, fn_name: str, args: list[Any], **kwargs: Any
    ) -> TxResult:
        return await self._transact(
            self.factory_address, self.factory_abi, fn_name, args, **kwargs
        )

    async def get_owner(self) -> str:
        return to_checksum_address(await self._factory_call("owner"))

    async def get_current_token_count(self) -> int:
        return int(await self._factory_call("getCurrentTokenCount"))

    async def get_current_template_count(self) -> int:
        return int(await self._factory_call("getCurrentTemplateCount"))

    async def get_token_template(self, index: int) -> TokenTemplate:
        template_address, is_active = await self._factory_call(
            "getTokenTemplate", int(index)
        )
        return TokenTemplate(
            template_address=to_checksum_address(template_address),
            is_active=bool(is_active),
        )

    @requires(FactoryOwner())
    async def add_token_template(self, template_address: str) -> TxResult:
        return await self._factory_transact(
            "addTokenTemplate", [to_checksum_address(template_address)]
        )

    @requires(FactoryOwner())
    async def disable_token_template(self, template_index: int) -> TxResult:
        return await self._factory_transact("disableTokenTemplate", [int(template_index)])

    @requires(FactoryOwner())
    async def reactivate_token_template(self, template_index: int) -> TxResult:
        return await self._factory_transact(
            "reactivateTokenTemplate", [int(template_index)]
        )
