from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address
from hexbytes import HexBytes

from datatoken_paths.core.adapters.BaseAdapter import BaseAdapter
from datatoken_paths.core.adapters.models import (
    MetadataAndTokenUri,
    MetadataProof,
    NftMetadata,
    TxResult,
)
from datatoken_paths.core.adapters.preconditions import AnyOf, NftOwner, NftRole, requires
from datatoken_paths.core.constants.base import (
    ADAPTER_NFT,
    DEFAULT_DATATOKEN_CAP,
    DEFAULT_DATATOKEN_TEMPLATE_INDEX,
    DEFAULT_NFT_TOKEN_ID,
    ZERO_ADDRESS,
)
from datatoken_paths.core.constants.erc721_template_abi import ERC721_TEMPLATE_ABI
from datatoken_paths.core.utils.names import generate_dt_name
from datatoken_paths.core.utils.permissions import PermissionSet, get_nft_permissions
from datatoken_paths.core.utils.transaction import SignCallback
from datatoken_paths.core.utils.units import to_fixed_point


def _bytes32(key: bytes | str) -> bytes:
    value = bytes(HexBytes(key))
    if len(value) != 32:
        raise ValueError(f"expected a 32-byte key, got {len(value)} bytes")
    return value


class NftAdapter(BaseAdapter):
    """Wrapper for data NFT (ERC721 template) contracts.

    The NFT address is passed per call; one adapter serves every NFT on its
    chain. Role-gated writes check the sender's role first and raise
    ``PermissionDeniedError`` without sending anything when it is missing.
    """

    adapter_type = ADAPTER_NFT

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
            "nft_adapter",
            chain_id,
            config,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
            **kwargs,
        )

    async def _nft_transact(
        self, nft_address: str, fn_name: str, args: list[Any], **kwargs: Any
    ) -> TxResult:
        return await self._transact(
            nft_address, ERC721_TEMPLATE_ABI, fn_name, args, **kwargs
        )

    async def _nft_call(self, nft_address: str, fn_name: str, *args: Any) -> Any:
        return await self._call(nft_address, ERC721_TEMPLATE_ABI, fn_name, *args)

    @requires(NftRole("datatoken_deployer"))
    async def create_datatoken(
        self,
        nft_address: str,
        *,
        minter: str,
        payment_collector: str,
        mp_fee_address: str = ZERO_ADDRESS,
        fee_token: str = ZERO_ADDRESS,
        fee_amount: str = "0",
        cap: str = DEFAULT_DATATOKEN_CAP,
        name: str | None = None,
        symbol: str | None = None,
        template_index: int = DEFAULT_DATATOKEN_TEMPLATE_INDEX,
    ) -> TxResult:
        """Deploy a datatoken owned by this NFT; ``value`` is the datatoken address.

        ``cap`` and ``fee_amount`` are display amounts. Name and symbol are
        generated when either is missing.
        """
        if not name or not symbol:
            generated = generate_dt_name()
            name, symbol = generated.name, generated.symbol
        return await self._nft_transact(
            nft_address,
            "createERC20",
            [
                int(template_index) or DEFAULT_DATATOKEN_TEMPLATE_INDEX,
                [name, symbol],
                [
                    to_checksum_address(minter),
                    to_checksum_address(payment_collector),
                    to_checksum_address(mp_fee_address),
                    to_checksum_address(fee_token),
                ],
                [to_fixed_point(cap), to_fixed_point(fee_amount)],
                [],
            ],
            event="TokenCreated",
        )

    @requires(NftOwner())
    async def add_manager(self, nft_address: str, manager: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "addManager", [to_checksum_address(manager)]
        )

    @requires(NftOwner())
    async def remove_manager(self, nft_address: str, manager: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "removeManager", [to_checksum_address(manager)]
        )

    @requires(NftRole("manager"))
    async def add_datatoken_deployer(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "addToCreateERC20List", [to_checksum_address(user)]
        )

    @requires(
        AnyOf(NftRole("manager"), NftRole("datatoken_deployer", self_arg="user"))
    )
    async def remove_datatoken_deployer(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "removeFromCreateERC20List", [to_checksum_address(user)]
        )

    @requires(NftRole("manager"))
    async def add_metadata_updater(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "addToMetadataList", [to_checksum_address(user)]
        )

    @requires(AnyOf(NftRole("manager"), NftRole("metadata_updater", self_arg="user")))
    async def remove_metadata_updater(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "removeFromMetadataList", [to_checksum_address(user)]
        )

    @requires(NftRole("manager"))
    async def add_store_updater(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "addTo725StoreList", [to_checksum_address(user)]
        )

    @requires(AnyOf(NftRole("manager"), NftRole("store_updater", self_arg="user")))
    async def remove_store_updater(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "removeFrom725StoreList", [to_checksum_address(user)]
        )

    @requires(NftRole("manager"))
    async def add_v3_minter(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "addV3Minter", [to_checksum_address(user)]
        )

    @requires(NftRole("manager"))
    async def remove_v3_minter(self, nft_address: str, user: str) -> TxResult:
        return await self._nft_transact(
            nft_address, "removeV3Minter", [to_checksum_address(user)]
        )

    @requires(NftRole("v3_minter"))
    async def wrap_v3_datatoken(
        self, nft_address: str, datatoken_address: str, new_minter: str
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "wrapV3DT",
            [to_checksum_address(datatoken_address), to_checksum_address(new_minter)],
        )

    @requires(NftRole("v3_minter"))
    async def mint_v3_datatoken(
        self, nft_address: str, datatoken_address: str, to: str, amount: str
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "mintV3DT",
            [
                to_checksum_address(datatoken_address),
                to_checksum_address(to),
                to_fixed_point(amount),
            ],
        )

    @requires(NftOwner())
    async def clean_permissions(self, nft_address: str) -> TxResult:
        """Drop every role on the NFT and its datatokens; the owner keeps ownership."""
        return await self._nft_transact(nft_address, "cleanPermissions", [])

    @requires(NftOwner())
    async def transfer_nft(
        self, nft_address: str, receiver: str, token_id: int = DEFAULT_NFT_TOKEN_ID
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "transferFrom",
            [self._require_wallet(), to_checksum_address(receiver), int(token_id)],
        )

    @requires(NftOwner())
    async def safe_transfer_nft(
        self, nft_address: str, receiver: str, token_id: int = DEFAULT_NFT_TOKEN_ID
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "safeTransferFrom",
            [self._require_wallet(), to_checksum_address(receiver), int(token_id)],
        )

    @requires(NftRole("metadata_updater"))
    async def set_metadata(
        self,
        nft_address: str,
        *,
        metadata_state: int,
        decryptor_url: str,
        decryptor_address: str,
        flags: bytes,
        data: bytes,
        metadata_hash: bytes | str,
        metadata_proofs: list[MetadataProof] | None = None,
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "setMetaData",
            [
                int(metadata_state),
                decryptor_url,
                decryptor_address,
                bytes(flags),
                bytes(data),
                _bytes32(metadata_hash),
                [p.as_tuple() for p in metadata_proofs or []],
            ],
        )

    @requires(NftRole("metadata_updater"))
    async def set_metadata_state(self, nft_address: str, metadata_state: int) -> TxResult:
        return await self._nft_transact(
            nft_address, "setMetaDataState", [int(metadata_state)]
        )

    @requires(NftRole("metadata_updater"))
    async def set_metadata_and_token_uri(
        self, nft_address: str, metadata: MetadataAndTokenUri
    ) -> TxResult:
        return await self._nft_transact(
            nft_address, "setMetaDataAndTokenURI", [metadata.as_tuple()]
        )

    async def set_token_uri(
        self, nft_address: str, token_uri: str, token_id: int = DEFAULT_NFT_TOKEN_ID
    ) -> TxResult:
        return await self._nft_transact(
            nft_address, "setTokenURI", [int(token_id), token_uri]
        )

    @requires(NftRole("store_updater"))
    async def set_new_data(
        self, nft_address: str, key: bytes | str, value: bytes | str
    ) -> TxResult:
        if isinstance(value, str) and not value.startswith("0x"):
            value = value.encode()
        return await self._nft_transact(
            nft_address, "setNewData", [_bytes32(key), bytes(HexBytes(value))]
        )

    @requires(NftRole("manager"))
    async def execute_call(
        self,
        nft_address: str,
        *,
        operation: int,
        to: str,
        value: str,
        data: bytes,
    ) -> TxResult:
        return await self._nft_transact(
            nft_address,
            "executeCall",
            [int(operation), to_checksum_address(to), to_fixed_point(value), bytes(data)],
        )

    async def get_owner(
        self, nft_address: str, token_id: int = DEFAULT_NFT_TOKEN_ID
    ) -> str:
        owner = await self._nft_call(nft_address, "ownerOf", int(token_id))
        return to_checksum_address(owner)

    async def get_permissions(self, nft_address: str, holder: str) -> PermissionSet:
        return await get_nft_permissions(self.chain_id, nft_address, holder)

    async def get_metadata(self, nft_address: str) -> NftMetadata:
        url, address, state, has_metadata = await self._nft_call(
            nft_address, "getMetaData"
        )
        return NftMetadata(
            decryptor_url=url,
            decryptor_address=address,
            state=int(state),
            has_metadata=bool(has_metadata),
        )

    async def is_datatoken_deployer(self, nft_address: str, holder: str) -> bool:
        return bool(
            await self._nft_call(
                nft_address, "isERC20Deployer", to_checksum_address(holder)
            )
        )

    async def get_data(self, nft_address: str, key: bytes | str) -> bytes:
        return bytes(await self._nft_call(nft_address, "getData", _bytes32(key)))

    async def get_token_uri(
        self, nft_address: str, token_id: int = DEFAULT_NFT_TOKEN_ID
    ) -> str:
        return await self._nft_call(nft_address, "tokenURI", int(token_id))

    async def get_name(self, nft_address: str) -> str:
        return await self._nft_call(nft_address, "name")

    async def get_symbol(self, nft_address: str) -> str:
        return await self._nft_call(nft_address, "symbol")
